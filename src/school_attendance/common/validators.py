from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import InvalidEnum, MissingField, ValidationError

E = TypeVar("E", bound=Enum)


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def require_non_empty(value: Any, field_name: str) -> str:
    cleaned = clean_text(value)
    if not cleaned:
        raise MissingField(field_name)
    return cleaned


def require_choice(enum_cls: Type[E], value: Any, field_name: str, *, upper: bool = False) -> E:
    """Coerce ``value`` into a member of ``enum_cls`` or raise InvalidEnum."""
    if isinstance(value, enum_cls):
        return value
    cleaned = clean_text(value)
    if upper:
        cleaned = cleaned.upper()
    try:
        return enum_cls(cleaned)
    except ValueError:
        raise InvalidEnum(field_name, value, tuple(m.value for m in enum_cls)) from None


def optional_choice(enum_cls: Type[E], value: Any, field_name: str, *, upper: bool = False) -> Optional[E]:
    if value is None or clean_text(value) == "":
        return None
    return require_choice(enum_cls, value, field_name, upper=upper)


_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}


def require_bool(value: Any, field_name: str) -> bool:
    """Accept real booleans, 0/1 and the usual form words; anything else is invalid."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    cleaned = clean_text(value).lower()
    if cleaned in _TRUE_WORDS:
        return True
    if cleaned in _FALSE_WORDS:
        return False
    raise ValidationError(f"Invalid {field_name}: {value!r} (expected true or false)")
