from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.sorting import roster_key
from ..core.enums import ClassName, Section


@dataclass(frozen=True)
class Student:
    """Domain entity: one enrolled student.

    Note: Plain data object; no DB access here.
    """

    student_id: int
    first_name: str
    last_name: str
    roll_number: str
    class_name: ClassName
    section: Section
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def sort_key(self) -> tuple[str, str, int]:
        return roster_key(self.class_name.value, self.section.value, self.roll_number)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.student_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "roll_number": self.roll_number,
            "class": self.class_name.value,
            "section": self.section.value,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class RowFailure:
    row_index: int
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row_index, "error": self.reason}


@dataclass(frozen=True)
class BulkRegisterResult:
    """Per-row outcome of a bulk registration (not atomic)."""

    total: int
    succeeded: list[Student] = field(default_factory=list)
    failed: list[RowFailure] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "success": [s.to_dict() for s in self.succeeded],
            "errors": [f.to_dict() for f in self.failed],
        }
