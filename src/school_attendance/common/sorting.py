from __future__ import annotations

import re

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


def roll_number_key(roll_number: str) -> int:
    """Numeric sort value of a roll number.

    The leading integer counts ("12A" sorts as 12); rolls without one all
    sort as 0, ahead of any positive numeric roll and equal to each other.
    """
    if not isinstance(roll_number, str):
        return 0
    match = _LEADING_INTEGER.match(roll_number)
    return int(match.group(1)) if match else 0


def roster_key(class_name: str, section: str, roll_number: str) -> tuple[str, str, int]:
    return class_name, section, roll_number_key(roll_number)
