from __future__ import annotations

from enum import Enum


class ClassName(str, Enum):
    """Grade a student is enrolled in."""

    KG1 = "KG1"
    KG2 = "KG2"
    GRADE_1 = "1"
    GRADE_2 = "2"
    GRADE_3 = "3"
    GRADE_4 = "4"
    GRADE_5 = "5"
    GRADE_6 = "6"
    GRADE_7 = "7"
    GRADE_8 = "8"
    GRADE_9 = "9"
    GRADE_10 = "10"
    GRADE_11 = "11"
    GRADE_12 = "12"


class Section(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"


class AttendanceStatus(str, Enum):
    """Status stored for one student on one calendar day."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
