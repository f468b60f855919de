from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from ..common.sorting import roster_key
from ..core.enums import AttendanceStatus, ClassName, Section


@dataclass
class StatusTally:
    """Running counts for one group; late counts as present."""

    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0

    def add(self, status: AttendanceStatus) -> None:
        if status is AttendanceStatus.PRESENT:
            self.present += 1
        elif status is AttendanceStatus.LATE:
            self.present += 1
            self.late += 1
        elif status is AttendanceStatus.ABSENT:
            self.absent += 1
        else:
            raise ValueError(f"Unhandled attendance status: {status!r}")
        self.total += 1

    @property
    def rate(self) -> float:
        return self.present / self.total * 100 if self.total else 0.0


@dataclass(frozen=True)
class ClassDaySummary:
    class_name: ClassName
    section: Section
    day: date
    total_students: int
    present_count: int
    absent_count: int
    attendance_rate: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "class": self.class_name.value,
            "section": self.section.value,
            "date": self.day.isoformat(),
            "total_students": self.total_students,
            "present_count": self.present_count,
            "absent_count": self.absent_count,
            "attendance_rate": self.attendance_rate,
        }


@dataclass(frozen=True)
class StudentReportRow:
    student_id: int
    first_name: str
    last_name: str
    roll_number: str
    class_name: ClassName
    section: Section
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    attendance_percentage: float

    @property
    def sort_key(self) -> tuple[str, str, int]:
        return roster_key(self.class_name.value, self.section.value, self.roll_number)

    def to_dict(self) -> dict[str, Any]:
        return {
            "student": {
                "id": self.student_id,
                "first_name": self.first_name,
                "last_name": self.last_name,
                "roll_number": self.roll_number,
                "class": self.class_name.value,
                "section": self.section.value,
            },
            "total_days": self.total_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "late_days": self.late_days,
            "attendance_percentage": self.attendance_percentage,
        }
