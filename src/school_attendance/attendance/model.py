from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from ..core.enums import AttendanceStatus, ClassName, Section


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's status on one calendar day."""

    attendance_id: int
    student_id: int
    attendance_date: datetime
    status: AttendanceStatus
    marked_by: int
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceDetail:
    """Read-model: a record joined with the student's current attributes and the marker's name."""

    attendance_id: int
    student_id: int
    first_name: str
    last_name: str
    roll_number: str
    class_name: ClassName
    section: Section
    attendance_date: datetime
    status: AttendanceStatus
    marked_by: int
    marked_by_name: Optional[str] = None
    remarks: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.attendance_id,
            "student": {
                "id": self.student_id,
                "first_name": self.first_name,
                "last_name": self.last_name,
                "roll_number": self.roll_number,
                "class": self.class_name.value,
                "section": self.section.value,
            },
            "date": self.attendance_date.isoformat(timespec="milliseconds"),
            "status": self.status.value,
            "remarks": self.remarks,
            "marked_by": {"id": self.marked_by, "username": self.marked_by_name},
        }


@dataclass(frozen=True)
class MarkOutcome:
    """A marking plus whether it created the day's record (false: updated in place)."""

    detail: AttendanceDetail
    created: bool


@dataclass(frozen=True)
class MarkItem:
    student_id: int
    status: Union[AttendanceStatus, str]
    remarks: Optional[str] = None


@dataclass(frozen=True)
class BulkMarkResult:
    """Bulk marking reports only how many items were written."""

    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"message": "Bulk attendance marked successfully", "count": self.count}
