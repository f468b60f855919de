from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceDetail, AttendanceRecord


class AttendanceRepository(Protocol):
    def find_for_student_between(
        self, student_id: int, start: datetime, end: datetime
    ) -> Optional[AttendanceRecord]:
        """Record of ``student_id`` dated within ``[start, end]`` (both inclusive)."""

        raise NotImplementedError

    def insert_record(
        self,
        *,
        student_id: int,
        attendance_date: datetime,
        status: AttendanceStatus,
        marked_by: int,
        remarks: Optional[str] = None,
    ) -> int:
        """Insert and return the new id.

        Raises ConcurrentMarkConflict when a record already exists for the
        student on that calendar day (storage-level unique key).
        """

        raise NotImplementedError

    def update_marking(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        marked_by: int,
        remarks: Optional[str] = None,
    ) -> bool:
        """Overwrite status/remarks/marked_by; the stored date is left untouched."""

        raise NotImplementedError

    def get_detail(self, attendance_id: int) -> Optional[AttendanceDetail]:
        raise NotImplementedError

    def list_details(
        self,
        *,
        start: Optional[datetime] = None,
        before: Optional[datetime] = None,
        student_id: Optional[int] = None,
    ) -> Sequence[AttendanceDetail]:
        """Rows dated in ``[start, before)`` joined to their current student, newest first.

        Rows whose student no longer exists are not returned.
        """

        raise NotImplementedError

    def delete_for_student(self, student_id: int) -> int:
        raise NotImplementedError

    def delete_orphans(self) -> int:
        raise NotImplementedError

    def delete_between(self, *, start: datetime, before: datetime) -> int:
        raise NotImplementedError
