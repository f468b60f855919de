from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Union

from ..common.datetime_utils import as_datetime, day_bounds, next_day_start, now_local, start_of_day
from ..common.validators import optional_choice, require_choice
from ..core.enums import AttendanceStatus, ClassName, Section
from ..core.exceptions import ConcurrentMarkConflict, DomainError, StorageError, StudentNotFound
from ..students.repository import StudentRepository
from .model import AttendanceDetail, BulkMarkResult, MarkItem, MarkOutcome
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _to_millis(value: datetime) -> datetime:
    # The ledger stores millisecond precision; truncate so the stored day never rounds forward.
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


class AttendanceService:
    """Use case: mark and read the attendance ledger.

    One record per (student, calendar day). Marking the same day again
    overwrites status, remarks and marker in place; the first stored date and
    the record id survive.
    """

    def __init__(self, attendance: AttendanceRepository, students: StudentRepository):
        self._attendance = attendance
        self._students = students

    def mark(
        self,
        *,
        student_id: int,
        status: Union[AttendanceStatus, str],
        marked_by: int,
        when: Optional[Union[date, datetime]] = None,
        remarks: Optional[str] = None,
    ) -> AttendanceDetail:
        return self.record_mark(
            student_id=student_id, status=status, marked_by=marked_by, when=when, remarks=remarks
        ).detail

    def record_mark(
        self,
        *,
        student_id: int,
        status: Union[AttendanceStatus, str],
        marked_by: int,
        when: Optional[Union[date, datetime]] = None,
        remarks: Optional[str] = None,
    ) -> MarkOutcome:
        """Like ``mark``, also telling whether the day's record was created."""
        status = require_choice(AttendanceStatus, status, "status")

        if not self._students.get_by_id(student_id):
            raise StudentNotFound(student_id)

        attendance_date = _to_millis(as_datetime(when) if when is not None else now_local())
        attendance_id, created = self._upsert(
            student_id=student_id,
            attendance_date=attendance_date,
            status=status,
            marked_by=marked_by,
            remarks=remarks,
        )

        detail = self._attendance.get_detail(attendance_id)
        if detail is None:
            # Student removed between the write and the re-read.
            raise StudentNotFound(student_id)
        return MarkOutcome(detail=detail, created=created)

    def _upsert(
        self,
        *,
        student_id: int,
        attendance_date: datetime,
        status: AttendanceStatus,
        marked_by: int,
        remarks: Optional[str],
    ) -> tuple[int, bool]:
        start, end = day_bounds(attendance_date)

        existing = self._attendance.find_for_student_between(student_id, start, end)
        if existing:
            self._attendance.update_marking(
                attendance_id=existing.attendance_id,
                status=status,
                marked_by=marked_by,
                remarks=remarks,
            )
            return existing.attendance_id, False

        try:
            attendance_id = self._attendance.insert_record(
                student_id=student_id,
                attendance_date=attendance_date,
                status=status,
                marked_by=marked_by,
                remarks=remarks,
            )
            return attendance_id, True
        except ConcurrentMarkConflict:
            # Another writer created the day's record after our read: update theirs.
            logger.info("Concurrent mark for student %s on %s; updating existing record", student_id, start.date())
            winner = self._attendance.find_for_student_between(student_id, start, end)
            if winner is None:
                raise
            self._attendance.update_marking(
                attendance_id=winner.attendance_id,
                status=status,
                marked_by=marked_by,
                remarks=remarks,
            )
            return winner.attendance_id, False

    def mark_bulk(
        self,
        *,
        items: Iterable[MarkItem],
        marked_by: int,
        when: Optional[Union[date, datetime]] = None,
    ) -> BulkMarkResult:
        """Mark every item on the same date, skipping (and logging) failures.

        Unlike bulk registration, only the number of written items is reported.
        """
        when = when if when is not None else now_local()
        count = 0
        for item in items:
            try:
                self.mark(
                    student_id=item.student_id,
                    status=item.status,
                    marked_by=marked_by,
                    when=when,
                    remarks=item.remarks,
                )
                count += 1
            except (DomainError, StorageError) as e:
                logger.warning("Error processing attendance for student %s: %s", item.student_id, e)
        return BulkMarkResult(count=count)

    def query(
        self,
        *,
        on: Optional[Union[date, datetime]] = None,
        student_id: Optional[int] = None,
        class_name: Optional[Union[ClassName, str]] = None,
        section: Optional[Union[Section, str]] = None,
    ) -> list[AttendanceDetail]:
        class_name = optional_choice(ClassName, class_name, "class")
        section = optional_choice(Section, section, "section", upper=True)

        start = start_of_day(on) if on is not None else None
        before = next_day_start(on) if on is not None else None

        rows = self._attendance.list_details(start=start, before=before, student_id=student_id)

        # Class/section reflect the student's current assignment, not the one at marking time.
        return [
            r
            for r in rows
            if (class_name is None or r.class_name == class_name) and (section is None or r.section == section)
        ]

    def purge_orphans(self) -> int:
        removed = self._attendance.delete_orphans()
        if removed:
            logger.info("Purged %d orphaned attendance records", removed)
        return removed

    def clear_day(self, day: Union[date, datetime]) -> int:
        removed = self._attendance.delete_between(start=start_of_day(day), before=next_day_start(day))
        logger.info("Deleted %d attendance records for %s", removed, start_of_day(day).date())
        return removed
