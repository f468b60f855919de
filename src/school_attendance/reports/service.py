from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from ..attendance.model import AttendanceDetail
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import next_day_start, now_local, start_of_day
from ..common.validators import optional_choice
from ..core.constants import DEFAULT_RECENT_CLASSES_LIMIT
from ..core.enums import ClassName, Section
from ..core.exceptions import ValidationError
from .model import ClassDaySummary, StatusTally, StudentReportRow


class ReportService:
    """Aggregations over the attendance ledger.

    Percentages are relative to the days on which attendance was actually
    recorded for a student; a day without a record is not an absence.
    """

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def recent_class_summaries(
        self,
        *,
        limit: int = DEFAULT_RECENT_CLASSES_LIMIT,
        now: Optional[datetime] = None,
    ) -> list[ClassDaySummary]:
        """Today's attendance per (class, section)."""
        if int(limit) < 1:
            raise ValidationError("limit must be a positive integer")

        now = now or now_local()
        rows = self._attendance.list_details(start=start_of_day(now), before=next_day_start(now))
        if not rows:
            return []

        groups: dict[tuple[str, str, date], tuple[AttendanceDetail, StatusTally]] = {}
        for r in rows:
            key = (r.class_name.value, r.section.value, r.attendance_date.date())
            if key not in groups:
                groups[key] = (r, StatusTally())
            groups[key][1].add(r.status)

        summaries = [
            ClassDaySummary(
                class_name=first.class_name,
                section=first.section,
                day=key[2],
                total_students=tally.total,
                present_count=tally.present,
                absent_count=tally.absent,
                attendance_rate=tally.rate,
            )
            for key, (first, tally) in groups.items()
        ]
        summaries.sort(key=lambda s: (s.class_name.value, s.section.value))
        return summaries[: int(limit)]

    def student_report(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        class_name: Optional[Union[ClassName, str]] = None,
        section: Optional[Union[Section, str]] = None,
    ) -> list[StudentReportRow]:
        """Per-student totals over ``[start, end]`` (whole calendar days, inclusive)."""
        if start is not None and end is not None and start > end:
            raise ValidationError("start date must not be after end date")

        class_name = optional_choice(ClassName, class_name, "class")
        section = optional_choice(Section, section, "section", upper=True)

        rows = self._attendance.list_details(
            start=start_of_day(start) if start is not None else None,
            before=next_day_start(end) if end is not None else None,
        )

        groups: dict[int, tuple[AttendanceDetail, StatusTally]] = {}
        for r in rows:
            if r.student_id not in groups:
                groups[r.student_id] = (r, StatusTally())
            groups[r.student_id][1].add(r.status)

        report = [
            StudentReportRow(
                student_id=student_id,
                first_name=info.first_name,
                last_name=info.last_name,
                roll_number=info.roll_number,
                class_name=info.class_name,
                section=info.section,
                total_days=tally.total,
                present_days=tally.present,
                absent_days=tally.absent,
                late_days=tally.late,
                attendance_percentage=tally.rate,
            )
            for student_id, (info, tally) in groups.items()
            if (class_name is None or info.class_name == class_name) and (section is None or info.section == section)
        ]
        report.sort(key=lambda row: row.sort_key)
        return report
