from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from school_attendance.core.enums import ClassName, Section
from school_attendance.core.exceptions import ValidationError


def _mark(service, student, status, when):
    service.mark(student_id=student.student_id, status=status, marked_by=1, when=when)


def test_recent_class_summary_counts_and_rate(attendance_service, report_service, students_repo, fixed_now):
    a, b, c = (students_repo.add(n, str(i), class_name="5", section="A") for i, n in enumerate("ABC", start=1))
    _mark(attendance_service, a, "present", fixed_now)
    _mark(attendance_service, b, "present", fixed_now)
    _mark(attendance_service, c, "absent", fixed_now)

    summaries = report_service.recent_class_summaries(now=fixed_now)

    assert len(summaries) == 1
    s = summaries[0]
    assert (s.class_name, s.section, s.day) == (ClassName.GRADE_5, Section.A, fixed_now.date())
    assert (s.total_students, s.present_count, s.absent_count) == (3, 2, 1)
    assert s.attendance_rate == pytest.approx(66.67, abs=0.01)


def test_recent_class_summary_counts_late_as_present(attendance_service, report_service, students_repo, fixed_now):
    a = students_repo.add("A", "1")
    _mark(attendance_service, a, "late", fixed_now)

    [s] = report_service.recent_class_summaries(now=fixed_now)

    assert (s.present_count, s.absent_count, s.attendance_rate) == (1, 0, 100.0)


def test_recent_class_summaries_only_today_sorted_and_limited(attendance_service, report_service, students_repo, fixed_now):
    groups = [("7", "B"), ("10", "A"), ("7", "A"), ("KG1", "C")]
    for i, (cls, sec) in enumerate(groups):
        _mark(attendance_service, students_repo.add(f"S{i}", "1", class_name=cls, section=sec), "present", fixed_now)
    yesterday_only = students_repo.add("Y", "9", class_name="1", section="A")
    _mark(attendance_service, yesterday_only, "absent", fixed_now - timedelta(days=1))

    keys = [(s.class_name.value, s.section.value) for s in report_service.recent_class_summaries(now=fixed_now, limit=10)]
    assert keys == [("10", "A"), ("7", "A"), ("7", "B"), ("KG1", "C")]

    assert len(report_service.recent_class_summaries(now=fixed_now, limit=2)) == 2


def test_recent_class_summaries_empty_day(report_service, fixed_now):
    assert report_service.recent_class_summaries(now=fixed_now) == []


def test_recent_class_summaries_rejects_non_positive_limit(report_service, fixed_now):
    with pytest.raises(ValidationError):
        report_service.recent_class_summaries(now=fixed_now, limit=0)


def test_student_report_totals(attendance_service, report_service, students_repo):
    s = students_repo.add("A", "1")
    start = datetime(2026, 3, 2, 9, 0)
    for offset, status in enumerate(["present", "present", "present", "absent", "late"]):
        _mark(attendance_service, s, status, start + timedelta(days=offset))

    [row] = report_service.student_report(start=date(2026, 3, 2), end=date(2026, 3, 6))

    assert (row.total_days, row.present_days, row.absent_days, row.late_days) == (5, 4, 1, 1)
    assert row.attendance_percentage == pytest.approx(80.0)
    assert row.first_name == "A"


def test_student_report_range_is_inclusive_by_day(attendance_service, report_service, students_repo):
    s = students_repo.add("A", "1")
    _mark(attendance_service, s, "present", datetime(2026, 3, 1, 23, 59))
    _mark(attendance_service, s, "absent", datetime(2026, 3, 2, 0, 0))
    _mark(attendance_service, s, "present", datetime(2026, 3, 4, 23, 59, 59))
    _mark(attendance_service, s, "present", datetime(2026, 3, 5, 0, 0))

    [row] = report_service.student_report(start=date(2026, 3, 2), end=date(2026, 3, 4))

    assert (row.total_days, row.present_days, row.absent_days) == (2, 1, 1)


def test_student_report_filters_by_current_class_and_orders_by_roll(
    attendance_service, student_service, report_service, students_repo
):
    when = datetime(2026, 3, 2, 9)
    for roll in ("010", "1", "002"):
        _mark(attendance_service, students_repo.add(f"R{roll}", roll, class_name="5", section="A"), "present", when)
    mover = students_repo.add("Mover", "3", class_name="5", section="A")
    _mark(attendance_service, mover, "absent", when)
    student_service.update(mover.student_id, {"section": "B"})

    rows = report_service.student_report(start=date(2026, 3, 1), end=date(2026, 3, 31), class_name="5", section="A")

    assert [r.roll_number for r in rows] == ["1", "002", "010"]
    assert [r.first_name for r in report_service.student_report(section="B")] == ["Mover"]


def test_student_report_rejects_inverted_range(report_service):
    with pytest.raises(ValidationError):
        report_service.student_report(start=date(2026, 3, 5), end=date(2026, 3, 1))


def test_student_report_skips_orphaned_rows(attendance_service, report_service, students_repo, attendance_repo):
    s = students_repo.add("A", "1")
    _mark(attendance_service, s, "present", datetime(2026, 3, 2, 9))
    students_repo.delete_by_id(s.student_id)

    assert report_service.student_report() == []
    assert len(attendance_repo.records) == 1
