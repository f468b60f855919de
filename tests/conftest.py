from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from school_attendance.attendance.model import AttendanceDetail, AttendanceRecord
from school_attendance.container import build_services
from school_attendance.core.enums import ClassName, Section
from school_attendance.core.exceptions import ConcurrentMarkConflict, DuplicateRollNumber
from school_attendance.students.model import Student


class InMemoryStudents:
    def __init__(self):
        self.students: dict[int, Student] = {}
        self._id = 0

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.students.get(student_id)

    def find_active_by_roll(self, *, roll_number, class_name, section) -> Optional[Student]:
        for s in self.students.values():
            if s.is_active and (s.roll_number, s.class_name, s.section) == (roll_number, class_name, section):
                return s
        return None

    def _check_unique(self, student_id, roll_number, class_name, section) -> None:
        for s in self.students.values():
            if s.student_id != student_id and (s.roll_number, s.class_name, s.section) == (
                roll_number,
                class_name,
                section,
            ):
                raise DuplicateRollNumber(roll_number, class_name.value, section.value)

    def create_student(self, *, first_name, last_name, roll_number, class_name, section) -> int:
        self._check_unique(None, roll_number, class_name, section)
        self._id += 1
        self.students[self._id] = Student(
            student_id=self._id,
            first_name=first_name,
            last_name=last_name,
            roll_number=roll_number,
            class_name=class_name,
            section=section,
        )
        return self._id

    def update_student(self, *, student_id, first_name, last_name, roll_number, class_name, section, is_active) -> None:
        self._check_unique(student_id, roll_number, class_name, section)
        self.students[student_id] = replace(
            self.students[student_id],
            first_name=first_name,
            last_name=last_name,
            roll_number=roll_number,
            class_name=class_name,
            section=section,
            is_active=is_active,
        )

    def delete_by_id(self, student_id: int) -> bool:
        return self.students.pop(student_id, None) is not None

    def list_active(self, *, class_name=None, section=None, search=None):
        needle = (search or "").lower()
        out = []
        for s in self.students.values():
            if not s.is_active:
                continue
            if class_name is not None and s.class_name != class_name:
                continue
            if section is not None and s.section != section:
                continue
            if needle and not any(needle in v.lower() for v in (s.first_name, s.last_name, s.roll_number)):
                continue
            out.append(s)
        return out

    def add(self, first_name, roll_number, class_name="5", section="A", last_name="") -> Student:
        """Test helper: insert without going through the service."""
        student_id = self.create_student(
            first_name=first_name,
            last_name=last_name,
            roll_number=roll_number,
            class_name=ClassName(class_name),
            section=Section(section),
        )
        return self.students[student_id]


class InMemoryAttendance:
    """Ledger fake enforcing the same (student, day) unique key as the schema."""

    def __init__(self, students: InMemoryStudents, admin_names: Optional[dict[int, str]] = None):
        self.records: dict[int, AttendanceRecord] = {}
        self._students = students
        self._admin_names = admin_names or {}
        self._id = 0
        self._lock = threading.Lock()

    def find_for_student_between(self, student_id, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        with self._lock:
            for r in sorted(self.records.values(), key=lambda r: r.attendance_id):
                if r.student_id == student_id and start <= r.attendance_date <= end:
                    return r
            return None

    def insert_record(self, *, student_id, attendance_date, status, marked_by, remarks=None) -> int:
        with self._lock:
            for r in self.records.values():
                if r.student_id == student_id and r.attendance_date.date() == attendance_date.date():
                    raise ConcurrentMarkConflict(student_id, attendance_date.date())
            self._id += 1
            self.records[self._id] = AttendanceRecord(
                attendance_id=self._id,
                student_id=student_id,
                attendance_date=attendance_date,
                status=status,
                marked_by=marked_by,
                remarks=remarks,
            )
            return self._id

    def update_marking(self, *, attendance_id, status, marked_by, remarks=None) -> bool:
        with self._lock:
            r = self.records.get(attendance_id)
            if not r:
                return False
            self.records[attendance_id] = replace(r, status=status, marked_by=marked_by, remarks=remarks)
            return True

    def _detail(self, r: AttendanceRecord) -> Optional[AttendanceDetail]:
        s = self._students.get_by_id(r.student_id)
        if s is None:
            return None
        return AttendanceDetail(
            attendance_id=r.attendance_id,
            student_id=r.student_id,
            first_name=s.first_name,
            last_name=s.last_name,
            roll_number=s.roll_number,
            class_name=s.class_name,
            section=s.section,
            attendance_date=r.attendance_date,
            status=r.status,
            marked_by=r.marked_by,
            marked_by_name=self._admin_names.get(r.marked_by),
            remarks=r.remarks,
        )

    def get_detail(self, attendance_id) -> Optional[AttendanceDetail]:
        r = self.records.get(attendance_id)
        return self._detail(r) if r else None

    def list_details(self, *, start=None, before=None, student_id=None):
        rows = []
        for r in self.records.values():
            if start is not None and r.attendance_date < start:
                continue
            if before is not None and r.attendance_date >= before:
                continue
            if student_id is not None and r.student_id != student_id:
                continue
            d = self._detail(r)
            if d is not None:
                rows.append(d)
        rows.sort(key=lambda d: (d.attendance_date, d.attendance_id), reverse=True)
        return rows

    def delete_for_student(self, student_id) -> int:
        doomed = [k for k, r in self.records.items() if r.student_id == student_id]
        for k in doomed:
            del self.records[k]
        return len(doomed)

    def delete_orphans(self) -> int:
        doomed = [k for k, r in self.records.items() if self._students.get_by_id(r.student_id) is None]
        for k in doomed:
            del self.records[k]
        return len(doomed)

    def delete_between(self, *, start, before) -> int:
        doomed = [k for k, r in self.records.items() if start <= r.attendance_date < before]
        for k in doomed:
            del self.records[k]
        return len(doomed)

    def count_for(self, student_id: int) -> int:
        return sum(1 for r in self.records.values() if r.student_id == student_id)


ADMIN_ID = 7


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 15, 30)


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents()


@pytest.fixture
def attendance_repo(students_repo) -> InMemoryAttendance:
    return InMemoryAttendance(students_repo, admin_names={ADMIN_ID: "office"})


@pytest.fixture
def container(students_repo, attendance_repo):
    return build_services(students_repo=students_repo, attendance_repo=attendance_repo)


@pytest.fixture
def student_service(container):
    return container.student_service


@pytest.fixture
def attendance_service(container):
    return container.attendance_service


@pytest.fixture
def report_service(container):
    return container.report_service


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from school_attendance.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    c = app.test_client()
    with c.session_transaction() as sess:
        sess["user_id"] = ADMIN_ID
    return c


@pytest.fixture
def admin_id() -> int:
    return ADMIN_ID
