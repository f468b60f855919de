from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus, ClassName, Section
from ..core.exceptions import ConcurrentMarkConflict
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceDetail, AttendanceRecord
from .repository import AttendanceRepository

_DETAIL_SELECT = """
    SELECT
        ar.attendance_id, ar.student_id, ar.attendance_date, ar.status, ar.remarks, ar.marked_by,
        s.first_name, s.last_name, s.roll_number, s.class_name, s.section,
        a.username AS marked_by_name
    FROM attendance_records ar
    JOIN students s ON s.student_id = ar.student_id
    LEFT JOIN admins a ON a.admin_id = ar.marked_by
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        marked_by=int(r["marked_by"]),
        remarks=r.get("remarks"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _to_detail(r: Dict[str, Any]) -> AttendanceDetail:
    return AttendanceDetail(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        first_name=r["first_name"],
        last_name=r.get("last_name") or "",
        roll_number=r["roll_number"],
        class_name=ClassName(r["class_name"]),
        section=Section(r["section"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        marked_by=int(r["marked_by"]),
        marked_by_name=r.get("marked_by_name"),
        remarks=r.get("remarks"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_for_student_between(
        self, student_id: int, start: datetime, end: datetime
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, student_id, attendance_date, status, remarks, marked_by, created_at, updated_at
                FROM attendance_records
                WHERE student_id=%s AND attendance_date BETWEEN %s AND %s
                ORDER BY attendance_id ASC
                LIMIT 1
                """,
                (int(student_id), start, end),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert_record(
        self,
        *,
        student_id: int,
        attendance_date: datetime,
        status: AttendanceStatus,
        marked_by: int,
        remarks: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(student_id, attendance_date, attendance_day, status, remarks, marked_by)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(student_id),
                        attendance_date,
                        attendance_date.date(),
                        status.value,
                        remarks,
                        int(marked_by),
                    ),
                )
            except mysql.connector.IntegrityError as e:
                if is_duplicate_key(e):
                    raise ConcurrentMarkConflict(int(student_id), attendance_date.date()) from e
                raise
            return int(cur.lastrowid)

    def update_marking(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        marked_by: int,
        remarks: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, remarks=%s, marked_by=%s
                WHERE attendance_id=%s
                """,
                (status.value, remarks, int(marked_by), int(attendance_id)),
            )
            return cur.rowcount > 0

    def get_detail(self, attendance_id: int) -> Optional[AttendanceDetail]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_DETAIL_SELECT} WHERE ar.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_detail(r) if r else None

    def list_details(
        self,
        *,
        start: Optional[datetime] = None,
        before: Optional[datetime] = None,
        student_id: Optional[int] = None,
    ) -> Sequence[AttendanceDetail]:
        clauses: list[str] = []
        params: list[object] = []

        if start is not None:
            clauses.append("ar.attendance_date >= %s")
            params.append(start)
        if before is not None:
            clauses.append("ar.attendance_date < %s")
            params.append(before)
        if student_id is not None:
            clauses.append("ar.student_id=%s")
            params.append(int(student_id))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_DETAIL_SELECT}
                {where}
                ORDER BY ar.attendance_date DESC, ar.attendance_id DESC
                """,
                tuple(params),
            )
            return [_to_detail(r) for r in fetchall(cur)]

    def delete_for_student(self, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE student_id=%s", (int(student_id),))
            return int(cur.rowcount)

    def delete_orphans(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE ar FROM attendance_records ar
                LEFT JOIN students s ON s.student_id = ar.student_id
                WHERE s.student_id IS NULL
                """
            )
            return int(cur.rowcount)

    def delete_between(self, *, start: datetime, before: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE attendance_date >= %s AND attendance_date < %s",
                (start, before),
            )
            return int(cur.rowcount)
