from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import ClassName, Section
from ..core.exceptions import DuplicateRollNumber
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, like_pattern
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, first_name, last_name, roll_number, class_name, section, is_active, created_at, updated_at"


def _to_student(r: Dict[str, Any]) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        first_name=r["first_name"],
        last_name=r.get("last_name") or "",
        roll_number=r["roll_number"],
        class_name=ClassName(r["class_name"]),
        section=Section(r["section"]),
        is_active=bool(r.get("is_active", True)),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def find_active_by_roll(self, *, roll_number: str, class_name: ClassName, section: Section) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE roll_number=%s AND class_name=%s AND section=%s AND is_active=1
                LIMIT 1
                """,
                (roll_number, class_name.value, section.value),
            )
            row = fetchone(cur)
            return _to_student(row) if row else None

    def create_student(
        self,
        *,
        first_name: str,
        last_name: str,
        roll_number: str,
        class_name: ClassName,
        section: Section,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO students(first_name, last_name, roll_number, class_name, section, is_active)
                    VALUES(%s,%s,%s,%s,%s,1)
                    """,
                    (first_name, last_name, roll_number, class_name.value, section.value),
                )
            except mysql.connector.IntegrityError as e:
                if is_duplicate_key(e):
                    raise DuplicateRollNumber(roll_number, class_name.value, section.value) from e
                raise
            return int(cur.lastrowid)

    def update_student(
        self,
        *,
        student_id: int,
        first_name: str,
        last_name: str,
        roll_number: str,
        class_name: ClassName,
        section: Section,
        is_active: bool,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    UPDATE students
                    SET first_name=%s, last_name=%s, roll_number=%s, class_name=%s, section=%s, is_active=%s
                    WHERE student_id=%s
                    """,
                    (
                        first_name,
                        last_name,
                        roll_number,
                        class_name.value,
                        section.value,
                        1 if is_active else 0,
                        int(student_id),
                    ),
                )
            except mysql.connector.IntegrityError as e:
                if is_duplicate_key(e):
                    raise DuplicateRollNumber(roll_number, class_name.value, section.value) from e
                raise

    def delete_by_id(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0

    def list_active(
        self,
        *,
        class_name: Optional[ClassName] = None,
        section: Optional[Section] = None,
        search: Optional[str] = None,
    ) -> Sequence[Student]:
        clauses = ["is_active=1"]
        params: list[object] = []

        if class_name is not None:
            clauses.append("class_name=%s")
            params.append(class_name.value)
        if section is not None:
            clauses.append("section=%s")
            params.append(section.value)
        if search:
            pattern = like_pattern(search.lower())
            clauses.append("(LOWER(first_name) LIKE %s OR LOWER(last_name) LIKE %s OR LOWER(roll_number) LIKE %s)")
            params.extend([pattern, pattern, pattern])

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE {where}
                ORDER BY class_name ASC, section ASC, student_id ASC
                """,
                tuple(params),
            )
            return [_to_student(r) for r in fetchall(cur)]
