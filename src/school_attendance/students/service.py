from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from ..common.validators import clean_text, optional_choice, require_bool, require_choice, require_non_empty
from ..core.enums import ClassName, Section
from ..core.exceptions import DomainError, DuplicateRollNumber, NotFound, StorageError
from .cascade import CascadeCoordinator
from .model import BulkRegisterResult, RowFailure, Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

# Spreadsheet headers and camelCase API keys -> field name; snake_case keys pass through.
_ROW_ALIASES = {
    "First Name": "first_name",
    "Last Name": "last_name",
    "Roll Number": "roll_number",
    "Class": "class_name",
    "class": "class_name",
    "Section": "section",
    "firstName": "first_name",
    "lastName": "last_name",
    "rollNumber": "roll_number",
    "isActive": "is_active",
}

_PATCHABLE = ("first_name", "last_name", "roll_number", "class_name", "section", "is_active")


def _normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    return {_ROW_ALIASES.get(k, k): v for k, v in row.items()}


class StudentService:
    """Use case: maintain the student roster."""

    def __init__(self, students: StudentRepository, cascade: CascadeCoordinator):
        self._students = students
        self._cascade = cascade

    def get(self, student_id: int) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFound(f"Student {student_id} not found")
        return student

    def register(
        self,
        *,
        first_name: Any,
        roll_number: Any,
        class_name: Union[ClassName, str],
        section: Union[Section, str],
        last_name: Any = None,
    ) -> Student:
        first_name = require_non_empty(first_name, "first_name")
        last_name = clean_text(last_name)
        roll_number = require_non_empty(roll_number, "roll_number")
        class_name = require_choice(ClassName, class_name, "class")
        section = require_choice(Section, section, "section", upper=True)

        if self._students.find_active_by_roll(roll_number=roll_number, class_name=class_name, section=section):
            raise DuplicateRollNumber(roll_number, class_name.value, section.value)

        student_id = self._students.create_student(
            first_name=first_name,
            last_name=last_name,
            roll_number=roll_number,
            class_name=class_name,
            section=section,
        )
        logger.info("Registered student %s (%s) in %s-%s", student_id, roll_number, class_name.value, section.value)
        return self.get(student_id)

    def register_row(self, row: Mapping[str, Any]) -> Student:
        row = _normalize_row(row)
        return self.register(
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            roll_number=row.get("roll_number"),
            class_name=row.get("class_name"),
            section=row.get("section"),
        )

    def update(self, student_id: int, patch: Mapping[str, Any]) -> Student:
        """Apply a partial update.

        Supplied fields are validated, but uniqueness of the roll number is
        not re-checked against other students; storage may still refuse.
        """
        current = self.get(student_id)
        patch = {k: v for k, v in _normalize_row(patch).items() if k in _PATCHABLE}

        first_name = current.first_name
        if "first_name" in patch:
            first_name = require_non_empty(patch["first_name"], "first_name")
        last_name = clean_text(patch["last_name"]) if "last_name" in patch else current.last_name
        roll_number = current.roll_number
        if "roll_number" in patch:
            roll_number = require_non_empty(patch["roll_number"], "roll_number")
        class_name = optional_choice(ClassName, patch.get("class_name"), "class") or current.class_name
        section = optional_choice(Section, patch.get("section"), "section", upper=True) or current.section
        is_active = require_bool(patch["is_active"], "is_active") if "is_active" in patch else current.is_active

        self._students.update_student(
            student_id=student_id,
            first_name=first_name,
            last_name=last_name,
            roll_number=roll_number,
            class_name=class_name,
            section=section,
            is_active=is_active,
        )
        return self.get(student_id)

    def list_students(
        self,
        *,
        class_name: Optional[Union[ClassName, str]] = None,
        section: Optional[Union[Section, str]] = None,
        search: Optional[str] = None,
    ) -> list[Student]:
        class_name = optional_choice(ClassName, class_name, "class")
        section = optional_choice(Section, section, "section", upper=True)
        search = clean_text(search) or None

        students = self._students.list_active(class_name=class_name, section=section, search=search)
        return sorted(students, key=lambda s: s.sort_key)

    def bulk_register(self, rows: Sequence[Mapping[str, Any]]) -> BulkRegisterResult:
        """Register each row on its own; failures are reported per row, never rolled back."""
        result = BulkRegisterResult(total=len(rows))
        for index, raw in enumerate(rows):
            try:
                student = self.register_row(raw)
            except (DomainError, StorageError) as e:
                result.failed.append(RowFailure(row_index=index, reason=str(e) or "Failed to create student"))
                continue
            result.succeeded.append(student)

        logger.info(
            "Bulk registration completed: %d added, %d errors", len(result.succeeded), len(result.failed)
        )
        return result

    def remove(self, student_id: int) -> int:
        return self._cascade.remove_student(student_id)
