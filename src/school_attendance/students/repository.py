from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ClassName, Section
from .model import Student


class StudentRepository(Protocol):
    """Repository interface for Student.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def find_active_by_roll(self, *, roll_number: str, class_name: ClassName, section: Section) -> Optional[Student]:
        raise NotImplementedError

    def create_student(
        self,
        *,
        first_name: str,
        last_name: str,
        roll_number: str,
        class_name: ClassName,
        section: Section,
    ) -> int:
        """Insert and return the new id; raise DuplicateRollNumber on a unique-key clash."""

        raise NotImplementedError

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
        """Overwrite every mutable column; raise DuplicateRollNumber on a unique-key clash."""

        raise NotImplementedError

    def delete_by_id(self, student_id: int) -> bool:
        raise NotImplementedError

    def list_active(
        self,
        *,
        class_name: Optional[ClassName] = None,
        section: Optional[Section] = None,
        search: Optional[str] = None,
    ) -> Sequence[Student]:
        raise NotImplementedError
