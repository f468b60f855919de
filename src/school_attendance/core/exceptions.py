from __future__ import annotations

from datetime import date
from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class MissingField(ValidationError):
    def __init__(self, field: str):
        super().__init__(f"{field} is required")
        self.field = field


class InvalidEnum(ValidationError):
    """Raised when a value falls outside a closed set (class, section, status)."""

    def __init__(self, field: str, value: object, allowed: tuple[str, ...] = ()):
        message = f"Invalid {field}: {value!r}"
        if allowed:
            message += f" (expected one of {', '.join(allowed)})"
        super().__init__(message)
        self.field = field
        self.value = value


class DuplicateRollNumber(ValidationError):
    def __init__(self, roll_number: str, class_name: str, section: str):
        super().__init__(f"Student with roll number {roll_number} already exists in {class_name}-{section}")
        self.roll_number = roll_number
        self.class_name = class_name
        self.section = section


class NotFound(DomainError):
    """Raised when an entity id does not resolve."""


class StudentNotFound(NotFound):
    def __init__(self, student_id: int):
        super().__init__(f"Student {student_id} not found")
        self.student_id = student_id


class ConcurrentMarkConflict(DomainError):
    """Another writer inserted the same (student, day) record first.

    Retryable: the caller may mark again and will update the winner's row.
    """

    def __init__(self, student_id: int, day: date):
        super().__init__(f"Attendance for student {student_id} on {day.isoformat()} was marked concurrently")
        self.student_id = student_id
        self.day = day


class StorageError(Exception):
    """Opaque wrapper around driver-level failures (connectivity, unclassified constraints)."""


class CascadePurgeError(StorageError):
    """The student row is gone but its attendance rows could not be purged."""

    def __init__(self, student_id: int, cause: Optional[BaseException] = None):
        super().__init__(f"Student {student_id} deleted but attendance purge failed")
        self.student_id = student_id
        self.cause = cause
