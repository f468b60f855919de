from __future__ import annotations

import logging

from ..attendance.repository import AttendanceRepository
from ..core.exceptions import CascadePurgeError, NotFound, StorageError
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class CascadeCoordinator:
    """Removes a student, then every attendance record that references it.

    The two deletes are separate writes. If the purge fails after the student
    is gone, the orphaned rows stay (``AttendanceService.purge_orphans``
    repairs them) and CascadePurgeError is raised; nothing is rolled back.
    """

    def __init__(self, students: StudentRepository, attendance: AttendanceRepository):
        self._students = students
        self._attendance = attendance

    def remove_student(self, student_id: int) -> int:
        if not self._students.get_by_id(student_id):
            raise NotFound(f"Student {student_id} not found")

        if not self._students.delete_by_id(student_id):
            # Deleted by someone else in the meantime.
            raise NotFound(f"Student {student_id} not found")

        try:
            purged = self._attendance.delete_for_student(student_id)
        except StorageError as e:
            logger.error("Student %s deleted but attendance purge failed: %s", student_id, e)
            raise CascadePurgeError(student_id, e) from e

        logger.info("Deleted student %s and %d attendance records", student_id, purged)
        return purged
