from __future__ import annotations

import logging
from datetime import date

from ..core.enums import AttendeeType
from ..core.exceptions import DuplicateAttendanceError
from .repository import StudentAttendanceRepository, TeacherAttendanceRepository

logger = logging.getLogger(__name__)


class DuplicateGuard:
    """Refuses a second bulk creation for the same scope and date.

    The scope is the class for student attendance and the school for teacher
    attendance. Any existing record blocks the whole batch; there is no merge.
    """

    def __init__(self, students: StudentAttendanceRepository, teachers: TeacherAttendanceRepository):
        self._students = students
        self._teachers = teachers

    def can_create(self, attendee: AttendeeType, scope_id: str, on: date) -> bool:
        if attendee == AttendeeType.STUDENT:
            existing = self._students.find_by_scope_and_date(scope_id, on)
        else:
            existing = self._teachers.find_by_scope_and_date(scope_id, on)
        return len(existing) == 0

    def ensure_can_create(self, attendee: AttendeeType, scope_id: str, on: date) -> None:
        if not self.can_create(attendee, scope_id, on):
            logger.warning("Rejected %s attendance for %s on %s: already marked", attendee.value, scope_id, on)
            raise DuplicateAttendanceError()
