from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import (
    NewStudentAttendance,
    NewTeacherAttendance,
    StudentAttendanceRecord,
    StudentMark,
    TeacherAttendanceRecord,
    TeacherMark,
)


class StudentAttendanceRepository(Protocol):
    """Store contract for student attendance.

    Implementations must enforce one record per (student_id, date) and apply
    ``insert_many`` / ``update_by_key`` all-or-nothing.
    """

    def insert_many(self, records: Sequence[NewStudentAttendance]) -> Sequence[StudentAttendanceRecord]:
        raise NotImplementedError

    def update_by_key(self, changes: Sequence[StudentMark]) -> Sequence[StudentAttendanceRecord]:
        """Update status/notes matched on (student_id, class_id, date).

        Raises ValidationError, writing nothing, if any key has no record.
        """

        raise NotImplementedError

    def find_by_scope_and_date(self, class_id: str, on: date) -> Sequence[StudentAttendanceRecord]:
        raise NotImplementedError

    def find_by_date_range(
        self,
        school_id: str,
        start: date,
        end: date,
        class_id: Optional[str] = None,
    ) -> Sequence[StudentAttendanceRecord]:
        raise NotImplementedError

    def find_by_person(
        self,
        student_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[StudentAttendanceRecord]:
        raise NotImplementedError


class TeacherAttendanceRepository(Protocol):
    """Store contract for teacher attendance; the scope is the school."""

    def insert_many(self, records: Sequence[NewTeacherAttendance]) -> Sequence[TeacherAttendanceRecord]:
        raise NotImplementedError

    def update_by_key(self, changes: Sequence[TeacherMark]) -> Sequence[TeacherAttendanceRecord]:
        raise NotImplementedError

    def find_by_scope_and_date(self, school_id: str, on: date) -> Sequence[TeacherAttendanceRecord]:
        raise NotImplementedError

    def find_by_date_range(
        self,
        school_id: str,
        start: date,
        end: date,
        class_id: Optional[str] = None,
    ) -> Sequence[TeacherAttendanceRecord]:
        """``class_id`` is accepted for a uniform signature and ignored."""

        raise NotImplementedError

    def find_by_person(
        self,
        teacher_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[TeacherAttendanceRecord]:
        raise NotImplementedError
