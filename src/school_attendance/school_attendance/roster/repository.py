from __future__ import annotations

from typing import Protocol, Sequence

from .model import SchoolClass, StudentProfile, TeacherProfile


class RosterRepository(Protocol):
    """Read-only view of the school roster.

    The roster itself is maintained by the generic CRUD part of the platform.
    """

    def list_classes(self, school_id: str) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def list_teachers(self, school_id: str) -> Sequence[TeacherProfile]:
        raise NotImplementedError

    def list_students(self, school_id: str) -> Sequence[StudentProfile]:
        raise NotImplementedError
