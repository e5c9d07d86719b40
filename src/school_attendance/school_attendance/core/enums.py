from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles used for attendance scoping."""

    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"
    TEACHER = "teacher"
    STUDENT = "student"

    @property
    def is_admin(self) -> bool:
        return self in {Role.SUPER_ADMIN, Role.SCHOOL_ADMIN}


class AttendeeType(str, Enum):
    """Who an attendance record is about."""

    STUDENT = "student"
    TEACHER = "teacher"


class StudentStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class TeacherStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"


class ReportType(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    CLASS = "class"


class TimePeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    TERM = "term"
    YEAR = "year"


class Tier(str, Enum):
    """Classification bucket for an entity's attendance percentage."""

    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


class BulkOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    NO_CHANGES = "no_changes"
