from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import day_label
from ..core.enums import AttendeeType, BulkOutcome
from ..core.exceptions import AuthorizationError, ValidationError
from ..roster.model import SchoolContext
from ..users.model import Caller
from .diff import diff_changes
from .guard import DuplicateGuard
from .model import (
    BulkResult,
    DayAttendance,
    NewStudentAttendance,
    NewTeacherAttendance,
    StudentHistory,
    StudentMark,
    TeacherMark,
)
from .repository import StudentAttendanceRepository, TeacherAttendanceRepository
from .scope import ScopeResolver

logger = logging.getLogger(__name__)


def _batch_scope(marks: Sequence[StudentMark | TeacherMark], scope_attr: str) -> tuple[str, date]:
    if not marks:
        raise ValidationError("Attendance batch is empty", {"records": "must be a non-empty list"})
    first = marks[0]
    return getattr(first, scope_attr), first.attendance_date


class AttendanceService:
    """Bulk marking, diff-only updates and day/history reads for one school."""

    def __init__(
        self,
        students: StudentAttendanceRepository,
        teachers: TeacherAttendanceRepository,
        *,
        guard: Optional[DuplicateGuard] = None,
        scope: Optional[ScopeResolver] = None,
    ):
        self._students = students
        self._teachers = teachers
        self._guard = guard or DuplicateGuard(students, teachers)
        self._scope = scope or ScopeResolver()

    # -- student attendance -------------------------------------------------

    def mark_students(self, caller: Caller, ctx: SchoolContext, marks: Sequence[StudentMark]) -> BulkResult:
        class_id, on = _batch_scope(marks, "class_id")
        self._check_student_batch(caller, ctx, class_id, marks)
        self._guard.ensure_can_create(AttendeeType.STUDENT, class_id, on)

        label = day_label(on)
        new_rows = []
        for m in marks:
            profile = ctx.get_student(m.student_id)
            new_rows.append(
                NewStudentAttendance(
                    student_id=m.student_id,
                    class_id=class_id,
                    school_id=ctx.school_id,
                    attendance_date=on,
                    day=label,
                    status=m.status,
                    entry_id=caller.user_id,
                    entry_name=caller.name,
                    notes=m.notes or None,
                    roll_no=profile.roll_no if profile else None,
                )
            )

        records = self._students.insert_many(new_rows)
        logger.info("Marked %d students of class %s on %s by %s", len(records), class_id, on, caller.user_id)
        return BulkResult(outcome=BulkOutcome.CREATED, records=tuple(records))

    def update_students(
        self,
        caller: Caller,
        ctx: SchoolContext,
        records: Sequence[StudentMark],
        original: Optional[Sequence[StudentMark]] = None,
    ) -> BulkResult:
        class_id, on = _batch_scope(records, "class_id")
        self._check_student_batch(caller, ctx, class_id, records)

        changes = diff_changes(original, records) if original is not None else list(records)
        if not changes:
            logger.info("No attendance changes for class %s on %s", class_id, on)
            return BulkResult(outcome=BulkOutcome.NO_CHANGES)

        updated = self._students.update_by_key(changes)
        logger.info("Updated %d students of class %s on %s by %s", len(updated), class_id, on, caller.user_id)
        return BulkResult(outcome=BulkOutcome.UPDATED, records=tuple(updated))

    def _check_student_batch(self, caller: Caller, ctx: SchoolContext, class_id: str, marks: Sequence[StudentMark]) -> None:
        self._scope.ensure_can_mark_class(caller, ctx, class_id)
        self._scope.ensure_students_enrolled(caller, ctx, class_id, (m.student_id for m in marks))

    # -- teacher attendance -------------------------------------------------

    def mark_teachers(self, caller: Caller, ctx: SchoolContext, marks: Sequence[TeacherMark]) -> BulkResult:
        school_id, on = _batch_scope(marks, "school_id")
        self._check_teacher_batch(caller, ctx, school_id, marks)
        self._guard.ensure_can_create(AttendeeType.TEACHER, school_id, on)

        label = day_label(on)
        new_rows = [
            NewTeacherAttendance(
                teacher_id=m.teacher_id,
                teacher_name=ctx.display_name("teacher", m.teacher_id),
                school_id=school_id,
                attendance_date=on,
                day=label,
                status=m.status,
                entry_id=caller.user_id,
                entry_name=caller.name,
            )
            for m in marks
        ]

        records = self._teachers.insert_many(new_rows)
        logger.info("Marked %d teachers of school %s on %s by %s", len(records), school_id, on, caller.user_id)
        return BulkResult(outcome=BulkOutcome.CREATED, records=tuple(records))

    def update_teachers(
        self,
        caller: Caller,
        ctx: SchoolContext,
        records: Sequence[TeacherMark],
        original: Optional[Sequence[TeacherMark]] = None,
    ) -> BulkResult:
        school_id, on = _batch_scope(records, "school_id")
        self._check_teacher_batch(caller, ctx, school_id, records)

        changes = diff_changes(original, records) if original is not None else list(records)
        if not changes:
            logger.info("No teacher attendance changes for school %s on %s", school_id, on)
            return BulkResult(outcome=BulkOutcome.NO_CHANGES)

        updated = self._teachers.update_by_key(changes)
        logger.info("Updated %d teachers of school %s on %s by %s", len(updated), school_id, on, caller.user_id)
        return BulkResult(outcome=BulkOutcome.UPDATED, records=tuple(updated))

    def _check_teacher_batch(self, caller: Caller, ctx: SchoolContext, school_id: str, marks: Sequence[TeacherMark]) -> None:
        self._scope.ensure_can_mark_teachers(caller, ctx)
        if school_id != ctx.school_id:
            logger.warning("Denied %s: teacher batch for school %s inside %s", caller.user_id, school_id, ctx.school_id)
            raise AuthorizationError(f"School {school_id} is outside your scope")
        self._scope.ensure_teachers_in_school(caller, ctx, (m.teacher_id for m in marks))

    # -- reads --------------------------------------------------------------

    def class_day(self, caller: Caller, ctx: SchoolContext, class_id: str, on: date) -> DayAttendance:
        self._scope.ensure_can_view_class_day(caller, ctx, class_id)
        records = self._students.find_by_scope_and_date(class_id, on)
        return DayAttendance(scope_id=class_id, attendance_date=on, records=tuple(records))

    def school_teachers_day(self, caller: Caller, ctx: SchoolContext, on: date) -> DayAttendance:
        self._scope.ensure_can_view_teacher_day(caller, ctx)
        records = self._teachers.find_by_scope_and_date(ctx.school_id, on)
        return DayAttendance(scope_id=ctx.school_id, attendance_date=on, records=tuple(records))

    def student_history(
        self,
        caller: Caller,
        ctx: SchoolContext,
        student_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> StudentHistory:
        if start and end and start > end:
            raise ValidationError("start must not be after end", {"start": "after end"})
        self._scope.ensure_can_view_student(caller, ctx, student_id)
        records = self._students.find_by_person(student_id, start, end)
        return StudentHistory(student_id=student_id, records=tuple(records))
