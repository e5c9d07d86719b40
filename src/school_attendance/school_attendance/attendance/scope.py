from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, Optional

from ..core.enums import ReportType, Role
from ..core.exceptions import AuthorizationError
from ..reports.model import ReportQuery
from ..roster.model import SchoolContext
from ..users.model import Caller

logger = logging.getLogger(__name__)


def _deny(caller: Caller, message: str) -> AuthorizationError:
    logger.warning("Denied %s (%s): %s", caller.user_id, caller.role.value, message)
    return AuthorizationError(message)


class ScopeResolver:
    """Decides what a caller may mark and view inside one school.

    Out-of-scope requests are rejected with ``AuthorizationError``; nothing is
    silently filtered out of a batch.
    """

    def ensure_same_school(self, caller: Caller, ctx: SchoolContext) -> None:
        if caller.role == Role.SUPER_ADMIN:
            return
        if caller.school_id != ctx.school_id:
            raise _deny(caller, "You can only work with your own school")

    def resolve_markable_classes(self, caller: Caller, ctx: SchoolContext) -> list[str]:
        if caller.role != Role.SUPER_ADMIN and caller.school_id != ctx.school_id:
            return []
        if caller.role.is_admin:
            return [c.class_id for c in ctx.classes]
        if caller.role == Role.TEACHER and caller.teacher_id:
            return [c.class_id for c in ctx.classes if c.class_teacher_id == caller.teacher_id]
        return []

    def resolve_markable_teachers(self, caller: Caller, ctx: SchoolContext) -> bool:
        if caller.role != Role.SUPER_ADMIN and caller.school_id != ctx.school_id:
            return False
        return caller.role.is_admin

    def ensure_can_mark_class(self, caller: Caller, ctx: SchoolContext, class_id: str) -> None:
        self.ensure_same_school(caller, ctx)
        if class_id not in self.resolve_markable_classes(caller, ctx):
            raise _deny(caller, f"Class {class_id} is outside your scope")

    def ensure_can_mark_teachers(self, caller: Caller, ctx: SchoolContext) -> None:
        self.ensure_same_school(caller, ctx)
        if not self.resolve_markable_teachers(caller, ctx):
            raise _deny(caller, "Only school administrators can mark teacher attendance")

    def ensure_students_enrolled(self, caller: Caller, ctx: SchoolContext, class_id: str, student_ids: Iterable[str]) -> None:
        enrolled = {s.student_id for s in ctx.students_in_class(class_id)}
        strangers = sorted(set(student_ids) - enrolled)
        if strangers:
            raise _deny(caller, f"Students not enrolled in class {class_id}: {', '.join(strangers)}")

    def ensure_teachers_in_school(self, caller: Caller, ctx: SchoolContext, teacher_ids: Iterable[str]) -> None:
        staff = {t.teacher_id for t in ctx.teachers}
        strangers = sorted(set(teacher_ids) - staff)
        if strangers:
            raise _deny(caller, f"Teachers not in school {ctx.school_id}: {', '.join(strangers)}")

    def ensure_can_view_class_day(self, caller: Caller, ctx: SchoolContext, class_id: str) -> None:
        self.ensure_can_mark_class(caller, ctx, class_id)

    def ensure_can_view_teacher_day(self, caller: Caller, ctx: SchoolContext) -> None:
        self.ensure_can_mark_teachers(caller, ctx)

    def ensure_can_view_student(self, caller: Caller, ctx: SchoolContext, student_id: str) -> None:
        if caller.role == Role.STUDENT:
            if caller.student_id != student_id:
                raise _deny(caller, "Students can only view their own attendance")
            return
        self.ensure_same_school(caller, ctx)
        student = ctx.get_student(student_id)
        if student is None:
            raise _deny(caller, f"Student {student_id} is not in school {ctx.school_id}")
        if caller.role.is_admin:
            return
        if student.class_id not in self.resolve_markable_classes(caller, ctx):
            raise _deny(caller, "Teachers can only view students of their own classes")

    def report_class_filter(self, caller: Caller, ctx: SchoolContext, query: ReportQuery) -> Optional[FrozenSet[str]]:
        """Check a report request and return the classes it may cover.

        ``None`` means every class of the school.
        """

        self.ensure_same_school(caller, ctx)
        if caller.role == Role.STUDENT:
            raise _deny(caller, "Students cannot run attendance reports")
        if query.report_type == ReportType.TEACHER:
            if not caller.role.is_admin:
                raise _deny(caller, "Only school administrators can run teacher reports")
            return None
        if caller.role.is_admin:
            return None

        allowed = frozenset(self.resolve_markable_classes(caller, ctx))
        if query.class_id is not None and query.class_id not in allowed:
            raise _deny(caller, f"Class {query.class_id} is outside your scope")
        if not allowed:
            raise _deny(caller, "You are not class teacher of any class")
        return allowed
