from __future__ import annotations

import logging
from typing import Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import StudentAttendanceRepository, TeacherAttendanceRepository
from ..attendance.scope import ScopeResolver
from ..core.enums import ReportType
from ..core.exceptions import StoreError
from ..roster.model import SchoolContext
from ..users.model import Caller
from .aggregator import ReportAggregator
from .model import AttendanceReport, ReportQuery
from .periods import derive_date_range

logger = logging.getLogger(__name__)


class AttendanceReportService:
    """Use case: answer a report query for one school.

    Reports are derived on every call and never stored.
    """

    def __init__(
        self,
        students: StudentAttendanceRepository,
        teachers: TeacherAttendanceRepository,
        *,
        aggregator: ReportAggregator,
        scope: ScopeResolver,
    ):
        self._students = students
        self._teachers = teachers
        self._aggregator = aggregator
        self._scope = scope

    def generate(self, caller: Caller, ctx: SchoolContext, query: ReportQuery) -> AttendanceReport:
        class_filter = self._scope.report_class_filter(caller, ctx, query)
        start, end = derive_date_range(query)

        try:
            records = self._fetch(ctx.school_id, query, start, end)
        except StoreError:
            logger.exception(
                "Report %s/%s for school %s failed to load records", query.report_type.value, query.time_period.value, ctx.school_id
            )
            return AttendanceReport.empty(query, start, end, error=True)

        if class_filter is not None and query.report_type != ReportType.TEACHER:
            records = [r for r in records if r.class_id in class_filter]

        report = self._aggregator.build(query, ctx, records, start, end)
        logger.info(
            "Report %s/%s %s..%s school=%s rows=%d",
            query.report_type.value,
            query.time_period.value,
            start,
            end,
            ctx.school_id,
            len(report.grid.rows),
        )
        return report

    def _fetch(self, school_id: str, query: ReportQuery, start, end) -> Sequence[AttendanceRecord]:
        if query.report_type == ReportType.TEACHER:
            return self._teachers.find_by_date_range(school_id, start, end)
        return self._students.find_by_date_range(school_id, start, end, class_id=query.class_id)
