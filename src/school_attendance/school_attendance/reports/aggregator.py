from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Callable, Dict, Optional, Sequence

from ..attendance.model import AttendanceCounts, AttendanceRecord, StudentAttendanceRecord, TeacherAttendanceRecord
from ..common.stats import percentage
from ..core.enums import ReportType
from ..roster.model import SchoolContext
from .classifier import PercentageClassifier
from .model import (
    NO_RECORD,
    AttendanceReport,
    ClassReportRow,
    EntityReportRow,
    ReportGrid,
    ReportQuery,
    ReportRow,
    ReportSummary,
    StudentReportRow,
    TeacherReportRow,
)


def build_headers(records: Sequence[AttendanceRecord]) -> list[date]:
    """Sorted distinct dates that occur in the records; never padded to the full period."""
    return sorted({r.attendance_date for r in records})


def backfill(cells: Dict[date, object], headers: Sequence[date]) -> Dict[date, object]:
    return {d: cells.get(d, NO_RECORD) for d in headers}


def _group(records: Sequence[AttendanceRecord], key: Callable[[AttendanceRecord], str]) -> Dict[str, list[AttendanceRecord]]:
    groups: Dict[str, list[AttendanceRecord]] = defaultdict(list)
    for r in records:
        groups[key(r)].append(r)
    return groups


def _counts(records: Sequence[AttendanceRecord]) -> AttendanceCounts:
    return AttendanceCounts.from_statuses(r.status.value for r in records)


class ReportAggregator:
    """Pivots flat attendance records into a date grid plus per-entity rows and a summary."""

    def __init__(self, classifier: Optional[PercentageClassifier] = None):
        self._classifier = classifier or PercentageClassifier()

    @property
    def classifier(self) -> PercentageClassifier:
        return self._classifier

    def build(
        self,
        query: ReportQuery,
        ctx: SchoolContext,
        records: Sequence[AttendanceRecord],
        start: date,
        end: date,
    ) -> AttendanceReport:
        headers = build_headers(records)

        if query.report_type == ReportType.STUDENT:
            groups = _group(records, lambda r: r.student_id)
            rows: list[ReportRow] = [self._student_row(ctx, sid, recs, headers) for sid, recs in groups.items()]
            rows.sort(key=lambda row: (row.roll_no is None, row.roll_no or 0, row.name))
        elif query.report_type == ReportType.TEACHER:
            groups = _group(records, lambda r: r.teacher_id)
            rows = [self._teacher_row(ctx, tid, recs, headers) for tid, recs in groups.items()]
            rows.sort(key=lambda row: row.name)
        else:
            groups = _group(records, lambda r: r.class_id)
            rows = [self._class_row(ctx, cid, recs, headers) for cid, recs in groups.items()]
            rows.sort(key=lambda row: row.name)

        data = [self._entity_row(row, groups[row.entity_id]) for row in rows]
        return AttendanceReport(
            query=query,
            start=start,
            end=end,
            grid=ReportGrid(headers=tuple(headers), rows=tuple(rows)),
            data=tuple(data),
            summary=self._summary(records, data),
        )

    def _student_row(
        self, ctx: SchoolContext, student_id: str, records: Sequence[StudentAttendanceRecord], headers: Sequence[date]
    ) -> StudentReportRow:
        profile = ctx.get_student(student_id)
        roll_no = profile.roll_no if profile and profile.roll_no is not None else records[0].roll_no
        cells = {r.attendance_date: r.status.value for r in records}
        return StudentReportRow(
            student_id=student_id,
            name=ctx.display_name("student", student_id),
            cells=backfill(cells, headers),
            roll_no=roll_no,
        )

    def _teacher_row(
        self, ctx: SchoolContext, teacher_id: str, records: Sequence[TeacherAttendanceRecord], headers: Sequence[date]
    ) -> TeacherReportRow:
        profile = ctx.get_teacher(teacher_id)
        name = profile.full_name if profile else records[0].teacher_name
        cells = {r.attendance_date: r.status.value for r in records}
        return TeacherReportRow(teacher_id=teacher_id, name=name, cells=backfill(cells, headers))

    def _class_row(
        self, ctx: SchoolContext, class_id: str, records: Sequence[StudentAttendanceRecord], headers: Sequence[date]
    ) -> ClassReportRow:
        by_date = _group(records, lambda r: r.attendance_date)
        # percentage() yields 0 for an empty day.
        cells = {d: _counts(day_records).percentage for d, day_records in by_date.items()}
        return ClassReportRow(class_id=class_id, name=ctx.display_name("class", class_id), cells=backfill(cells, headers))

    def _entity_row(self, row: ReportRow, records: Sequence[AttendanceRecord]) -> EntityReportRow:
        counts = _counts(records)
        pct = counts.percentage
        return EntityReportRow(
            entity_id=row.entity_id,
            name=row.name,
            days_present=counts.attended,
            total_days=counts.total,
            percentage=pct,
            tier=self._classifier.classify(pct),
        )

    def _summary(self, records: Sequence[AttendanceRecord], data: Sequence[EntityReportRow]) -> ReportSummary:
        counts = _counts(records)
        return ReportSummary(
            present=counts.present,
            absent=counts.absent,
            late=counts.late,
            leave=counts.leave,
            total=counts.total,
            percentage=percentage(counts.attended, counts.total),
            tiers=self._classifier.count(r.percentage for r in data),
        )
