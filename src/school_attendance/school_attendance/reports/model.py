from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from ..common.validators import FieldErrors
from ..core.enums import ReportType, Tier, TimePeriod
from ..core.exceptions import ValidationError

# Cell value for a header date on which the entity has no record.
NO_RECORD = None


@dataclass(frozen=True)
class ReportQuery:
    report_type: ReportType
    time_period: TimePeriod
    month: int
    year: int
    class_id: Optional[str] = None
    day: int = 1

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "ReportQuery":
        """Build a query from request parameters, reporting every bad field at once."""
        errors = FieldErrors()

        def _choice(key: str, enum_cls):
            raw = str(args.get(key) or "").strip().lower()
            if not raw:
                errors.add(key, "required")
                return None
            try:
                return enum_cls(raw)
            except ValueError:
                errors.add(key, "must be one of: " + ", ".join(m.value for m in enum_cls))
                return None

        def _int(key: str, low: int, high: int, *, required: bool = True) -> Optional[int]:
            raw = str(args.get(key) or "").strip()
            if not raw:
                if required:
                    errors.add(key, "required")
                return None
            try:
                number = int(raw)
            except ValueError:
                errors.add(key, "must be an integer")
                return None
            if not low <= number <= high:
                errors.add(key, f"must be between {low} and {high}")
                return None
            return number

        report_type = _choice("reportType", ReportType)
        time_period = _choice("timePeriod", TimePeriod)
        month = _int("month", 1, 12)
        year = _int("year", 1900, 9999)
        day = _int("day", 1, 31, required=False)
        class_id = str(args.get("classId") or "").strip() or None

        if report_type == ReportType.STUDENT and class_id is None:
            errors.add("classId", "required for student reports")
        if day is not None and month is not None and year is not None and day > monthrange(year, month)[1]:
            errors.add("day", "not a day of the given month")

        errors.raise_if_any("Invalid report query")
        return cls(
            report_type=report_type,
            time_period=time_period,
            month=month,
            year=year,
            class_id=None if report_type == ReportType.TEACHER else class_id,
            day=day or 1,
        )

    def __post_init__(self) -> None:
        if self.report_type == ReportType.STUDENT and not self.class_id:
            raise ValidationError("A student report needs a class", {"classId": "required for student reports"})


def _cells_to_dict(cells: Mapping[date, Any]) -> Dict[str, Any]:
    return {d.isoformat(): v for d, v in cells.items()}


@dataclass(frozen=True)
class StudentReportRow:
    student_id: str
    name: str
    cells: Mapping[date, Optional[str]]
    roll_no: Optional[int] = None
    type: str = field(default="student", init=False)

    @property
    def entity_id(self) -> str:
        return self.student_id

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "id": self.student_id,
            "name": self.name,
            "roll_no": self.roll_no,
            "cells": _cells_to_dict(self.cells),
        }


@dataclass(frozen=True)
class TeacherReportRow:
    teacher_id: str
    name: str
    cells: Mapping[date, Optional[str]]
    type: str = field(default="teacher", init=False)

    @property
    def entity_id(self) -> str:
        return self.teacher_id

    def to_dict(self) -> dict:
        return {"type": self.type, "id": self.teacher_id, "name": self.name, "cells": _cells_to_dict(self.cells)}


@dataclass(frozen=True)
class ClassReportRow:
    """Cells hold the class's attendance percentage for each date."""

    class_id: str
    name: str
    cells: Mapping[date, Optional[int]]
    type: str = field(default="class", init=False)

    @property
    def entity_id(self) -> str:
        return self.class_id

    def to_dict(self) -> dict:
        return {"type": self.type, "id": self.class_id, "name": self.name, "cells": _cells_to_dict(self.cells)}


ReportRow = Union[StudentReportRow, TeacherReportRow, ClassReportRow]


@dataclass(frozen=True)
class ReportGrid:
    headers: Sequence[date] = ()
    rows: Sequence[ReportRow] = ()


@dataclass(frozen=True)
class EntityReportRow:
    entity_id: str
    name: str
    days_present: int
    total_days: int
    percentage: int
    tier: Tier

    def to_dict(self) -> dict:
        return {
            "id": self.entity_id,
            "name": self.name,
            "days_present": self.days_present,
            "total_days": self.total_days,
            "percentage": self.percentage,
            "tier": self.tier.value,
        }


@dataclass(frozen=True)
class TierCounts:
    good: int = 0
    average: int = 0
    poor: int = 0

    def to_dict(self) -> dict:
        return {"good": self.good, "average": self.average, "poor": self.poor}


@dataclass(frozen=True)
class ReportSummary:
    present: int = 0
    absent: int = 0
    late: int = 0
    leave: int = 0
    total: int = 0
    percentage: int = 0
    tiers: TierCounts = field(default_factory=TierCounts)

    def to_dict(self) -> dict:
        return {
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "leave": self.leave,
            "total": self.total,
            "percentage": self.percentage,
            "tiers": self.tiers.to_dict(),
        }


@dataclass(frozen=True)
class AttendanceReport:
    query: ReportQuery
    start: date
    end: date
    grid: ReportGrid = field(default_factory=ReportGrid)
    data: Sequence[EntityReportRow] = ()
    summary: ReportSummary = field(default_factory=ReportSummary)
    error: bool = False

    @classmethod
    def empty(cls, query: ReportQuery, start: date, end: date, *, error: bool = False) -> "AttendanceReport":
        return cls(query=query, start=start, end=end, error=error)

    def to_dict(self) -> dict:
        return {
            "success": not self.error,
            "error": self.error,
            "reportType": self.query.report_type.value,
            "timePeriod": self.query.time_period.value,
            "period": {"start": self.start.isoformat(), "end": self.end.isoformat()},
            "headers": [d.isoformat() for d in self.grid.headers],
            "rows": [r.to_dict() for r in self.grid.rows],
            "data": [r.to_dict() for r in self.data],
            "summary": self.summary.to_dict(),
        }
