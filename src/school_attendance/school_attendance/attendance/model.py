from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence, Union

from ..common.stats import percentage
from ..core.constants import ATTENDED_STATUSES
from ..core.enums import BulkOutcome, StudentStatus, TeacherStatus


@dataclass(frozen=True)
class StudentAttendanceRecord:
    """Domain entity: one student's attendance on one day."""

    attendance_id: str
    student_id: str
    class_id: str
    school_id: str
    attendance_date: date
    day: str
    status: StudentStatus
    entry_id: str
    entry_name: str
    notes: Optional[str] = None
    roll_no: Optional[int] = None

    @property
    def entity_id(self) -> str:
        return self.student_id

    @property
    def scope_id(self) -> str:
        return self.class_id

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "student_id": self.student_id,
            "class_id": self.class_id,
            "school_id": self.school_id,
            "roll_no": self.roll_no,
            "date": self.attendance_date.isoformat(),
            "day": self.day,
            "status": self.status.value,
            "notes": self.notes,
            "entry_id": self.entry_id,
            "entry_name": self.entry_name,
        }


@dataclass(frozen=True)
class TeacherAttendanceRecord:
    """Domain entity: one teacher's attendance on one day."""

    attendance_id: str
    teacher_id: str
    teacher_name: str
    school_id: str
    attendance_date: date
    day: str
    status: TeacherStatus
    entry_id: str
    entry_name: str

    @property
    def entity_id(self) -> str:
        return self.teacher_id

    @property
    def scope_id(self) -> str:
        return self.school_id

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "school_id": self.school_id,
            "date": self.attendance_date.isoformat(),
            "day": self.day,
            "status": self.status.value,
            "entry_id": self.entry_id,
            "entry_name": self.entry_name,
        }


AttendanceRecord = Union[StudentAttendanceRecord, TeacherAttendanceRecord]


@dataclass(frozen=True)
class NewStudentAttendance:
    """Insert payload; ids and actor metadata are already stamped."""

    student_id: str
    class_id: str
    school_id: str
    attendance_date: date
    day: str
    status: StudentStatus
    entry_id: str
    entry_name: str
    notes: Optional[str] = None
    roll_no: Optional[int] = None


@dataclass(frozen=True)
class NewTeacherAttendance:
    teacher_id: str
    teacher_name: str
    school_id: str
    attendance_date: date
    day: str
    status: TeacherStatus
    entry_id: str
    entry_name: str


@dataclass(frozen=True)
class StudentMark:
    """One entry of a bulk student submission, as sent by the client."""

    student_id: str
    class_id: str
    attendance_date: date
    status: StudentStatus
    notes: Optional[str] = None

    @property
    def key(self) -> tuple:
        return (self.student_id, self.class_id, self.attendance_date)


@dataclass(frozen=True)
class TeacherMark:
    teacher_id: str
    school_id: str
    attendance_date: date
    status: TeacherStatus

    @property
    def key(self) -> tuple:
        return (self.teacher_id, self.school_id, self.attendance_date)


AttendanceMark = Union[StudentMark, TeacherMark]


@dataclass(frozen=True)
class AttendanceCounts:
    present: int = 0
    absent: int = 0
    late: int = 0
    leave: int = 0

    @classmethod
    def from_statuses(cls, statuses: Iterable[str]) -> "AttendanceCounts":
        tally = {"present": 0, "absent": 0, "late": 0, "leave": 0}
        for status in statuses:
            tally[str(status)] += 1
        return cls(**tally)

    @property
    def total(self) -> int:
        return self.present + self.absent + self.late + self.leave

    @property
    def attended(self) -> int:
        return sum(getattr(self, s) for s in ATTENDED_STATUSES)

    @property
    def percentage(self) -> int:
        return percentage(self.attended, self.total)

    def to_dict(self) -> dict:
        return {
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "leave": self.leave,
            "total": self.total,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class BulkResult:
    outcome: BulkOutcome
    records: Sequence[AttendanceRecord] = field(default_factory=tuple)

    @property
    def written(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict:
        counts = AttendanceCounts.from_statuses(r.status.value for r in self.records)
        return {
            "success": True,
            "outcome": self.outcome.value,
            "written": self.written,
            "records": [r.to_dict() for r in self.records],
            "summary": counts.to_dict(),
        }


@dataclass(frozen=True)
class DayAttendance:
    """Records of one scope on one day, for the marking screen."""

    scope_id: str
    attendance_date: date
    records: Sequence[AttendanceRecord]

    @property
    def already_marked(self) -> bool:
        return bool(self.records)

    def to_dict(self) -> dict:
        counts = AttendanceCounts.from_statuses(r.status.value for r in self.records)
        return {
            "success": True,
            "scope_id": self.scope_id,
            "date": self.attendance_date.isoformat(),
            "already_marked": self.already_marked,
            "records": [r.to_dict() for r in self.records],
            "summary": counts.to_dict(),
        }


@dataclass(frozen=True)
class StudentHistory:
    student_id: str
    records: Sequence[StudentAttendanceRecord]

    def to_dict(self) -> dict:
        counts = AttendanceCounts.from_statuses(r.status.value for r in self.records)
        return {
            "success": True,
            "student_id": self.student_id,
            "records": [r.to_dict() for r in self.records],
            "summary": counts.to_dict(),
        }
