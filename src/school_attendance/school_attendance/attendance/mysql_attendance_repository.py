from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import StudentStatus, TeacherStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import (
    NewStudentAttendance,
    NewTeacherAttendance,
    StudentAttendanceRecord,
    StudentMark,
    TeacherAttendanceRecord,
    TeacherMark,
)
from .repository import StudentAttendanceRepository, TeacherAttendanceRepository

_STUDENT_COLUMNS = """
    attendance_id, student_id, class_id, school_id, roll_no, attendance_date,
    day_label, status, notes, entry_id, entry_name
"""

_TEACHER_COLUMNS = """
    attendance_id, teacher_id, teacher_name, school_id, attendance_date,
    day_label, status, entry_id, entry_name
"""


def row_to_student_record(r: Dict[str, Any]) -> StudentAttendanceRecord:
    return StudentAttendanceRecord(
        attendance_id=str(r["attendance_id"]),
        student_id=str(r["student_id"]),
        class_id=str(r["class_id"]),
        school_id=str(r["school_id"]),
        attendance_date=r["attendance_date"],
        day=r["day_label"],
        status=StudentStatus(r["status"]),
        entry_id=str(r["entry_id"]),
        entry_name=r["entry_name"],
        notes=r.get("notes"),
        roll_no=int(r["roll_no"]) if r.get("roll_no") is not None else None,
    )


def row_to_teacher_record(r: Dict[str, Any]) -> TeacherAttendanceRecord:
    return TeacherAttendanceRecord(
        attendance_id=str(r["attendance_id"]),
        teacher_id=str(r["teacher_id"]),
        teacher_name=r["teacher_name"],
        school_id=str(r["school_id"]),
        attendance_date=r["attendance_date"],
        day=r["day_label"],
        status=TeacherStatus(r["status"]),
        entry_id=str(r["entry_id"]),
        entry_name=r["entry_name"],
    )


def _range_clauses(start: Optional[date], end: Optional[date], params: list[object]) -> list[str]:
    clauses = []
    if start is not None:
        clauses.append("attendance_date >= %s")
        params.append(start)
    if end is not None:
        clauses.append("attendance_date <= %s")
        params.append(end)
    return clauses


class MySQLStudentAttendanceRepository(StudentAttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_many(self, records: Sequence[NewStudentAttendance]) -> Sequence[StudentAttendanceRecord]:
        if not records:
            return []
        out: list[StudentAttendanceRecord] = []
        # One transaction: a duplicate key on any row rolls back the whole batch.
        with db_cursor(self._conn_factory) as (_, cur):
            for rec in records:
                cur.execute(
                    """
                    INSERT INTO student_attendance(
                        student_id, class_id, school_id, roll_no, attendance_date,
                        day_label, status, notes, entry_id, entry_name
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        rec.student_id,
                        rec.class_id,
                        rec.school_id,
                        rec.roll_no,
                        rec.attendance_date,
                        rec.day,
                        rec.status.value,
                        rec.notes,
                        rec.entry_id,
                        rec.entry_name,
                    ),
                )
                out.append(
                    StudentAttendanceRecord(
                        attendance_id=str(cur.lastrowid),
                        student_id=rec.student_id,
                        class_id=rec.class_id,
                        school_id=rec.school_id,
                        attendance_date=rec.attendance_date,
                        day=rec.day,
                        status=rec.status,
                        entry_id=rec.entry_id,
                        entry_name=rec.entry_name,
                        notes=rec.notes,
                        roll_no=rec.roll_no,
                    )
                )
        return out

    def update_by_key(self, changes: Sequence[StudentMark]) -> Sequence[StudentAttendanceRecord]:
        if not changes:
            return []
        out: list[StudentAttendanceRecord] = []
        with db_cursor(self._conn_factory) as (_, cur):
            current: list[Dict[str, Any]] = []
            missing: dict[str, str] = {}
            for i, change in enumerate(changes):
                cur.execute(
                    f"""
                    SELECT {_STUDENT_COLUMNS}
                    FROM student_attendance
                    WHERE student_id=%s AND class_id=%s AND attendance_date=%s
                    FOR UPDATE
                    """,
                    (change.student_id, change.class_id, change.attendance_date),
                )
                row = fetchone(cur)
                if not row:
                    missing[f"records[{i}]"] = "no attendance recorded for this student and date"
                else:
                    current.append(row)
            if missing:
                raise ValidationError("Attendance not found for update", missing)

            for change, row in zip(changes, current):
                # An empty string clears the note; None keeps it.
                notes = (change.notes or None) if change.notes is not None else row.get("notes")
                cur.execute(
                    """
                    UPDATE student_attendance
                    SET status=%s, notes=%s
                    WHERE attendance_id=%s
                    """,
                    (change.status.value, notes, row["attendance_id"]),
                )
                out.append(row_to_student_record({**row, "status": change.status.value, "notes": notes}))
        return out

    def find_by_scope_and_date(self, class_id: str, on: date) -> Sequence[StudentAttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM student_attendance
                WHERE class_id=%s AND attendance_date=%s
                ORDER BY roll_no ASC, student_id ASC
                """,
                (class_id, on),
            )
            return [row_to_student_record(r) for r in fetchall(cur)]

    def find_by_date_range(
        self,
        school_id: str,
        start: date,
        end: date,
        class_id: Optional[str] = None,
    ) -> Sequence[StudentAttendanceRecord]:
        params: list[object] = [school_id]
        clauses = ["school_id=%s"] + _range_clauses(start, end, params)
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM student_attendance
                WHERE {where}
                ORDER BY attendance_date ASC, class_id ASC, student_id ASC
                """,
                tuple(params),
            )
            return [row_to_student_record(r) for r in fetchall(cur)]

    def find_by_person(
        self,
        student_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[StudentAttendanceRecord]:
        params: list[object] = [student_id]
        where = " AND ".join(["student_id=%s"] + _range_clauses(start, end, params))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM student_attendance
                WHERE {where}
                ORDER BY attendance_date DESC
                """,
                tuple(params),
            )
            return [row_to_student_record(r) for r in fetchall(cur)]


class MySQLTeacherAttendanceRepository(TeacherAttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_many(self, records: Sequence[NewTeacherAttendance]) -> Sequence[TeacherAttendanceRecord]:
        if not records:
            return []
        out: list[TeacherAttendanceRecord] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for rec in records:
                cur.execute(
                    """
                    INSERT INTO teacher_attendance(
                        teacher_id, teacher_name, school_id, attendance_date,
                        day_label, status, entry_id, entry_name
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        rec.teacher_id,
                        rec.teacher_name,
                        rec.school_id,
                        rec.attendance_date,
                        rec.day,
                        rec.status.value,
                        rec.entry_id,
                        rec.entry_name,
                    ),
                )
                out.append(
                    TeacherAttendanceRecord(
                        attendance_id=str(cur.lastrowid),
                        teacher_id=rec.teacher_id,
                        teacher_name=rec.teacher_name,
                        school_id=rec.school_id,
                        attendance_date=rec.attendance_date,
                        day=rec.day,
                        status=rec.status,
                        entry_id=rec.entry_id,
                        entry_name=rec.entry_name,
                    )
                )
        return out

    def update_by_key(self, changes: Sequence[TeacherMark]) -> Sequence[TeacherAttendanceRecord]:
        if not changes:
            return []
        out: list[TeacherAttendanceRecord] = []
        with db_cursor(self._conn_factory) as (_, cur):
            current: list[Dict[str, Any]] = []
            missing: dict[str, str] = {}
            for i, change in enumerate(changes):
                cur.execute(
                    f"""
                    SELECT {_TEACHER_COLUMNS}
                    FROM teacher_attendance
                    WHERE teacher_id=%s AND school_id=%s AND attendance_date=%s
                    FOR UPDATE
                    """,
                    (change.teacher_id, change.school_id, change.attendance_date),
                )
                row = fetchone(cur)
                if not row:
                    missing[f"records[{i}]"] = "no attendance recorded for this teacher and date"
                else:
                    current.append(row)
            if missing:
                raise ValidationError("Attendance not found for update", missing)

            for change, row in zip(changes, current):
                cur.execute(
                    "UPDATE teacher_attendance SET status=%s WHERE attendance_id=%s",
                    (change.status.value, row["attendance_id"]),
                )
                out.append(row_to_teacher_record({**row, "status": change.status.value}))
        return out

    def find_by_scope_and_date(self, school_id: str, on: date) -> Sequence[TeacherAttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TEACHER_COLUMNS}
                FROM teacher_attendance
                WHERE school_id=%s AND attendance_date=%s
                ORDER BY teacher_name ASC
                """,
                (school_id, on),
            )
            return [row_to_teacher_record(r) for r in fetchall(cur)]

    def find_by_date_range(
        self,
        school_id: str,
        start: date,
        end: date,
        class_id: Optional[str] = None,
    ) -> Sequence[TeacherAttendanceRecord]:
        params: list[object] = [school_id]
        where = " AND ".join(["school_id=%s"] + _range_clauses(start, end, params))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TEACHER_COLUMNS}
                FROM teacher_attendance
                WHERE {where}
                ORDER BY attendance_date ASC, teacher_id ASC
                """,
                tuple(params),
            )
            return [row_to_teacher_record(r) for r in fetchall(cur)]

    def find_by_person(
        self,
        teacher_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[TeacherAttendanceRecord]:
        params: list[object] = [teacher_id]
        where = " AND ".join(["teacher_id=%s"] + _range_clauses(start, end, params))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TEACHER_COLUMNS}
                FROM teacher_attendance
                WHERE {where}
                ORDER BY attendance_date DESC
                """,
                tuple(params),
            )
            return [row_to_teacher_record(r) for r in fetchall(cur)]
