from __future__ import annotations

from datetime import date

import pytest

from school_attendance.attendance.model import NewStudentAttendance, StudentMark
from school_attendance.attendance.mysql_attendance_repository import (
    MySQLStudentAttendanceRepository,
    row_to_student_record,
)
from school_attendance.core.enums import StudentStatus
from school_attendance.core.exceptions import ValidationError

DAY = date(2025, 5, 1)


def _row(student_id, status="present", attendance_id=1):
    return {
        "attendance_id": attendance_id,
        "student_id": student_id,
        "class_id": "7",
        "school_id": "sch-1",
        "roll_no": 1,
        "attendance_date": DAY,
        "day_label": "Thursday",
        "status": status,
        "notes": None,
        "entry_id": "u-admin",
        "entry_name": "Principal Iyer",
    }


class ScriptedCursor:
    """Returns queued rows for SELECTs and hands out increasing lastrowids for INSERTs."""

    def __init__(self, rows=()):
        self.rows = list(rows)
        self.executed = []
        self.lastrowid = 0

    def execute(self, sql, params=None):
        self.executed.append((" ".join(sql.split()), params))
        if sql.lstrip().startswith("INSERT"):
            self.lastrowid += 1

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def fetchall(self):
        rows, self.rows = self.rows, []
        return rows

    def close(self):
        pass


class ScriptedConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class ScriptedFactory:
    def __init__(self, conn):
        self.conn = conn

    def connect(self):
        return self.conn


def test_insert_many_runs_in_one_transaction():
    cur = ScriptedCursor()
    conn = ScriptedConnection(cur)
    repo = MySQLStudentAttendanceRepository(ScriptedFactory(conn))
    new = [
        NewStudentAttendance(
            student_id=sid,
            class_id="7",
            school_id="sch-1",
            attendance_date=DAY,
            day="Thursday",
            status=StudentStatus.PRESENT,
            entry_id="u-admin",
            entry_name="Principal Iyer",
        )
        for sid in ("s-1", "s-2")
    ]

    records = repo.insert_many(new)

    assert [r.attendance_id for r in records] == ["1", "2"]
    assert len(cur.executed) == 2
    assert conn.committed


def test_update_with_missing_key_rolls_back_before_any_update():
    cur = ScriptedCursor(rows=[_row("s-1")])
    conn = ScriptedConnection(cur)
    repo = MySQLStudentAttendanceRepository(ScriptedFactory(conn))

    with pytest.raises(ValidationError) as exc:
        repo.update_by_key(
            [
                StudentMark(student_id="s-1", class_id="7", attendance_date=DAY, status=StudentStatus.LATE),
                StudentMark(student_id="s-2", class_id="7", attendance_date=DAY, status=StudentStatus.LATE),
            ]
        )

    assert set(exc.value.errors) == {"records[1]"}
    assert conn.rolled_back and not conn.committed
    assert not any(sql.startswith("UPDATE") for sql, _ in cur.executed)


def test_update_returns_new_state():
    cur = ScriptedCursor(rows=[_row("s-1", attendance_id=9)])
    conn = ScriptedConnection(cur)
    repo = MySQLStudentAttendanceRepository(ScriptedFactory(conn))

    (updated,) = repo.update_by_key(
        [StudentMark(student_id="s-1", class_id="7", attendance_date=DAY, status=StudentStatus.ABSENT, notes="fever")]
    )

    assert updated.status == StudentStatus.ABSENT
    assert updated.notes == "fever"
    assert cur.executed[-1][1] == ("absent", "fever", 9)
    assert conn.committed


def test_row_mapping_stringifies_ids():
    rec = row_to_student_record(_row("s-1", "late", attendance_id=42))

    assert rec.attendance_id == "42"
    assert rec.status == StudentStatus.LATE
    assert rec.roll_no == 1


def test_update_with_empty_notes_stores_null():
    row = {**_row("s-1", "absent", attendance_id=9), "notes": "fever"}
    cur = ScriptedCursor(rows=[row])
    repo = MySQLStudentAttendanceRepository(ScriptedFactory(ScriptedConnection(cur)))

    (updated,) = repo.update_by_key(
        [StudentMark(student_id="s-1", class_id="7", attendance_date=DAY, status=StudentStatus.ABSENT, notes="")]
    )

    assert updated.notes is None
    assert cur.executed[-1][1] == ("absent", None, 9)
