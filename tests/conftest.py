from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from school_attendance.attendance.model import (
    StudentAttendanceRecord,
    TeacherAttendanceRecord,
)
from school_attendance.container import assemble
from school_attendance.core.enums import Role
from school_attendance.core.exceptions import DuplicateAttendanceError, StoreError, ValidationError
from school_attendance.roster.model import SchoolClass, StudentProfile, TeacherProfile
from school_attendance.users.model import Caller

SCHOOL = "sch-1"


class InMemoryRosterRepo:
    def __init__(self, classes, teachers, students):
        self._classes = list(classes)
        self._teachers = list(teachers)
        self._students = list(students)

    def list_classes(self, school_id):
        return [c for c in self._classes if c.school_id == school_id]

    def list_teachers(self, school_id):
        return [t for t in self._teachers if t.school_id == school_id]

    def list_students(self, school_id):
        return [s for s in self._students if s.school_id == school_id]


class InMemoryStudentAttendanceRepo:
    """Keyed on (student_id, date) like the unique index of the real stores."""

    def __init__(self):
        self._rows: dict[tuple, StudentAttendanceRecord] = {}
        self._next_id = 1
        self.writes = 0
        self.fail = False

    def _check(self):
        if self.fail:
            raise StoreError("store offline")

    def insert_many(self, records):
        self._check()
        keys = [(r.student_id, r.attendance_date) for r in records]
        if len(set(keys)) != len(keys) or any(k in self._rows for k in keys):
            raise DuplicateAttendanceError()
        out = []
        for r in records:
            rec = StudentAttendanceRecord(
                attendance_id=str(self._next_id),
                student_id=r.student_id,
                class_id=r.class_id,
                school_id=r.school_id,
                attendance_date=r.attendance_date,
                day=r.day,
                status=r.status,
                entry_id=r.entry_id,
                entry_name=r.entry_name,
                notes=r.notes,
                roll_no=r.roll_no,
            )
            self._next_id += 1
            self._rows[(r.student_id, r.attendance_date)] = rec
            out.append(rec)
        self.writes += len(out)
        return out

    def update_by_key(self, changes):
        self._check()
        missing = {}
        for i, c in enumerate(changes):
            row = self._rows.get((c.student_id, c.attendance_date))
            if row is None or row.class_id != c.class_id:
                missing[f"records[{i}]"] = "no attendance recorded"
        if missing:
            raise ValidationError("Attendance not found for update", missing)
        out = []
        for c in changes:
            key = (c.student_id, c.attendance_date)
            notes = (c.notes or None) if c.notes is not None else self._rows[key].notes
            self._rows[key] = replace(self._rows[key], status=c.status, notes=notes)
            out.append(self._rows[key])
        self.writes += len(out)
        return out

    def find_by_scope_and_date(self, class_id, on):
        self._check()
        return [r for r in self._rows.values() if r.class_id == class_id and r.attendance_date == on]

    def find_by_date_range(self, school_id, start, end, class_id=None):
        self._check()
        return [
            r
            for r in self._rows.values()
            if r.school_id == school_id
            and start <= r.attendance_date <= end
            and (class_id is None or r.class_id == class_id)
        ]

    def find_by_person(self, student_id, start=None, end=None):
        self._check()
        rows = [
            r
            for r in self._rows.values()
            if r.student_id == student_id
            and (start is None or r.attendance_date >= start)
            and (end is None or r.attendance_date <= end)
        ]
        return sorted(rows, key=lambda r: r.attendance_date, reverse=True)

    def all(self):
        return list(self._rows.values())


class InMemoryTeacherAttendanceRepo:
    def __init__(self):
        self._rows: dict[tuple, TeacherAttendanceRecord] = {}
        self._next_id = 1
        self.writes = 0
        self.fail = False

    def _check(self):
        if self.fail:
            raise StoreError("store offline")

    def insert_many(self, records):
        self._check()
        keys = [(r.teacher_id, r.attendance_date) for r in records]
        if len(set(keys)) != len(keys) or any(k in self._rows for k in keys):
            raise DuplicateAttendanceError()
        out = []
        for r in records:
            rec = TeacherAttendanceRecord(
                attendance_id=str(self._next_id),
                teacher_id=r.teacher_id,
                teacher_name=r.teacher_name,
                school_id=r.school_id,
                attendance_date=r.attendance_date,
                day=r.day,
                status=r.status,
                entry_id=r.entry_id,
                entry_name=r.entry_name,
            )
            self._next_id += 1
            self._rows[(r.teacher_id, r.attendance_date)] = rec
            out.append(rec)
        self.writes += len(out)
        return out

    def update_by_key(self, changes):
        self._check()
        missing = {}
        for i, c in enumerate(changes):
            row = self._rows.get((c.teacher_id, c.attendance_date))
            if row is None or row.school_id != c.school_id:
                missing[f"records[{i}]"] = "no attendance recorded"
        if missing:
            raise ValidationError("Attendance not found for update", missing)
        out = []
        for c in changes:
            key = (c.teacher_id, c.attendance_date)
            self._rows[key] = replace(self._rows[key], status=c.status)
            out.append(self._rows[key])
        self.writes += len(out)
        return out

    def find_by_scope_and_date(self, school_id, on):
        self._check()
        return [r for r in self._rows.values() if r.school_id == school_id and r.attendance_date == on]

    def find_by_date_range(self, school_id, start, end, class_id=None):
        self._check()
        return [r for r in self._rows.values() if r.school_id == school_id and start <= r.attendance_date <= end]

    def find_by_person(self, teacher_id, start=None, end=None):
        self._check()
        return [r for r in self._rows.values() if r.teacher_id == teacher_id]

    def all(self):
        return list(self._rows.values())


@pytest.fixture
def roster():
    return InMemoryRosterRepo(
        classes=[
            SchoolClass(class_id="7", school_id=SCHOOL, name="Class 7", class_teacher_id="t-1"),
            SchoolClass(class_id="8", school_id=SCHOOL, name="Class 8", class_teacher_id="t-2"),
            SchoolClass(class_id="x-1", school_id="sch-2", name="Other 1", class_teacher_id="t-9"),
        ],
        teachers=[
            TeacherProfile(teacher_id="t-1", school_id=SCHOOL, full_name="Asha Rao", user_id="u-t1"),
            TeacherProfile(teacher_id="t-2", school_id=SCHOOL, full_name="Bilal Khan", user_id="u-t2"),
            TeacherProfile(teacher_id="t-3", school_id=SCHOOL, full_name="Chen Wei", user_id="u-t3"),
            TeacherProfile(teacher_id="t-9", school_id="sch-2", full_name="Zoe Park", user_id="u-t9"),
        ],
        students=[
            StudentProfile(student_id="s-1", school_id=SCHOOL, class_id="7", full_name="Aarav Shah", roll_no=1, user_id="u-s1"),
            StudentProfile(student_id="s-2", school_id=SCHOOL, class_id="7", full_name="Bela Das", roll_no=2),
            StudentProfile(student_id="s-3", school_id=SCHOOL, class_id="7", full_name="Chirag Jain", roll_no=3),
            StudentProfile(student_id="s-4", school_id=SCHOOL, class_id="8", full_name="Dina Roy", roll_no=1),
            StudentProfile(student_id="s-9", school_id="sch-2", class_id="x-1", full_name="Omar Ali", roll_no=1),
        ],
    )


@pytest.fixture
def students_repo():
    return InMemoryStudentAttendanceRepo()


@pytest.fixture
def teachers_repo():
    return InMemoryTeacherAttendanceRepo()


@pytest.fixture
def container(roster, students_repo, teachers_repo):
    return assemble(roster_repo=roster, students_repo=students_repo, teachers_repo=teachers_repo)


@pytest.fixture
def ctx(container):
    return container.roster_service.load_context(SCHOOL)


@pytest.fixture
def admin():
    return Caller(user_id="u-admin", name="Principal Iyer", role=Role.SCHOOL_ADMIN, school_id=SCHOOL)


@pytest.fixture
def super_admin():
    return Caller(user_id="u-root", name="Platform Owner", role=Role.SUPER_ADMIN, school_id=None)


@pytest.fixture
def class_teacher():
    return Caller(user_id="u-t1", name="Asha Rao", role=Role.TEACHER, school_id=SCHOOL, teacher_id="t-1")


@pytest.fixture
def other_teacher():
    return Caller(user_id="u-t2", name="Bilal Khan", role=Role.TEACHER, school_id=SCHOOL, teacher_id="t-2")


@pytest.fixture
def student_caller():
    return Caller(user_id="u-s1", name="Aarav Shah", role=Role.STUDENT, school_id=SCHOOL, student_id="s-1")


@pytest.fixture
def foreign_admin():
    return Caller(user_id="u-admin2", name="Other Principal", role=Role.SCHOOL_ADMIN, school_id="sch-2")


@pytest.fixture
def may_first():
    return date(2025, 5, 1)
