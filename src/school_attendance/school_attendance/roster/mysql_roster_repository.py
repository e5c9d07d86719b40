from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import SchoolClass, StudentProfile, TeacherProfile
from .repository import RosterRepository


def _opt_str(value) -> str | None:
    return str(value) if value is not None else None


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_classes(self, school_id: str) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, school_id, name, class_teacher_id FROM classes WHERE school_id=%s ORDER BY name",
                (school_id,),
            )
            return [
                SchoolClass(
                    class_id=str(r["class_id"]),
                    school_id=str(r["school_id"]),
                    name=r["name"],
                    class_teacher_id=_opt_str(r.get("class_teacher_id")),
                )
                for r in fetchall(cur)
            ]

    def list_teachers(self, school_id: str) -> Sequence[TeacherProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT teacher_id, school_id, full_name, user_id FROM teachers WHERE school_id=%s ORDER BY full_name",
                (school_id,),
            )
            return [
                TeacherProfile(
                    teacher_id=str(r["teacher_id"]),
                    school_id=str(r["school_id"]),
                    full_name=r["full_name"],
                    user_id=_opt_str(r.get("user_id")),
                )
                for r in fetchall(cur)
            ]

    def list_students(self, school_id: str) -> Sequence[StudentProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, school_id, class_id, full_name, roll_no, user_id
                FROM students
                WHERE school_id=%s
                ORDER BY class_id, roll_no, full_name
                """,
                (school_id,),
            )
            return [
                StudentProfile(
                    student_id=str(r["student_id"]),
                    school_id=str(r["school_id"]),
                    class_id=_opt_str(r.get("class_id")),
                    full_name=r["full_name"],
                    roll_no=int(r["roll_no"]) if r.get("roll_no") is not None else None,
                    user_id=_opt_str(r.get("user_id")),
                )
                for r in fetchall(cur)
            ]
