from __future__ import annotations

import logging
from typing import Any, Dict, Sequence

from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from ..core.exceptions import StoreError
from ..database.mongo_connection import MongoConnection
from .model import SchoolClass, StudentProfile, TeacherProfile
from .repository import RosterRepository

logger = logging.getLogger(__name__)


def _opt_str(value: Any) -> str | None:
    return str(value) if value is not None else None


class MongoRosterRepository(RosterRepository):
    """Reads the ``classes``, ``teachers`` and ``students`` collections.

    Documents use ``_id`` as the entity id, matching what the CRUD side writes.
    """

    def __init__(self, conn: MongoConnection):
        self._conn = conn

    def _find(self, name: str, school_id: str, sort: list[tuple[str, int]]) -> list[Dict[str, Any]]:
        try:
            return list(self._conn.database()[name].find({"school_id": school_id}).sort(sort))
        except PyMongoError as exc:
            logger.exception("Roster query on %s failed", name)
            raise StoreError(str(exc)) from exc

    def list_classes(self, school_id: str) -> Sequence[SchoolClass]:
        return [
            SchoolClass(
                class_id=str(d["_id"]),
                school_id=str(d["school_id"]),
                name=d.get("name", ""),
                class_teacher_id=_opt_str(d.get("class_teacher_id")),
            )
            for d in self._find("classes", school_id, [("name", ASCENDING)])
        ]

    def list_teachers(self, school_id: str) -> Sequence[TeacherProfile]:
        return [
            TeacherProfile(
                teacher_id=str(d["_id"]),
                school_id=str(d["school_id"]),
                full_name=d.get("full_name", ""),
                user_id=_opt_str(d.get("user_id")),
            )
            for d in self._find("teachers", school_id, [("full_name", ASCENDING)])
        ]

    def list_students(self, school_id: str) -> Sequence[StudentProfile]:
        return [
            StudentProfile(
                student_id=str(d["_id"]),
                school_id=str(d["school_id"]),
                class_id=_opt_str(d.get("class_id")),
                full_name=d.get("full_name", ""),
                roll_no=d.get("roll_no"),
                user_id=_opt_str(d.get("user_id")),
            )
            for d in self._find("students", school_id, [("class_id", ASCENDING), ("roll_no", ASCENDING)])
        ]
