from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Dict, Optional, Sequence

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReplaceOne, UpdateOne
from pymongo.collection import Collection
from pymongo.errors import BulkWriteError, DuplicateKeyError, PyMongoError

from ..core.enums import StudentStatus, TeacherStatus
from ..core.exceptions import DuplicateAttendanceError, StoreError, ValidationError
from ..database.mongo_connection import MongoConnection
from .model import (
    NewStudentAttendance,
    NewTeacherAttendance,
    StudentAttendanceRecord,
    StudentMark,
    TeacherAttendanceRecord,
    TeacherMark,
)
from .repository import StudentAttendanceRepository, TeacherAttendanceRepository

logger = logging.getLogger(__name__)

DUPLICATE_KEY = 11000


def to_midnight(value: date) -> datetime:
    # BSON has no date-only type.
    return datetime.combine(value, time.min)


def _as_date(value: Any) -> date:
    return value.date() if isinstance(value, datetime) else value


def doc_to_student_record(doc: Dict[str, Any]) -> StudentAttendanceRecord:
    return StudentAttendanceRecord(
        attendance_id=str(doc["_id"]),
        student_id=str(doc["student_id"]),
        class_id=str(doc["class_id"]),
        school_id=str(doc["school_id"]),
        attendance_date=_as_date(doc["date"]),
        day=doc["day"],
        status=StudentStatus(doc["status"]),
        entry_id=str(doc["entry_id"]),
        entry_name=doc["entry_name"],
        notes=doc.get("notes"),
        roll_no=doc.get("roll_no"),
    )


def doc_to_teacher_record(doc: Dict[str, Any]) -> TeacherAttendanceRecord:
    return TeacherAttendanceRecord(
        attendance_id=str(doc["_id"]),
        teacher_id=str(doc["teacher_id"]),
        teacher_name=doc["teacher_name"],
        school_id=str(doc["school_id"]),
        attendance_date=_as_date(doc["date"]),
        day=doc["day"],
        status=TeacherStatus(doc["status"]),
        entry_id=str(doc["entry_id"]),
        entry_name=doc["entry_name"],
    )


def _range_filter(start: Optional[date], end: Optional[date]) -> Dict[str, Any]:
    bounds: Dict[str, Any] = {}
    if start is not None:
        bounds["$gte"] = to_midnight(start)
    if end is not None:
        bounds["$lte"] = to_midnight(end)
    return {"date": bounds} if bounds else {}


def _is_duplicate(exc: PyMongoError) -> bool:
    if isinstance(exc, DuplicateKeyError):
        return True
    if isinstance(exc, BulkWriteError):
        return any(err.get("code") == DUPLICATE_KEY for err in exc.details.get("writeErrors", []))
    return False


class _MongoAttendanceStore:
    """Shared write mechanics; subclasses name the collection and the documents."""

    collection_name: str = ""

    def __init__(self, conn: MongoConnection):
        self._conn = conn

    @property
    def _collection(self) -> Collection:
        return self._conn.database()[self.collection_name]

    def _insert_docs(self, docs: list[Dict[str, Any]]) -> None:
        # Pre-assigned ids let a failed batch be removed again.
        ids = [ObjectId() for _ in docs]
        for doc, _id in zip(docs, ids):
            doc["_id"] = _id
        try:
            self._collection.insert_many(docs, ordered=True)
        except PyMongoError as exc:
            try:
                self._collection.delete_many({"_id": {"$in": ids}})
            except PyMongoError:
                logger.exception("Could not remove partial %s batch", self.collection_name)
            if _is_duplicate(exc):
                raise DuplicateAttendanceError() from exc
            logger.exception("Insert into %s failed", self.collection_name)
            raise StoreError(str(exc)) from exc

    def _update_docs(self, filters: list[Dict[str, Any]], sets: list[Dict[str, Any]], what: str) -> list[Dict[str, Any]]:
        try:
            originals = [self._collection.find_one(f) for f in filters]
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

        missing = {f"records[{i}]": f"no attendance recorded for this {what} and date" for i, doc in enumerate(originals) if doc is None}
        if missing:
            raise ValidationError("Attendance not found for update", missing)

        ops = [UpdateOne({"_id": doc["_id"]}, {"$set": s}) for doc, s in zip(originals, sets)]
        try:
            self._collection.bulk_write(ops, ordered=True)
        except PyMongoError as exc:
            logger.exception("Update of %s failed, restoring %d documents", self.collection_name, len(originals))
            try:
                self._collection.bulk_write([ReplaceOne({"_id": d["_id"]}, d) for d in originals], ordered=False)
            except PyMongoError:
                logger.exception("Restore of %s failed", self.collection_name)
            raise StoreError(str(exc)) from exc
        return [{**doc, **s} for doc, s in zip(originals, sets)]

    def _find(self, query: Dict[str, Any], sort: list[tuple[str, int]]) -> list[Dict[str, Any]]:
        try:
            return list(self._collection.find(query).sort(sort))
        except PyMongoError as exc:
            logger.exception("Query on %s failed", self.collection_name)
            raise StoreError(str(exc)) from exc


class MongoStudentAttendanceRepository(_MongoAttendanceStore, StudentAttendanceRepository):
    collection_name = "student_attendance"

    def insert_many(self, records: Sequence[NewStudentAttendance]) -> Sequence[StudentAttendanceRecord]:
        if not records:
            return []
        docs = [
            {
                "student_id": r.student_id,
                "class_id": r.class_id,
                "school_id": r.school_id,
                "roll_no": r.roll_no,
                "date": to_midnight(r.attendance_date),
                "day": r.day,
                "status": r.status.value,
                "notes": r.notes,
                "entry_id": r.entry_id,
                "entry_name": r.entry_name,
            }
            for r in records
        ]
        self._insert_docs(docs)
        return [doc_to_student_record(d) for d in docs]

    def update_by_key(self, changes: Sequence[StudentMark]) -> Sequence[StudentAttendanceRecord]:
        if not changes:
            return []
        filters = [
            {"student_id": c.student_id, "class_id": c.class_id, "date": to_midnight(c.attendance_date)}
            for c in changes
        ]
        sets = []
        for c in changes:
            s: Dict[str, Any] = {"status": c.status.value}
            if c.notes is not None:
                s["notes"] = c.notes or None
            sets.append(s)
        return [doc_to_student_record(d) for d in self._update_docs(filters, sets, "student")]

    def find_by_scope_and_date(self, class_id: str, on: date) -> Sequence[StudentAttendanceRecord]:
        docs = self._find(
            {"class_id": class_id, "date": to_midnight(on)},
            [("roll_no", ASCENDING), ("student_id", ASCENDING)],
        )
        return [doc_to_student_record(d) for d in docs]

    def find_by_date_range(
        self,
        school_id: str,
        start: date,
        end: date,
        class_id: Optional[str] = None,
    ) -> Sequence[StudentAttendanceRecord]:
        query: Dict[str, Any] = {"school_id": school_id, **_range_filter(start, end)}
        if class_id is not None:
            query["class_id"] = class_id
        docs = self._find(query, [("date", ASCENDING), ("class_id", ASCENDING), ("student_id", ASCENDING)])
        return [doc_to_student_record(d) for d in docs]

    def find_by_person(
        self,
        student_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[StudentAttendanceRecord]:
        docs = self._find({"student_id": student_id, **_range_filter(start, end)}, [("date", DESCENDING)])
        return [doc_to_student_record(d) for d in docs]


class MongoTeacherAttendanceRepository(_MongoAttendanceStore, TeacherAttendanceRepository):
    collection_name = "teacher_attendance"

    def insert_many(self, records: Sequence[NewTeacherAttendance]) -> Sequence[TeacherAttendanceRecord]:
        if not records:
            return []
        docs = [
            {
                "teacher_id": r.teacher_id,
                "teacher_name": r.teacher_name,
                "school_id": r.school_id,
                "date": to_midnight(r.attendance_date),
                "day": r.day,
                "status": r.status.value,
                "entry_id": r.entry_id,
                "entry_name": r.entry_name,
            }
            for r in records
        ]
        self._insert_docs(docs)
        return [doc_to_teacher_record(d) for d in docs]

    def update_by_key(self, changes: Sequence[TeacherMark]) -> Sequence[TeacherAttendanceRecord]:
        if not changes:
            return []
        filters = [
            {"teacher_id": c.teacher_id, "school_id": c.school_id, "date": to_midnight(c.attendance_date)}
            for c in changes
        ]
        sets = [{"status": c.status.value} for c in changes]
        return [doc_to_teacher_record(d) for d in self._update_docs(filters, sets, "teacher")]

    def find_by_scope_and_date(self, school_id: str, on: date) -> Sequence[TeacherAttendanceRecord]:
        docs = self._find({"school_id": school_id, "date": to_midnight(on)}, [("teacher_name", ASCENDING)])
        return [doc_to_teacher_record(d) for d in docs]

    def find_by_date_range(
        self,
        school_id: str,
        start: date,
        end: date,
        class_id: Optional[str] = None,
    ) -> Sequence[TeacherAttendanceRecord]:
        docs = self._find(
            {"school_id": school_id, **_range_filter(start, end)},
            [("date", ASCENDING), ("teacher_id", ASCENDING)],
        )
        return [doc_to_teacher_record(d) for d in docs]

    def find_by_person(
        self,
        teacher_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[TeacherAttendanceRecord]:
        docs = self._find({"teacher_id": teacher_id, **_range_filter(start, end)}, [("date", DESCENDING)])
        return [doc_to_teacher_record(d) for d in docs]
