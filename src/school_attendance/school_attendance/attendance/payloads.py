from __future__ import annotations

from datetime import date
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

from ..common.datetime_utils import parse_iso_date
from ..common.validators import FieldErrors
from ..core.enums import StudentStatus, TeacherStatus
from ..core.exceptions import ValidationError
from .model import AttendanceMark, StudentMark, TeacherMark


def _field(item: Mapping[str, Any], *names: str) -> Optional[str]:
    # Clients send either snake_case or camelCase keys.
    for name in names:
        value = item.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _notes(item: Mapping[str, Any]) -> Optional[str]:
    # Absent means keep; an explicit empty string clears.
    value = item.get("notes")
    if value is None:
        return None
    return str(value).strip()


def _parse_date(raw: Optional[str], path: str, errors: FieldErrors) -> Optional[date]:
    if raw is None:
        errors.add(path, "required")
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        errors.add(path, "must be a YYYY-MM-DD date")
        return None


def _parse_status(raw: Optional[str], path: str, errors: FieldErrors, enum_cls):
    if raw is None:
        errors.add(path, "required")
        return None
    try:
        return enum_cls(raw.lower())
    except ValueError:
        errors.add(path, "must be one of: " + ", ".join(m.value for m in enum_cls))
        return None


def _require_list(payload: Any, path: str = "records") -> Sequence[Any]:
    if not isinstance(payload, list) or not payload:
        raise ValidationError("Attendance batch must be a non-empty list", {path: "must be a non-empty list"})
    return payload


def _check_batch(marks: Sequence[AttendanceMark], entity: Callable[[AttendanceMark], str], scope: Callable[[AttendanceMark], str], path: str) -> None:
    errors = FieldErrors()
    if len({(scope(m), m.attendance_date) for m in marks}) > 1:
        errors.add(path, "a batch must target a single scope and date")
    seen: set[str] = set()
    for i, m in enumerate(marks):
        if entity(m) in seen:
            errors.add(f"{path}[{i}]", "appears more than once in the batch")
        seen.add(entity(m))
    errors.raise_if_any("Invalid attendance batch")


def parse_student_marks(payload: Any, *, path: str = "records") -> list[StudentMark]:
    """Validate a JSON array of student entries into marks for one class and date."""
    items = _require_list(payload, path)
    errors = FieldErrors()
    marks: list[StudentMark] = []

    for i, item in enumerate(items):
        prefix = f"{path}[{i}]"
        if not isinstance(item, Mapping):
            errors.add(prefix, "must be an object")
            continue
        student_id = _field(item, "student_id", "studentId")
        class_id = _field(item, "class_id", "classId")
        if student_id is None:
            errors.add(f"{prefix}.student_id", "required")
        if class_id is None:
            errors.add(f"{prefix}.class_id", "required")
        on = _parse_date(_field(item, "date"), f"{prefix}.date", errors)
        status = _parse_status(_field(item, "status"), f"{prefix}.status", errors, StudentStatus)
        notes = _notes(item)
        if student_id and class_id and on and status:
            marks.append(StudentMark(student_id=student_id, class_id=class_id, attendance_date=on, status=status, notes=notes))

    errors.raise_if_any("Invalid attendance records")
    _check_batch(marks, lambda m: m.student_id, lambda m: m.class_id, path)
    return marks


def parse_teacher_marks(payload: Any, *, school_id: str, path: str = "records") -> list[TeacherMark]:
    """Validate a JSON array of teacher entries; ``school_id`` fills entries that omit it."""
    items = _require_list(payload, path)
    errors = FieldErrors()
    marks: list[TeacherMark] = []

    for i, item in enumerate(items):
        prefix = f"{path}[{i}]"
        if not isinstance(item, Mapping):
            errors.add(prefix, "must be an object")
            continue
        teacher_id = _field(item, "teacher_id", "teacherId")
        if teacher_id is None:
            errors.add(f"{prefix}.teacher_id", "required")
        scope = _field(item, "school_id", "schoolId") or school_id
        on = _parse_date(_field(item, "date"), f"{prefix}.date", errors)
        status = _parse_status(_field(item, "status"), f"{prefix}.status", errors, TeacherStatus)
        if teacher_id and on and status:
            marks.append(TeacherMark(teacher_id=teacher_id, school_id=scope, attendance_date=on, status=status))

    errors.raise_if_any("Invalid attendance records")
    _check_batch(marks, lambda m: m.teacher_id, lambda m: m.school_id, path)
    return marks


def split_update_body(body: Any) -> Tuple[Any, Optional[Any]]:
    """Return (records, original) from an update request body.

    A bare list is accepted as ``records`` without an original.
    """

    if isinstance(body, list):
        return body, None
    if not isinstance(body, Mapping):
        raise ValidationError("Request body must be a JSON object", {"body": "must be an object"})
    return body.get("records"), body.get("original")
