from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Mapping

from flask import Flask, jsonify, request, session

from ..common.validators import require_date, require_non_empty
from ..common.web import current_caller, error_response, requested_school, server_error
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .payloads import parse_student_marks, parse_teacher_marks, split_update_body

logger = logging.getLogger(__name__)


def _records_of(body: Any) -> Any:
    # POST accepts a bare array or {"records": [...]}.
    if isinstance(body, Mapping):
        return body.get("records")
    return body


def _school_hint(body: Any) -> str | None:
    return body.get("school_id") if isinstance(body, Mapping) else None


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please log in to continue"}), 401
            return view(*args, **kwargs)

        return wrapper

    def load_context(caller, requested=None):
        return container.roster_service.load_context(requested_school(caller, requested))

    @app.route("/attendance", methods=["GET"], endpoint="attendance_day")
    @login_required
    def attendance_day():
        try:
            caller = current_caller()
            scope = (request.args.get("scope") or "class").strip().lower()
            on = require_date(request.args.get("date"), "date")
            ctx = load_context(caller, request.args.get("school_id"))
            if scope == "class":
                class_id = require_non_empty(request.args.get("class_id"), "class_id")
                day = container.attendance_service.class_day(caller, ctx, class_id, on)
            elif scope == "school":
                day = container.attendance_service.school_teachers_day(caller, ctx, on)
            else:
                raise ValidationError("scope must be 'class' or 'school'", {"scope": "invalid choice"})
            return jsonify(day.to_dict()), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Failed to load day attendance")
            return server_error()

    @app.route("/bulk-student-attendance", methods=["POST"], endpoint="bulk_student_create")
    @login_required
    def bulk_student_create():
        try:
            caller = current_caller()
            body = request.get_json(silent=True)
            marks = parse_student_marks(_records_of(body))
            ctx = load_context(caller, _school_hint(body))
            result = container.attendance_service.mark_students(caller, ctx, marks)
            return jsonify(result.to_dict()), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Bulk student attendance failed")
            return server_error()

    @app.route("/bulk-student-attendance", methods=["PUT"], endpoint="bulk_student_update")
    @login_required
    def bulk_student_update():
        try:
            caller = current_caller()
            body = request.get_json(silent=True)
            records, original = split_update_body(body)
            marks = parse_student_marks(records)
            before = parse_student_marks(original, path="original") if original is not None else None
            ctx = load_context(caller, _school_hint(body))
            result = container.attendance_service.update_students(caller, ctx, marks, before)
            return jsonify(result.to_dict()), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Bulk student attendance update failed")
            return server_error()

    @app.route("/bulk-teacher-attendance", methods=["POST"], endpoint="bulk_teacher_create")
    @login_required
    def bulk_teacher_create():
        try:
            caller = current_caller()
            body = request.get_json(silent=True)
            ctx = load_context(caller, _school_hint(body))
            marks = parse_teacher_marks(_records_of(body), school_id=ctx.school_id)
            result = container.attendance_service.mark_teachers(caller, ctx, marks)
            return jsonify(result.to_dict()), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Bulk teacher attendance failed")
            return server_error()

    @app.route("/bulk-teacher-attendance", methods=["PUT"], endpoint="bulk_teacher_update")
    @login_required
    def bulk_teacher_update():
        try:
            caller = current_caller()
            body = request.get_json(silent=True)
            records, original = split_update_body(body)
            ctx = load_context(caller, _school_hint(body))
            marks = parse_teacher_marks(records, school_id=ctx.school_id)
            before = (
                parse_teacher_marks(original, school_id=ctx.school_id, path="original") if original is not None else None
            )
            result = container.attendance_service.update_teachers(caller, ctx, marks, before)
            return jsonify(result.to_dict()), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Bulk teacher attendance update failed")
            return server_error()

    @app.route("/students/<student_id>/attendance", methods=["GET"], endpoint="student_attendance_history")
    @login_required
    def student_attendance_history(student_id: str):
        try:
            caller = current_caller()
            start = require_date(request.args["start"], "start") if request.args.get("start") else None
            end = require_date(request.args["end"], "end") if request.args.get("end") else None
            ctx = load_context(caller, request.args.get("school_id"))
            history = container.attendance_service.student_history(caller, ctx, student_id, start=start, end=end)
            return jsonify(history.to_dict()), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Failed to load attendance history for %s", student_id)
            return server_error()
