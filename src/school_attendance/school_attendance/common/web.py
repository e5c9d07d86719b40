from __future__ import annotations

import logging
from typing import Optional

from flask import jsonify, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateAttendanceError,
    StoreError,
    ValidationError,
)
from ..users.model import Caller

logger = logging.getLogger(__name__)


def current_caller() -> Caller:
    return Caller.from_session(session)


def requested_school(caller: Caller, requested: Optional[str]) -> str:
    """School a request works on: the caller's own unless one is named explicitly."""
    school_id = (requested or "").strip() or caller.school_id
    if not school_id:
        raise ValidationError("school_id is required", {"school_id": "required"})
    return school_id


def error_response(exc: DomainError):
    """Map a domain error to the JSON body and status code the API returns."""
    if isinstance(exc, ValidationError):
        return jsonify({"success": False, "message": str(exc), "errors": exc.errors}), 400
    if isinstance(exc, AuthenticationError):
        return jsonify({"success": False, "message": str(exc)}), 401
    if isinstance(exc, AuthorizationError):
        return jsonify({"success": False, "message": str(exc)}), 403
    if isinstance(exc, DuplicateAttendanceError):
        return jsonify({"success": False, "code": exc.code, "message": str(exc)}), 409
    if isinstance(exc, StoreError):
        return jsonify({"success": False, "message": "Attendance store is unavailable, please try again"}), 500
    logger.error("Unmapped domain error: %s", exc)
    return jsonify({"success": False, "message": str(exc)}), 400


def server_error():
    return jsonify({"success": False, "message": "Unexpected server error"}), 500
