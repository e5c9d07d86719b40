from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.web import current_caller, error_response, requested_school, server_error
from ..core.exceptions import DomainError, StoreError
from ..container import Container
from .model import AttendanceReport, ReportQuery
from .periods import derive_date_range

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please log in to continue"}), 401
            return view(*args, **kwargs)

        return wrapper

    @app.route("/reports/attendance", methods=["GET"], endpoint="attendance_report")
    @login_required
    def attendance_report():
        """Pivoted attendance report.

        Query: reportType, timePeriod, month, year, classId (student reports), day (weekly).
        """
        try:
            caller = current_caller()
            query = ReportQuery.from_args(request.args)
            school_id = requested_school(caller, request.args.get("schoolId"))
            try:
                ctx = container.roster_service.load_context(school_id)
            except StoreError:
                logger.exception("Roster for school %s unavailable, returning empty report", school_id)
                start, end = derive_date_range(query)
                return jsonify(AttendanceReport.empty(query, start, end, error=True).to_dict()), 200
            report = container.report_service.generate(caller, ctx, query)
            return jsonify(report.to_dict()), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Attendance report failed")
            return server_error()
