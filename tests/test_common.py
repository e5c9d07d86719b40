from __future__ import annotations

from datetime import date

import pytest

from school_attendance.attendance.model import AttendanceCounts
from school_attendance.common.datetime_utils import day_label, term_bounds, week_bounds
from school_attendance.common.stats import percentage
from school_attendance.common.validators import FieldErrors, require_date, require_non_empty
from school_attendance.core.enums import Role
from school_attendance.core.exceptions import AuthenticationError, ValidationError
from school_attendance.users.model import Caller


@pytest.mark.parametrize(
    "part, total, expected",
    [(2, 3, 67), (1, 3, 33), (1, 8, 13), (20, 25, 80), (0, 5, 0), (0, 0, 0), (5, 5, 100)],
)
def test_percentage_rounds_half_up(part, total, expected):
    assert percentage(part, total) == expected


def test_late_counts_as_attended():
    counts = AttendanceCounts.from_statuses(["present", "late", "absent", "leave"])

    assert counts.attended == 2
    assert counts.total == 4
    assert counts.percentage == 50


def test_day_label_is_english_weekday():
    assert day_label(date(2025, 5, 1)) == "Thursday"
    assert day_label(date(2025, 5, 4)) == "Sunday"


def test_week_and_term_bounds():
    assert week_bounds(date(2025, 5, 4)) == (date(2025, 4, 28), date(2025, 5, 4))
    assert term_bounds(2025, 9) == (date(2025, 9, 1), date(2025, 12, 31))
    with pytest.raises(ValueError):
        term_bounds(2025, 13)


def test_validators_report_field_paths():
    with pytest.raises(ValidationError) as exc:
        require_date("2025-13-01", "date")
    assert exc.value.errors == {"date": "invalid date"}

    with pytest.raises(ValidationError) as exc:
        require_non_empty("  ", "class_id")
    assert exc.value.errors == {"class_id": "required"}

    assert require_date("2025-05-01", "date") == date(2025, 5, 1)

    errors = FieldErrors()
    errors.add("a", "first")
    errors.add("a", "second")
    with pytest.raises(ValidationError) as exc:
        errors.raise_if_any()
    assert exc.value.errors == {"a": "first"}


def test_caller_from_session():
    caller = Caller.from_session({"user_id": 5, "role": "teacher", "school_id": "sch-1", "teacher_id": "t-1", "student_id": ""})

    assert caller.user_id == "5"
    assert caller.role == Role.TEACHER
    assert caller.student_id is None

    with pytest.raises(AuthenticationError):
        Caller.from_session({"user_id": "5"})
    with pytest.raises(AuthenticationError):
        Caller.from_session({"user_id": "5", "role": "janitor"})
