from __future__ import annotations

from datetime import date
from typing import Tuple

from ..common.datetime_utils import month_bounds, term_bounds, week_bounds, year_bounds
from ..core.enums import TimePeriod
from ..core.exceptions import ValidationError
from .model import ReportQuery


def derive_date_range(query: ReportQuery) -> Tuple[date, date]:
    """Inclusive [start, end] covered by a report query.

    week  -> Monday..Sunday of the week containing (year, month, day)
    month -> first..last day of the month
    term  -> the four-month term containing the month
    year  -> Jan 1..Dec 31
    """

    period = query.time_period
    if period == TimePeriod.MONTH:
        return month_bounds(query.year, query.month)
    if period == TimePeriod.WEEK:
        try:
            anchor = date(query.year, query.month, query.day)
        except ValueError:
            raise ValidationError("Invalid anchor day for a weekly report", {"day": "not a day of the given month"})
        return week_bounds(anchor)
    if period == TimePeriod.TERM:
        return term_bounds(query.year, query.month)
    return year_bounds(query.year)
