from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Tuple

from ..core.constants import DAY_LABELS, TERMS


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def day_label(value: date) -> str:
    """English weekday name, independent of the process locale."""
    return DAY_LABELS[value.weekday()]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def week_bounds(anchor: date) -> Tuple[date, date]:
    """Monday..Sunday of the week containing ``anchor``."""
    start = anchor - timedelta(days=anchor.weekday())
    return start, start + timedelta(days=6)


def term_bounds(year: int, month: int) -> Tuple[date, date]:
    for first_month, last_month in TERMS:
        if first_month <= month <= last_month:
            return date(year, first_month, 1), month_bounds(year, last_month)[1]
    raise ValueError(f"Month out of range: {month!r}")


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)
