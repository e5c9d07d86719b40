from __future__ import annotations

from datetime import date
from typing import Any

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


class FieldErrors:
    """Collects field-level problems so a request can report all of them at once."""

    def __init__(self) -> None:
        self.errors: dict[str, str] = {}

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, message)

    def raise_if_any(self, message: str = "Validation failed") -> None:
        if self.errors:
            raise ValidationError(message, self.errors)


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required", {field_name: "required"})
    return str(value).strip()


def require_date(value: Any, field_name: str) -> date:
    if isinstance(value, date):
        return value
    raw = require_non_empty(value, field_name)
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date", {field_name: "invalid date"})
