from __future__ import annotations

from typing import Mapping, Optional

from .constants import ALREADY_MARKED_MESSAGE


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``errors`` maps a field path (``records[2].status``) to its message.
    """

    def __init__(self, message: str, errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})


class AuthenticationError(DomainError):
    """Raised when a request carries no caller identity."""


class AuthorizationError(DomainError):
    """Raised when a caller acts outside their resolved scope."""


class DuplicateAttendanceError(DomainError):
    """Raised when attendance is already recorded for a scope and date."""

    code = "already_marked"

    def __init__(self, message: str = ALREADY_MARKED_MESSAGE):
        super().__init__(message)


class StoreError(DomainError):
    """Raised when the storage backend fails."""
