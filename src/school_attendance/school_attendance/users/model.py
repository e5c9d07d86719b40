from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import AuthenticationError


@dataclass(frozen=True)
class Caller:
    """The authenticated user behind a request.

    Login happens elsewhere; we only read what it stored into the Flask session.
    ``teacher_id`` / ``student_id`` link the account to its roster profile.
    """

    user_id: str
    name: str
    role: Role
    school_id: Optional[str]
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None

    @classmethod
    def from_session(cls, session: Mapping[str, Any]) -> "Caller":
        if not session.get("user_id") or not session.get("role"):
            raise AuthenticationError("Please log in to continue")
        try:
            role = Role(session["role"])
        except ValueError:
            raise AuthenticationError("Unknown role in session")

        def _opt(key: str) -> Optional[str]:
            value = session.get(key)
            return str(value) if value not in (None, "") else None

        return cls(
            user_id=str(session["user_id"]),
            name=str(session.get("name") or ""),
            role=role,
            school_id=_opt("school_id"),
            teacher_id=_opt("teacher_id"),
            student_id=_opt("student_id"),
        )
