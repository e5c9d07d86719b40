from __future__ import annotations

from ..common.validators import require_non_empty
from .model import SchoolContext
from .repository import RosterRepository


class RosterService:
    """Use case: load the roster snapshot a request works against."""

    def __init__(self, roster: RosterRepository):
        self._roster = roster

    def load_context(self, school_id: str) -> SchoolContext:
        school_id = require_non_empty(school_id, "school_id")
        return SchoolContext(
            school_id=school_id,
            classes=tuple(self._roster.list_classes(school_id)),
            teachers=tuple(self._roster.list_teachers(school_id)),
            students=tuple(self._roster.list_students(school_id)),
        )
