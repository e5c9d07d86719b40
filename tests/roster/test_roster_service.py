from __future__ import annotations

import pytest

from school_attendance.core.exceptions import ValidationError
from school_attendance.roster.service import RosterService


def test_load_context_keeps_only_the_school(roster):
    ctx = RosterService(roster).load_context("sch-1")

    assert [c.class_id for c in ctx.classes] == ["7", "8"]
    assert ctx.get_teacher("t-9") is None
    assert [s.student_id for s in ctx.students_in_class("7")] == ["s-1", "s-2", "s-3"]


def test_display_name_falls_back_to_id(roster):
    ctx = RosterService(roster).load_context("sch-1")

    assert ctx.display_name("student", "s-2") == "Bela Das"
    assert ctx.display_name("teacher", "t-3") == "Chen Wei"
    assert ctx.display_name("class", "8") == "Class 8"
    assert ctx.display_name("class", "99") == "99"


def test_blank_school_is_rejected(roster):
    with pytest.raises(ValidationError):
        RosterService(roster).load_context("  ")
