from __future__ import annotations

from datetime import date

import pytest

from school_attendance.attendance.model import StudentMark, TeacherMark
from school_attendance.core.enums import BulkOutcome, StudentStatus, TeacherStatus
from school_attendance.core.exceptions import AuthorizationError, DuplicateAttendanceError, ValidationError


def _class7_marks(on, statuses=("present", "present", "absent")):
    return [
        StudentMark(student_id=f"s-{i}", class_id="7", attendance_date=on, status=StudentStatus(s))
        for i, s in enumerate(statuses, start=1)
    ]


def test_mark_students_creates_records_with_summary(container, ctx, admin, students_repo, may_first):
    result = container.attendance_service.mark_students(admin, ctx, _class7_marks(may_first))

    body = result.to_dict()
    assert result.outcome == BulkOutcome.CREATED
    assert body["written"] == 3
    assert body["summary"]["present"] == 2
    assert body["summary"]["absent"] == 1
    assert body["summary"]["percentage"] == 67
    assert len(students_repo.all()) == 3


def test_mark_students_stamps_actor_day_and_roster_fields(container, ctx, admin, may_first):
    result = container.attendance_service.mark_students(admin, ctx, _class7_marks(may_first))

    first = result.records[0]
    assert first.day == "Thursday"
    assert first.entry_id == "u-admin"
    assert first.entry_name == "Principal Iyer"
    assert first.school_id == "sch-1"
    assert first.roll_no == 1


def test_second_create_for_same_class_and_day_is_rejected_wholesale(container, ctx, admin, students_repo, may_first):
    svc = container.attendance_service
    svc.mark_students(admin, ctx, _class7_marks(may_first))

    with pytest.raises(DuplicateAttendanceError) as exc:
        svc.mark_students(admin, ctx, _class7_marks(may_first, ("absent", "absent", "absent")))

    assert str(exc.value) == "Already Marked"
    assert len(students_repo.all()) == 3
    assert all(r.status != StudentStatus.ABSENT or r.student_id == "s-3" for r in students_repo.all())


def test_same_class_on_another_day_is_allowed(container, ctx, admin, students_repo, may_first):
    svc = container.attendance_service
    svc.mark_students(admin, ctx, _class7_marks(may_first))
    svc.mark_students(admin, ctx, _class7_marks(date(2025, 5, 2)))

    assert len(students_repo.all()) == 6


def test_teacher_marks_only_own_class(container, ctx, class_teacher, other_teacher, students_repo, may_first):
    svc = container.attendance_service
    svc.mark_students(class_teacher, ctx, _class7_marks(may_first))

    with pytest.raises(AuthorizationError):
        svc.mark_students(other_teacher, ctx, _class7_marks(date(2025, 5, 2)))
    assert students_repo.writes == 3


def test_student_outside_class_rejects_batch(container, ctx, admin, students_repo, may_first):
    marks = _class7_marks(may_first) + [
        StudentMark(student_id="s-4", class_id="7", attendance_date=may_first, status=StudentStatus.PRESENT)
    ]

    with pytest.raises(AuthorizationError):
        container.attendance_service.mark_students(admin, ctx, marks)
    assert students_repo.all() == []


def test_update_with_original_writes_only_changed_entity(container, ctx, admin, students_repo, may_first):
    svc = container.attendance_service
    svc.mark_students(admin, ctx, _class7_marks(may_first))
    before = students_repo.writes

    original = _class7_marks(may_first)
    working = _class7_marks(may_first, ("present", "late", "absent"))
    result = svc.update_students(admin, ctx, working, original)

    assert result.outcome == BulkOutcome.UPDATED
    assert result.written == 1
    assert students_repo.writes - before == 1
    assert result.records[0].student_id == "s-2"
    assert result.records[0].status == StudentStatus.LATE


def test_update_without_differences_writes_nothing(container, ctx, admin, students_repo, may_first):
    svc = container.attendance_service
    svc.mark_students(admin, ctx, _class7_marks(may_first))
    before = students_repo.writes

    result = svc.update_students(admin, ctx, _class7_marks(may_first), _class7_marks(may_first))

    assert result.outcome == BulkOutcome.NO_CHANGES
    assert result.to_dict()["written"] == 0
    assert students_repo.writes == before


def test_update_of_unmarked_day_is_validation_error(container, ctx, admin, students_repo, may_first):
    with pytest.raises(ValidationError):
        container.attendance_service.update_students(admin, ctx, _class7_marks(may_first))
    assert students_repo.writes == 0


def test_mark_teachers_requires_admin(container, ctx, admin, class_teacher, teachers_repo, may_first):
    marks = [
        TeacherMark(teacher_id="t-1", school_id="sch-1", attendance_date=may_first, status=TeacherStatus.PRESENT),
        TeacherMark(teacher_id="t-2", school_id="sch-1", attendance_date=may_first, status=TeacherStatus.LEAVE),
    ]

    with pytest.raises(AuthorizationError):
        container.attendance_service.mark_teachers(class_teacher, ctx, marks)

    result = container.attendance_service.mark_teachers(admin, ctx, marks)
    assert result.written == 2
    assert {r.teacher_name for r in teachers_repo.all()} == {"Asha Rao", "Bilal Khan"}
    assert result.to_dict()["summary"]["leave"] == 1


def test_teacher_from_other_school_is_rejected(container, ctx, admin, teachers_repo, may_first):
    marks = [TeacherMark(teacher_id="t-9", school_id="sch-1", attendance_date=may_first, status=TeacherStatus.PRESENT)]

    with pytest.raises(AuthorizationError):
        container.attendance_service.mark_teachers(admin, ctx, marks)
    assert teachers_repo.all() == []


def test_update_teachers_diff(container, ctx, admin, teachers_repo, may_first):
    marks = [
        TeacherMark(teacher_id="t-1", school_id="sch-1", attendance_date=may_first, status=TeacherStatus.PRESENT),
        TeacherMark(teacher_id="t-2", school_id="sch-1", attendance_date=may_first, status=TeacherStatus.PRESENT),
    ]
    svc = container.attendance_service
    svc.mark_teachers(admin, ctx, marks)

    working = [marks[0], TeacherMark(teacher_id="t-2", school_id="sch-1", attendance_date=may_first, status=TeacherStatus.ABSENT)]
    result = svc.update_teachers(admin, ctx, working, marks)

    assert result.written == 1
    assert result.records[0].teacher_id == "t-2"


def test_class_day_reports_already_marked(container, ctx, class_teacher, may_first):
    svc = container.attendance_service
    assert svc.class_day(class_teacher, ctx, "7", may_first).already_marked is False

    svc.mark_students(class_teacher, ctx, _class7_marks(may_first))
    day = svc.class_day(class_teacher, ctx, "7", may_first)

    assert day.already_marked is True
    assert day.to_dict()["summary"]["total"] == 3


def test_student_sees_only_own_history(container, ctx, admin, student_caller, may_first):
    svc = container.attendance_service
    svc.mark_students(admin, ctx, _class7_marks(may_first))

    history = svc.student_history(student_caller, ctx, "s-1")
    assert [r.student_id for r in history.records] == ["s-1"]

    with pytest.raises(AuthorizationError):
        svc.student_history(student_caller, ctx, "s-2")
