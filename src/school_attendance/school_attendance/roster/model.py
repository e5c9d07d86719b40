from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence


@dataclass(frozen=True)
class SchoolClass:
    class_id: str
    school_id: str
    name: str
    class_teacher_id: Optional[str] = None


@dataclass(frozen=True)
class TeacherProfile:
    teacher_id: str
    school_id: str
    full_name: str
    user_id: Optional[str] = None


@dataclass(frozen=True)
class StudentProfile:
    student_id: str
    school_id: str
    class_id: Optional[str]
    full_name: str
    roll_no: Optional[int] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class SchoolContext:
    """Roster snapshot of one school, passed explicitly to scope and report code."""

    school_id: str
    classes: Sequence[SchoolClass] = field(default_factory=tuple)
    teachers: Sequence[TeacherProfile] = field(default_factory=tuple)
    students: Sequence[StudentProfile] = field(default_factory=tuple)

    def get_class(self, class_id: str) -> Optional[SchoolClass]:
        return next((c for c in self.classes if c.class_id == class_id), None)

    def get_teacher(self, teacher_id: str) -> Optional[TeacherProfile]:
        return next((t for t in self.teachers if t.teacher_id == teacher_id), None)

    def get_student(self, student_id: str) -> Optional[StudentProfile]:
        return next((s for s in self.students if s.student_id == student_id), None)

    def students_in_class(self, class_id: str) -> list[StudentProfile]:
        return [s for s in self.students if s.class_id == class_id]

    def display_name(self, kind: str, entity_id: str) -> str:
        if kind == "student":
            found = self.get_student(entity_id)
            return found.full_name if found else entity_id
        if kind == "teacher":
            found = self.get_teacher(entity_id)
            return found.full_name if found else entity_id
        found = self.get_class(entity_id)
        return found.name if found else entity_id
