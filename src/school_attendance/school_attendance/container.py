from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.guard import DuplicateGuard
from .attendance.mongo_attendance_repository import (
    MongoStudentAttendanceRepository,
    MongoTeacherAttendanceRepository,
)
from .attendance.mysql_attendance_repository import (
    MySQLStudentAttendanceRepository,
    MySQLTeacherAttendanceRepository,
)
from .attendance.repository import StudentAttendanceRepository, TeacherAttendanceRepository
from .attendance.scope import ScopeResolver
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_TIER_AVERAGE_MIN, DEFAULT_TIER_GOOD_MIN
from .database.connection import DBConfig, DatabaseConnection
from .database.mongo_connection import MongoConfig, MongoConnection
from .reports.aggregator import ReportAggregator
from .reports.classifier import PercentageClassifier
from .reports.service import AttendanceReportService
from .roster.mongo_roster_repository import MongoRosterRepository
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .roster.service import RosterService

BACKENDS = ("mysql", "mongo")


@dataclass(frozen=True)
class Container:
    roster_repo: RosterRepository
    students_repo: StudentAttendanceRepository
    teachers_repo: TeacherAttendanceRepository

    scope: ScopeResolver
    guard: DuplicateGuard
    classifier: PercentageClassifier

    roster_service: RosterService
    attendance_service: AttendanceService
    report_service: AttendanceReportService


def assemble(
    *,
    roster_repo: RosterRepository,
    students_repo: StudentAttendanceRepository,
    teachers_repo: TeacherAttendanceRepository,
    tier_good_min: int = DEFAULT_TIER_GOOD_MIN,
    tier_average_min: int = DEFAULT_TIER_AVERAGE_MIN,
) -> Container:
    """Wire services on top of already-built repositories."""
    scope = ScopeResolver()
    guard = DuplicateGuard(students_repo, teachers_repo)
    classifier = PercentageClassifier(good_min=tier_good_min, average_min=tier_average_min)

    return Container(
        roster_repo=roster_repo,
        students_repo=students_repo,
        teachers_repo=teachers_repo,
        scope=scope,
        guard=guard,
        classifier=classifier,
        roster_service=RosterService(roster_repo),
        attendance_service=AttendanceService(students_repo, teachers_repo, guard=guard, scope=scope),
        report_service=AttendanceReportService(
            students_repo,
            teachers_repo,
            aggregator=ReportAggregator(classifier),
            scope=scope,
        ),
    )


def build_container(
    *,
    storage_backend: str = "mysql",
    db_config: Optional[dict] = None,
    mongo_config: Optional[dict] = None,
    tier_good_min: int = DEFAULT_TIER_GOOD_MIN,
    tier_average_min: int = DEFAULT_TIER_AVERAGE_MIN,
) -> Container:
    backend = (storage_backend or "mysql").lower()
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config or {}))
        roster_repo: RosterRepository = MySQLRosterRepository(conn)
        students_repo: StudentAttendanceRepository = MySQLStudentAttendanceRepository(conn)
        teachers_repo: TeacherAttendanceRepository = MySQLTeacherAttendanceRepository(conn)
    elif backend == "mongo":
        mongo = MongoConnection.get_instance(MongoConfig.from_settings(mongo_config or {}))
        roster_repo = MongoRosterRepository(mongo)
        students_repo = MongoStudentAttendanceRepository(mongo)
        teachers_repo = MongoTeacherAttendanceRepository(mongo)
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND {storage_backend!r}; expected one of {BACKENDS}")

    return assemble(
        roster_repo=roster_repo,
        students_repo=students_repo,
        teachers_repo=teachers_repo,
        tier_good_min=tier_good_min,
        tier_average_min=tier_average_min,
    )
