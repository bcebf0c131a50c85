from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.locks import KeyedLock
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_CAPTURE_TIMEOUT_SECONDS,
    DEFAULT_DUPLICATE_SCAN_SECONDS,
    DEFAULT_MATCH_THRESHOLD,
    DEFAULT_TOKEN_MAX_AGE_SECONDS,
)
from .database.connection import DBConfig, DatabaseConnection
from .fingerprints.candidates import CandidateProvider
from .fingerprints.matcher import TemplateMatcher
from .fingerprints.mysql_fingerprint_repository import MySQLFingerprintRepository
from .fingerprints.repository import FingerprintRepository
from .fingerprints.service import FingerprintService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .scanner.service import ScannerService
from .scanner.session import ScannerSession
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, TokenSigner, UserService


@dataclass(frozen=True)
class Options:
    """Tunables read from the settings module."""

    secret_key: str
    match_threshold: float = DEFAULT_MATCH_THRESHOLD
    zkfp_library: Optional[str] = None
    capture_timeout_seconds: float = DEFAULT_CAPTURE_TIMEOUT_SECONDS
    duplicate_scan_seconds: int = DEFAULT_DUPLICATE_SCAN_SECONDS
    token_max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS

    @classmethod
    def from_settings(cls, settings) -> "Options":
        return cls(
            secret_key=str(getattr(settings, "SECRET_KEY")),
            match_threshold=float(getattr(settings, "MATCH_THRESHOLD", DEFAULT_MATCH_THRESHOLD)),
            zkfp_library=getattr(settings, "ZKFP_LIBRARY", None),
            capture_timeout_seconds=float(getattr(settings, "CAPTURE_TIMEOUT_SECONDS", DEFAULT_CAPTURE_TIMEOUT_SECONDS)),
            duplicate_scan_seconds=int(getattr(settings, "DUPLICATE_SCAN_SECONDS", DEFAULT_DUPLICATE_SCAN_SECONDS)),
            token_max_age_seconds=int(getattr(settings, "TOKEN_MAX_AGE_SECONDS", DEFAULT_TOKEN_MAX_AGE_SECONDS)),
        )


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    fingerprints_repo: FingerprintRepository
    attendance_repo: AttendanceRepository
    reports_repo: ReportRepository

    scanner_session: ScannerSession
    scanner_service: ScannerService
    matcher: TemplateMatcher
    candidates: CandidateProvider

    fingerprint_service: FingerprintService
    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    report_service: ReportService


def assemble(
    *,
    options: Options,
    users_repo: UserRepository,
    fingerprints_repo: FingerprintRepository,
    attendance_repo: AttendanceRepository,
    reports_repo: ReportRepository,
    scanner_session: Optional[ScannerSession] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over the given repositories (MySQL in production, in-memory in tests)."""

    session = scanner_session or ScannerSession(library_path=options.zkfp_library)
    scanner_service = ScannerService(session, capture_timeout_seconds=options.capture_timeout_seconds)
    matcher = TemplateMatcher(session, threshold=options.match_threshold)
    candidates = CandidateProvider(fingerprints_repo, users_repo)

    fingerprint_service = FingerprintService(fingerprints_repo, users_repo, matcher, candidates)
    auth_service = AuthService(
        users_repo,
        fingerprints_repo,
        fingerprint_service,
        TokenSigner(options.secret_key, max_age_seconds=options.token_max_age_seconds),
    )
    user_service = UserService(users_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        fingerprint_service,
        strategy_factory=AttendanceStrategyFactory(),
        locks=KeyedLock(),
        duplicate_scan_seconds=options.duplicate_scan_seconds,
    )
    report_service = ReportService(reports_repo, candidates)

    return Container(
        conn=conn,
        users_repo=users_repo,
        fingerprints_repo=fingerprints_repo,
        attendance_repo=attendance_repo,
        reports_repo=reports_repo,
        scanner_session=session,
        scanner_service=scanner_service,
        matcher=matcher,
        candidates=candidates,
        fingerprint_service=fingerprint_service,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict, options: Options) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        options=options,
        users_repo=MySQLUserRepository(conn),
        fingerprints_repo=MySQLFingerprintRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        reports_repo=MySQLReportRepository(conn),
        conn=conn,
    )
