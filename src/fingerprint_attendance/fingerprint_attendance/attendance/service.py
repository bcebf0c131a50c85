from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence, Union

from ..common.datetime_utils import now_local, seconds_between, truncate_to_second
from ..core.constants import (
    DEFAULT_DUPLICATE_SCAN_SECONDS,
    DEFAULT_HISTORY_DAYS,
    DEFAULT_TODAY_ENTRIES_LIMIT,
    MAX_TIMELOG_ATTEMPTS,
)
from ..core.enums import HalfDay, Remarks, TimeLogMode, TimeSlot
from ..core.exceptions import ConcurrentUpdateError, UserNotFound, ValidationError
from ..fingerprints.service import FingerprintService
from ..users.model import User
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .locks import KeyedLock
from .model import AttendanceLogRow, AttendanceRecord, TimeLogEntry, TimeLogResult
from .repository import AttendanceRepository
from .state_machine import completion_label, half_day_for, manual_slot, next_auto_slot

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("date", "username", "position", "am_time_in", "am_time_out", "pm_time_in", "pm_time_out", "remarks")


def display_time(now: datetime) -> str:
    return now.strftime("%I:%M:%S %p")


class AttendanceService:
    """Use case: time logging (AM/PM state machine) and attendance queries."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        fingerprints: Optional[FingerprintService] = None,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        locks: KeyedLock | None = None,
        duplicate_scan_seconds: int = DEFAULT_DUPLICATE_SCAN_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._fingerprints = fingerprints
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._locks = locks or KeyedLock()
        self._duplicate_seconds = int(duplicate_scan_seconds)
        self._clock = clock

    # ------------------------------------------------------------------ writes
    def record_time_log(
        self,
        user_id: int,
        *,
        mode: Union[TimeLogMode, str, None] = None,
        now: datetime | None = None,
    ) -> TimeLogResult:
        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)

        mode = mode if isinstance(mode, TimeLogMode) else TimeLogMode.parse(mode)
        now = now or self._clock()
        today = now.date()

        with self._locks.hold((user.user_id, today)):
            for attempt in range(1, MAX_TIMELOG_ATTEMPTS + 1):
                try:
                    return self._apply(user, mode=mode, now=now)
                except ConcurrentUpdateError as e:
                    logger.warning("Time log race for user %s (attempt %s/%s): %s", user.user_id, attempt, MAX_TIMELOG_ATTEMPTS, e)
        raise ConcurrentUpdateError(f"Could not record time log for user {user.user_id}")

    def record_fingerprint_time_log(
        self,
        template: str,
        *,
        mode: Union[TimeLogMode, str, None] = None,
        now: datetime | None = None,
    ) -> TimeLogResult:
        if self._fingerprints is None:
            raise ValidationError("Fingerprint matching is not configured")
        mode = mode if isinstance(mode, TimeLogMode) else TimeLogMode.parse(mode)
        if not template or not str(template).strip():
            raise ValidationError("Fingerprint template is required")

        match = self._fingerprints.identify_user(template)
        if not match.matched or match.user_id is None:
            return TimeLogResult(success=False, message="Fingerprint not recognized. Please try again.")
        return self.record_time_log(match.user_id, mode=mode, now=now)

    def _apply(self, user: User, *, mode: TimeLogMode, now: datetime) -> TimeLogResult:
        at = truncate_to_second(now)
        today = now.date()
        half = half_day_for(now.hour)
        record = self._attendance.get_for_user_and_date(user.user_id, today)

        if mode == TimeLogMode.AUTO:
            if record is not None and self._is_duplicate_scan(record, half, now):
                logger.info("Ignoring duplicate scan for user %s at %s", user.user_id, at)
                return self._result(user, False, "Duplicate scan ignored, please wait a moment", now=now)
            slot = next_auto_slot(record, half)
            if slot is None:
                label = completion_label(record, half)
                logger.info("Rejected scan for user %s: %s", user.user_id, label)
                return self._result(
                    user,
                    False,
                    f"{half.value} attendance already completed" if label != "Day Complete" else "Attendance for today already completed",
                    attendance_type=label,
                    now=now,
                )
        else:
            slot = manual_slot(half, mode)

        decision = self._factory.for_slot(slot).decide(now.time())

        if record is None:
            remarks = decision.remarks or Remarks.ONTIME
            self._attendance.insert_with_slot(
                user_id=user.user_id,
                work_date=today,
                position=user.position.value,
                slot=slot,
                at=at,
                remarks=remarks,
            )
        else:
            self._attendance.fill_slot(
                attendance_id=record.attendance_id,
                slot=slot,
                at=at,
                remarks=decision.remarks,
                only_if_empty=mode == TimeLogMode.AUTO,
            )
            remarks = decision.remarks or record.remarks or Remarks.ONTIME

        logger.info("%s recorded for user %s at %s (%s, mode=%s)", slot.label, user.user_id, at, remarks.value, mode.value)
        return self._result(user, True, f"{slot.label} recorded successfully", attendance_type=slot.label, remarks=remarks, now=now)

    def _is_duplicate_scan(self, record: AttendanceRecord, half: HalfDay, now: datetime) -> bool:
        if self._duplicate_seconds <= 0:
            return False
        last = record.latest_filled(half)
        if last is None:
            return False
        return abs(seconds_between(last, truncate_to_second(now))) <= self._duplicate_seconds

    def _result(
        self,
        user: User,
        success: bool,
        message: str,
        *,
        attendance_type: Optional[str] = None,
        remarks: Optional[Remarks] = None,
        now: datetime,
    ) -> TimeLogResult:
        return TimeLogResult(
            success=success,
            message=message,
            attendance_type=attendance_type,
            time=display_time(now),
            remarks=remarks.value if remarks else None,
            user_id=user.user_id,
            username=user.username,
            position=user.position.value,
            gender=user.gender.value if user.gender else None,
        )

    # ------------------------------------------------------------------- reads
    def get_today_logs(self, *, today: date | None = None) -> Sequence[AttendanceLogRow]:
        today = today or self._clock().date()
        return self._attendance.list_logs(start_date=today, end_date=today)

    def get_today_entries(self, *, limit: int = DEFAULT_TODAY_ENTRIES_LIMIT, today: date | None = None) -> list[TimeLogEntry]:
        """Flatten today's rows into one entry per filled slot, newest first."""

        entries: list[TimeLogEntry] = []
        for row in self.get_today_logs(today=today):
            for slot in TimeSlot:
                value = getattr(row, slot.value)
                if value is None:
                    continue
                entries.append(
                    TimeLogEntry(
                        user_id=row.user_id,
                        username=row.username,
                        position=row.position,
                        attendance_type=slot.label,
                        at=value,
                        remarks=row.remarks,
                    )
                )
        entries.sort(key=lambda e: e.at, reverse=True)
        return entries[: max(0, int(limit))]

    def get_user_attendance(
        self,
        user_id: int,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Sequence[AttendanceLogRow]:
        if not self._users.get_by_id(user_id):
            raise UserNotFound(user_id)
        end_date = end_date or self._clock().date()
        start_date = start_date or end_date - timedelta(days=DEFAULT_HISTORY_DAYS)
        self._check_range(start_date, end_date)
        return self._attendance.list_logs(start_date=start_date, end_date=end_date, user_id=user_id)

    def get_user_today(self, user_id: int) -> Optional[AttendanceLogRow]:
        if not self._users.get_by_id(user_id):
            raise UserNotFound(user_id)
        today = self._clock().date()
        rows = self._attendance.list_logs(start_date=today, end_date=today, user_id=user_id)
        return rows[0] if rows else None

    def get_all_attendance(
        self,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        search_name: str | None = None,
    ) -> Sequence[AttendanceLogRow]:
        end_date = end_date or self._clock().date()
        start_date = start_date or end_date - timedelta(days=DEFAULT_HISTORY_DAYS)
        self._check_range(start_date, end_date)
        return self._attendance.list_logs(
            start_date=start_date,
            end_date=end_date,
            search_name=(search_name or "").strip() or None,
        )

    def export_csv(self, rows: Sequence[AttendanceLogRow]) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(CSV_COLUMNS)
        for r in rows:
            d = r.to_dict()
            writer.writerow(
                [
                    d["date"],
                    r.username,
                    r.position or "",
                    d["amTimeIn"] or "",
                    d["amTimeOut"] or "",
                    d["pmTimeIn"] or "",
                    d["pmTimeOut"] or "",
                    r.remarks or "",
                ]
            )
        return buf.getvalue()

    @staticmethod
    def _check_range(start_date: date, end_date: date) -> None:
        if start_date > end_date:
            raise ValidationError("Start date must be on or before end date")
