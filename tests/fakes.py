from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

from werkzeug.security import generate_password_hash

from src.fingerprint_attendance.fingerprint_attendance.attendance.model import AttendanceLogRow, AttendanceRecord
from src.fingerprint_attendance.fingerprint_attendance.core.enums import CandidateSource, Gender, Position
from src.fingerprint_attendance.fingerprint_attendance.core.exceptions import ConcurrentUpdateError
from src.fingerprint_attendance.fingerprint_attendance.fingerprints.model import Candidate, Fingerprint
from src.fingerprint_attendance.fingerprint_attendance.reports.model import ReportRow
from src.fingerprint_attendance.fingerprint_attendance.scanner import native
from src.fingerprint_attendance.fingerprint_attendance.users.model import User


def make_user(user_id: int, username: str, position: Position = Position.STAFF, *, password: str = "secret1", template=None) -> User:
    return User(
        user_id=user_id,
        username=username,
        password_hash=generate_password_hash(password),
        position=position,
        gender=Gender.MALE,
        fingerprint_template=template,
    )


class InMemoryUsers:
    def __init__(self, *users: User):
        self.users: dict[int, User] = {u.user_id: u for u in users}
        self._next_id = max(self.users, default=0) + 1

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    def list_all(self):
        return [self.users[k] for k in sorted(self.users)]

    def list_with_legacy_template(self):
        return [u for u in self.list_all() if u.fingerprint_template]

    def create_user(self, *, username, password_hash, position, gender, fingerprint_template=None) -> int:
        uid = self._next_id
        self._next_id += 1
        self.users[uid] = User(
            user_id=uid,
            username=username,
            password_hash=password_hash,
            position=position,
            gender=gender,
            fingerprint_template=fingerprint_template,
        )
        return uid

    def update_profile(self, user_id, *, username=None, position=None, gender=None, password_hash=None) -> bool:
        u = self.users.get(user_id)
        if not u:
            return False
        changes = {
            k: v
            for k, v in dict(username=username, position=position, gender=gender, password_hash=password_hash).items()
            if v is not None
        }
        self.users[user_id] = replace(u, **changes)
        return bool(changes)

    def set_fingerprint_template(self, user_id, template) -> bool:
        u = self.users.get(user_id)
        if not u:
            return False
        self.users[user_id] = replace(u, fingerprint_template=template)
        return True

    def delete_by_id(self, user_id) -> bool:
        return self.users.pop(user_id, None) is not None


class InMemoryFingerprints:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.rows: list[Fingerprint] = []
        self._next_id = 1

    def add(self, user_id: int, template: str, finger_index: int = 0) -> None:
        self.upsert(user_id=user_id, template=template, finger_index=finger_index, quality=None, capture_count=1)

    def list_candidates(self):
        out = []
        for f in self.rows:
            u = self._users.get_by_id(f.user_id)
            if not u:
                continue
            out.append(
                Candidate(
                    user_id=f.user_id,
                    username=u.username,
                    position=u.position.value,
                    template=f.template,
                    source=CandidateSource.TABLE,
                    finger_index=f.finger_index,
                )
            )
        return out

    def list_for_user(self, user_id):
        return [f for f in self.rows if f.user_id == user_id]

    def upsert(self, *, user_id, template, finger_index, quality, capture_count) -> int:
        for i, f in enumerate(self.rows):
            if f.user_id == user_id and f.finger_index == finger_index:
                self.rows[i] = replace(f, template=template, quality=quality, capture_count=capture_count)
                return f.fingerprint_id
        fid = self._next_id
        self._next_id += 1
        self.rows.append(
            Fingerprint(
                fingerprint_id=fid,
                user_id=user_id,
                template=template,
                finger_index=finger_index,
                quality=quality,
                capture_count=capture_count,
            )
        )
        return fid

    def delete_for_user(self, user_id) -> int:
        before = len(self.rows)
        self.rows = [f for f in self.rows if f.user_id != user_id]
        return before - len(self.rows)


class InMemoryAttendance:
    """Mimics the MySQL repository's atomic conditional writes."""

    def __init__(self, users: InMemoryUsers):
        self._users = users
        self._mutex = threading.Lock()
        self.records: dict[tuple[int, date], AttendanceRecord] = {}
        self.writes = 0
        self._next_id = 1

    def get_for_user_and_date(self, user_id, work_date):
        with self._mutex:
            return self.records.get((user_id, work_date))

    def insert_with_slot(self, *, user_id, work_date, position, slot, at, remarks) -> int:
        with self._mutex:
            if (user_id, work_date) in self.records:
                raise ConcurrentUpdateError("duplicate")
            rid = self._next_id
            self._next_id += 1
            rec = AttendanceRecord(attendance_id=rid, user_id=user_id, work_date=work_date, position=position, remarks=remarks)
            self.records[(user_id, work_date)] = replace(rec, **{slot.value: at})
            self.writes += 1
            return rid

    def fill_slot(self, *, attendance_id, slot, at, remarks, only_if_empty) -> None:
        with self._mutex:
            key, rec = next((k, r) for k, r in self.records.items() if r.attendance_id == attendance_id)
            if only_if_empty and rec.slot_value(slot) is not None:
                raise ConcurrentUpdateError("slot taken")
            changes = {slot.value: at}
            if remarks is not None:
                changes["remarks"] = remarks
            self.records[key] = replace(rec, **changes)
            self.writes += 1

    def list_logs(self, *, start_date, end_date, user_id=None, search_name=None):
        out = []
        for (uid, d), r in sorted(self.records.items(), key=lambda kv: (kv[0][1], kv[1].attendance_id), reverse=True):
            if not (start_date <= d <= end_date):
                continue
            if user_id is not None and uid != user_id:
                continue
            u = self._users.get_by_id(uid)
            username = u.username if u else ""
            if search_name and search_name.lower() not in username.lower():
                continue
            out.append(
                AttendanceLogRow(
                    user_id=uid,
                    username=username,
                    position=r.position,
                    work_date=d,
                    am_time_in=r.am_time_in,
                    am_time_out=r.am_time_out,
                    pm_time_in=r.pm_time_in,
                    pm_time_out=r.pm_time_out,
                    remarks=r.remarks.value if r.remarks else None,
                )
            )
        return out


class InMemoryReports:
    def __init__(self, rows: Optional[list[ReportRow]] = None):
        self.rows = list(rows or [])

    def add(self, user_id, username, work_date, remarks, *, position="staff", user_position=None):
        self.rows.append(
            ReportRow(
                user_id=user_id,
                username=username,
                user_position=user_position or position,
                position=position,
                work_date=work_date,
                remarks=remarks,
            )
        )

    def list_rows(self, *, start_date, end_date):
        rows = [r for r in self.rows if start_date <= r.work_date <= end_date]
        return sorted(rows, key=lambda r: (r.work_date, r.username or ""))


class FakeZKLibrary:
    """Stands in for native.ZKFingerLibrary with scripted device behaviour."""

    def __init__(self, *, device_count: int = 1, captures=None, match_score: int = 0, identify=None):
        self.device_count = device_count
        self.captures = list(captures or [])
        self.match_score = match_score
        self.identify_result = identify
        self.calls: list[str] = []
        self.cache_items: dict[int, bytes] = {}
        self.inited = False
        self.in_flight = 0
        self.max_in_flight = 0

    def _enter(self, name):
        self.calls.append(name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)

    def _leave(self):
        self.in_flight -= 1

    def init(self):
        self.calls.append("init")
        if self.inited:
            return native.ZKFP_ERR_ALREADY_INIT
        self.inited = True
        return native.ZKFP_ERR_OK

    def terminate(self):
        self.calls.append("terminate")
        self.inited = False
        return native.ZKFP_ERR_OK

    def get_device_count(self):
        return self.device_count

    def open_device(self, index):
        self.calls.append("open")
        return 101 if index < self.device_count else None

    def close_device(self, handle):
        self.calls.append("close")
        return native.ZKFP_ERR_OK

    def get_capture_params(self, handle):
        return native.ZKFP_ERR_OK, 300, 400, 500

    def acquire_fingerprint(self, handle, image_size):
        self._enter("capture")
        try:
            if not self.captures:
                return native.ZKFP_ERR_CAPTURE, b"", b""
            item = self.captures.pop(0)
            if isinstance(item, int):
                return item, b"", b""
            return native.ZKFP_ERR_OK, b"\x00" * 4, item
        finally:
            self._leave()

    def create_db_cache(self):
        self.calls.append("create_cache")
        return 202

    def close_db_cache(self, cache):
        self.calls.append("close_cache")
        return native.ZKFP_ERR_OK

    def clear_db_cache(self, cache):
        self.cache_items.clear()
        return native.ZKFP_ERR_OK

    def merge_templates(self, cache, t1, t2, t3):
        self.calls.append("merge")
        return native.ZKFP_ERR_OK, t1 + t2 + t3

    def add_to_cache(self, cache, fid, template):
        self.cache_items[fid] = template
        return native.ZKFP_ERR_OK

    def identify(self, cache, template):
        for fid, stored in self.cache_items.items():
            if stored == template:
                return native.ZKFP_ERR_OK, fid, 90
        return native.ZKFP_ERR_FAIL, 0, 0

    def match(self, cache, t1, t2):
        self._enter("match")
        try:
            return self.match_score
        finally:
            self._leave()


def at(hour: int, minute: int = 0, second: int = 0, *, day: date = date(2026, 3, 2)) -> datetime:
    return datetime.combine(day, time(hour, minute, second))

