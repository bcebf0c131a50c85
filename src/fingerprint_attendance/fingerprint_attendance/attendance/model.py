from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import HalfDay, Remarks, TimeSlot


def format_time(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công, một dòng cho mỗi (user_id, ngày)."""

    attendance_id: int
    user_id: int
    work_date: date
    position: Optional[str] = None
    am_time_in: Optional[time] = None
    am_time_out: Optional[time] = None
    pm_time_in: Optional[time] = None
    pm_time_out: Optional[time] = None
    remarks: Optional[Remarks] = None

    def slot_value(self, slot: TimeSlot) -> Optional[time]:
        return getattr(self, slot.value)

    def is_half_complete(self, half: HalfDay) -> bool:
        return all(self.slot_value(s) is not None for s in TimeSlot if s.half_day == half)

    @property
    def is_day_complete(self) -> bool:
        return all(self.slot_value(s) is not None for s in TimeSlot)

    def latest_filled(self, half: Optional[HalfDay] = None) -> Optional[time]:
        slots = [s for s in TimeSlot if half is None or s.half_day == half]
        filled = [v for v in (self.slot_value(s) for s in slots) if v is not None]
        return max(filled) if filled else None


@dataclass(frozen=True)
class AttendanceLogRow:
    """Read-model phục vụ danh sách / xuất file (join với users)."""

    user_id: int
    username: str
    position: Optional[str]
    work_date: date
    am_time_in: Optional[time] = None
    am_time_out: Optional[time] = None
    pm_time_in: Optional[time] = None
    pm_time_out: Optional[time] = None
    remarks: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "username": self.username,
            "position": self.position,
            "date": self.work_date.strftime("%Y-%m-%d"),
            "amTimeIn": format_time(self.am_time_in),
            "amTimeOut": format_time(self.am_time_out),
            "pmTimeIn": format_time(self.pm_time_in),
            "pmTimeOut": format_time(self.pm_time_out),
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class TimeLogEntry:
    """One filled slot of a log row, used by the 'today entries' feed."""

    user_id: int
    username: str
    position: Optional[str]
    attendance_type: str
    at: time
    remarks: Optional[str]

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "username": self.username,
            "position": self.position,
            "attendanceType": self.attendance_type,
            "time": format_time(self.at),
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class TimeLogResult:
    success: bool
    message: str
    attendance_type: Optional[str] = None
    time: Optional[str] = None
    remarks: Optional[str] = None
    user_id: Optional[int] = None
    username: Optional[str] = None
    position: Optional[str] = None
    gender: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict = {"success": self.success, "message": self.message}
        if self.attendance_type:
            out["attendanceType"] = self.attendance_type
        if self.success:
            out["time"] = self.time
            out["remarks"] = self.remarks
        if self.user_id is not None:
            out["user"] = {
                "id": self.user_id,
                "username": self.username,
                "position": self.position,
                "gender": self.gender,
            }
        return out
