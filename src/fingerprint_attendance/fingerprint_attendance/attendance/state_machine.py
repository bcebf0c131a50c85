from __future__ import annotations

from typing import Optional

from ..core.constants import NOON_HOUR
from ..core.enums import HalfDay, TimeLogMode, TimeSlot
from .model import AttendanceRecord

_SLOTS = {
    HalfDay.AM: (TimeSlot.AM_TIME_IN, TimeSlot.AM_TIME_OUT),
    HalfDay.PM: (TimeSlot.PM_TIME_IN, TimeSlot.PM_TIME_OUT),
}


def half_day_for(hour: int) -> HalfDay:
    return HalfDay.AM if hour < NOON_HOUR else HalfDay.PM


def next_auto_slot(record: Optional[AttendanceRecord], half: HalfDay) -> Optional[TimeSlot]:
    """Slot an auto-mode scan fills, or None when the half-day is complete.

    Empty -> time-in, InFilled -> time-out, Complete -> None.
    """

    time_in, time_out = _SLOTS[half]
    if record is None or record.slot_value(time_in) is None:
        return time_in
    if record.is_half_complete(half):
        return None
    return time_out


def manual_slot(half: HalfDay, mode: TimeLogMode) -> TimeSlot:
    time_in, time_out = _SLOTS[half]
    return time_out if mode == TimeLogMode.OUT else time_in


def completion_label(record: AttendanceRecord, half: HalfDay) -> str:
    if half == HalfDay.PM and record.is_day_complete:
        return "Day Complete"
    return f"{half.value} Complete"
