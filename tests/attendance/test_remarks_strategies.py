from __future__ import annotations

from datetime import time

import pytest

from src.fingerprint_attendance.fingerprint_attendance.attendance.factory import AttendanceStrategyFactory
from src.fingerprint_attendance.fingerprint_attendance.attendance.model import AttendanceRecord
from src.fingerprint_attendance.fingerprint_attendance.attendance.state_machine import (
    completion_label,
    half_day_for,
    manual_slot,
    next_auto_slot,
)
from src.fingerprint_attendance.fingerprint_attendance.core.enums import HalfDay, Remarks, TimeLogMode, TimeSlot
from src.fingerprint_attendance.fingerprint_attendance.core.exceptions import ValidationError

from tests.fakes import at


@pytest.mark.parametrize(
    "slot, clock, expected",
    [
        (TimeSlot.AM_TIME_IN, time(8, 0), Remarks.ONTIME),
        (TimeSlot.AM_TIME_IN, time(8, 0, 1), Remarks.LATE),
        (TimeSlot.PM_TIME_IN, time(13, 0), Remarks.ONTIME),
        (TimeSlot.PM_TIME_IN, time(13, 5), Remarks.LATE),
        (TimeSlot.AM_TIME_OUT, time(11, 59), Remarks.UNDERTIME),
        (TimeSlot.AM_TIME_OUT, time(12, 0), None),
        (TimeSlot.PM_TIME_OUT, time(16, 30), Remarks.UNDERTIME),
        (TimeSlot.PM_TIME_OUT, time(17, 30), None),
        (TimeSlot.PM_TIME_OUT, time(18, 0, 1), Remarks.OVERTIME),
    ],
)
def test_default_remarks_table(slot, clock, expected):
    decision = AttendanceStrategyFactory().for_slot(slot).decide(clock)
    assert decision.remarks == expected
    assert decision.overwrites is (expected is not None)


def test_half_day_boundary_is_noon():
    assert half_day_for(11) == HalfDay.AM
    assert half_day_for(12) == HalfDay.PM


def test_auto_slot_progression():
    empty = None
    in_only = AttendanceRecord(attendance_id=1, user_id=1, work_date=at(0).date(), am_time_in=time(7, 55))
    done = AttendanceRecord(
        attendance_id=1, user_id=1, work_date=at(0).date(), am_time_in=time(7, 55), am_time_out=time(12, 1)
    )

    assert next_auto_slot(empty, HalfDay.AM) == TimeSlot.AM_TIME_IN
    assert next_auto_slot(in_only, HalfDay.AM) == TimeSlot.AM_TIME_OUT
    assert next_auto_slot(done, HalfDay.AM) is None
    assert next_auto_slot(done, HalfDay.PM) == TimeSlot.PM_TIME_IN
    assert completion_label(done, HalfDay.AM) == "AM Complete"


def test_manual_slot_choice():
    assert manual_slot(HalfDay.PM, TimeLogMode.IN) == TimeSlot.PM_TIME_IN
    assert manual_slot(HalfDay.AM, TimeLogMode.OUT) == TimeSlot.AM_TIME_OUT
    assert TimeLogMode.parse(None) == TimeLogMode.AUTO
    with pytest.raises(ValidationError):
        TimeLogMode.parse("sideways")


def test_latest_filled_can_be_limited_to_one_half():
    rec = AttendanceRecord(
        attendance_id=1, user_id=1, work_date=at(0).date(), am_time_in=time(7, 55), am_time_out=time(11, 59, 59)
    )

    assert rec.latest_filled() == time(11, 59, 59)
    assert rec.latest_filled(HalfDay.PM) is None
    assert rec.is_half_complete(HalfDay.AM)
