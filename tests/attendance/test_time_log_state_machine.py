from __future__ import annotations

from datetime import time

import pytest

from src.fingerprint_attendance.fingerprint_attendance.attendance.service import AttendanceService
from src.fingerprint_attendance.fingerprint_attendance.core.enums import Remarks
from src.fingerprint_attendance.fingerprint_attendance.core.exceptions import UserNotFound, ValidationError

from tests.fakes import InMemoryAttendance, InMemoryUsers, at, make_user

DAY = at(0).date()


def _service():
    users = InMemoryUsers(make_user(1, "alice"))
    repo = InMemoryAttendance(users)
    return repo, AttendanceService(repo, users)


def test_first_scan_before_eight_is_ontime():
    repo, svc = _service()
    result = svc.record_time_log(1, now=at(7, 59))

    rec = repo.get_for_user_and_date(1, DAY)
    assert result.success
    assert result.attendance_type == "AM Time In"
    assert rec.am_time_in == time(7, 59)
    assert rec.remarks == Remarks.ONTIME


def test_first_scan_after_eight_is_late():
    repo, svc = _service()
    result = svc.record_time_log(1, now=at(8, 1))

    assert result.remarks == "LATE"
    assert repo.get_for_user_and_date(1, DAY).remarks == Remarks.LATE


def test_exactly_eight_is_ontime():
    _, svc = _service()
    assert svc.record_time_log(1, now=at(8, 0, 0)).remarks == "Ontime"


def test_second_morning_scan_fills_time_out_with_undertime():
    repo, svc = _service()
    svc.record_time_log(1, now=at(7, 59))
    result = svc.record_time_log(1, now=at(11, 0))

    rec = repo.get_for_user_and_date(1, DAY)
    assert result.attendance_type == "AM Time Out"
    assert rec.am_time_out == time(11, 0)
    assert rec.remarks == Remarks.UNDERTIME


def test_third_morning_scan_is_rejected_without_mutation():
    repo, svc = _service()
    svc.record_time_log(1, now=at(7, 59))
    svc.record_time_log(1, now=at(11, 0))
    before = repo.get_for_user_and_date(1, DAY)
    writes = repo.writes

    result = svc.record_time_log(1, now=at(11, 30))

    assert result.success is False
    assert result.attendance_type == "AM Complete"
    assert repo.get_for_user_and_date(1, DAY) == before
    assert repo.writes == writes


def test_first_scan_in_afternoon_fills_pm_time_in():
    repo, svc = _service()
    result = svc.record_time_log(1, now=at(13, 5))

    rec = repo.get_for_user_and_date(1, DAY)
    assert result.attendance_type == "PM Time In"
    assert rec.am_time_in is None
    assert rec.pm_time_in == time(13, 5)
    assert rec.remarks == Remarks.LATE


def test_pm_time_out_overtime_and_normal_window():
    repo, svc = _service()
    svc.record_time_log(1, now=at(12, 55))
    result = svc.record_time_log(1, now=at(18, 30))
    assert result.remarks == "Overtime"

    repo2, svc2 = _service()
    svc2.record_time_log(1, now=at(12, 55))
    result2 = svc2.record_time_log(1, now=at(17, 30))
    assert result2.remarks == "Ontime"
    assert repo2.get_for_user_and_date(1, DAY).remarks == Remarks.ONTIME


def test_pm_complete_vs_day_complete():
    _, svc = _service()
    svc.record_time_log(1, now=at(13, 0))
    svc.record_time_log(1, now=at(17, 0))
    assert svc.record_time_log(1, now=at(17, 10)).attendance_type == "PM Complete"

    _, full = _service()
    full.record_time_log(1, now=at(7, 50))
    full.record_time_log(1, now=at(11, 59))
    full.record_time_log(1, now=at(12, 58))
    full.record_time_log(1, now=at(17, 1))
    rejected = full.record_time_log(1, now=at(17, 20))
    assert rejected.success is False
    assert rejected.attendance_type == "Day Complete"


def test_manual_in_overwrites_filled_slot():
    repo, svc = _service()
    svc.record_time_log(1, now=at(7, 30))
    svc.record_time_log(1, now=at(11, 0))

    result = svc.record_time_log(1, mode="in", now=at(8, 15))

    rec = repo.get_for_user_and_date(1, DAY)
    assert result.success
    assert rec.am_time_in == time(8, 15)
    assert rec.remarks == Remarks.LATE


def test_manual_out_without_row_creates_it():
    repo, svc = _service()
    result = svc.record_time_log(1, mode="OUT", now=at(17, 45))

    rec = repo.get_for_user_and_date(1, DAY)
    assert result.attendance_type == "PM Time Out"
    assert rec.pm_time_out == time(17, 45)
    assert rec.pm_time_in is None


def test_unknown_mode_is_rejected_without_writing():
    repo, svc = _service()
    with pytest.raises(ValidationError):
        svc.record_time_log(1, mode="sideways", now=at(7, 0))
    assert repo.writes == 0


def test_mode_is_case_insensitive():
    repo, svc = _service()
    svc.record_time_log(1, mode="auto", now=at(7, 0))
    svc.record_time_log(1, mode="out", now=at(11, 30))
    rec = repo.get_for_user_and_date(1, DAY)
    assert rec.am_time_in == time(7, 0)
    assert rec.am_time_out == time(11, 30)


def test_unknown_user_raises():
    _, svc = _service()
    with pytest.raises(UserNotFound):
        svc.record_time_log(42, now=at(9, 0))


def test_repeat_scan_within_a_second_is_ignored():
    repo, svc = _service()
    svc.record_time_log(1, now=at(7, 59, 10))
    second = svc.record_time_log(1, now=at(7, 59, 10).replace(microsecond=900000))

    rec = repo.get_for_user_and_date(1, DAY)
    assert second.success is False
    assert rec.am_time_out is None
    assert repo.writes == 1


def test_sub_second_past_cutoff_is_late():
    repo, svc = _service()
    result = svc.record_time_log(1, now=at(8, 0, 0).replace(microsecond=700000))

    rec = repo.get_for_user_and_date(1, DAY)
    assert result.remarks == "LATE"
    assert rec.am_time_in == time(8, 0, 0)


def test_sub_second_before_noon_is_undertime():
    repo, svc = _service()
    svc.record_time_log(1, now=at(7, 45))
    result = svc.record_time_log(1, now=at(11, 59, 59).replace(microsecond=900000))

    assert result.remarks == "Undertime"
    assert repo.get_for_user_and_date(1, DAY).am_time_out == time(11, 59, 59)


def test_noon_scan_right_after_am_time_out_opens_pm():
    repo, svc = _service()
    svc.record_time_log(1, now=at(7, 50))
    svc.record_time_log(1, now=at(11, 59, 59))
    result = svc.record_time_log(1, now=at(12, 0, 0))

    rec = repo.get_for_user_and_date(1, DAY)
    assert result.success
    assert result.attendance_type == "PM Time In"
    assert rec.pm_time_in == time(12, 0, 0)
