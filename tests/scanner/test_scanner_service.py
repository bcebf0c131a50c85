from __future__ import annotations

import base64

from src.fingerprint_attendance.fingerprint_attendance.core.exceptions import SdkUnavailable
from src.fingerprint_attendance.fingerprint_attendance.scanner import native
from src.fingerprint_attendance.fingerprint_attendance.scanner.service import ScannerService
from src.fingerprint_attendance.fingerprint_attendance.scanner.session import ScannerSession

from tests.fakes import FakeZKLibrary


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


def _service(lib: FakeZKLibrary, *, timeout: float = 2.0) -> tuple[ScannerService, FakeClock]:
    clock = FakeClock()
    session = ScannerSession(loader=lambda: lib)
    svc = ScannerService(session, capture_timeout_seconds=timeout, poll_interval_seconds=0.5, sleep=clock.sleep, clock=clock)
    return svc, clock


def test_sdk_unavailable_becomes_structured_failure():
    def loader():
        raise SdkUnavailable("Failed to load libzkfp.so")

    svc = ScannerService(ScannerSession(loader=loader))
    result = svc.initialize()

    assert result.success is False
    assert "libzkfp" in result.message


def test_detect_reports_device_count():
    svc, _ = _service(FakeZKLibrary(device_count=1))
    result = svc.detect()

    assert result.success
    assert result.data["detected"] is True


def test_open_device_initializes_on_demand():
    svc, _ = _service(FakeZKLibrary())
    result = svc.open_device()

    assert result.success
    assert result.data["deviceInfo"]["width"] == 300


def test_poll_capture_retries_until_finger_present():
    lib = FakeZKLibrary(captures=[native.ZKFP_ERR_CAPTURE, native.ZKFP_ERR_CAPTURE, b"tpl"])
    svc, clock = _service(lib)
    svc.open_device()

    result = svc.poll_capture()

    assert result.success
    assert base64.b64decode(result.data["template"]) == b"tpl"
    assert clock.now == 1.0


def test_poll_capture_times_out():
    svc, clock = _service(FakeZKLibrary(captures=[]), timeout=2.0)
    svc.open_device()

    result = svc.poll_capture()

    assert result.success is False
    assert "timed out" in result.message
    assert clock.now >= 2.0


def test_enroll_merges_three_captures():
    lib = FakeZKLibrary(captures=[b"a", b"b", b"c"])
    svc, _ = _service(lib)
    svc.open_device()

    result = svc.enroll()

    assert result.success
    assert base64.b64decode(result.data["template"]) == b"abc"
    assert "merge" in lib.calls


def test_enroll_single_capture_skips_merge():
    lib = FakeZKLibrary(captures=[b"only"])
    svc, _ = _service(lib)
    svc.open_device()

    result = svc.enroll(capture_count=1)

    assert result.success
    assert base64.b64decode(result.data["template"]) == b"only"
    assert "merge" not in lib.calls


def test_match_templates_rejects_bad_base64():
    svc, _ = _service(FakeZKLibrary())
    svc.initialize()

    result = svc.match_templates("not base64!!", "AAAA")

    assert result.success is False
