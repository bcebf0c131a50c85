import pytest

from src.fingerprint_attendance.fingerprint_attendance.core.exceptions import SdkUnavailable
from src.fingerprint_attendance.fingerprint_attendance.scanner import native


def test_missing_library_is_sdk_unavailable(tmp_path):
    with pytest.raises(SdkUnavailable):
        native.ZKFingerLibrary(str(tmp_path / "libzkfp-missing.so"))


def test_error_message_known_and_unknown_codes():
    assert native.error_message(native.ZKFP_ERR_BUSY) == "Device busy"
    assert native.error_message(-99) == "Unknown error (-99)"
