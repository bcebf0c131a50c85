from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Callable, Optional

from ..core.constants import (
    DEFAULT_CAPTURE_POLL_INTERVAL_SECONDS,
    DEFAULT_CAPTURE_TIMEOUT_SECONDS,
    REGISTER_FINGER_COUNT,
    SCANNER_MODEL,
)
from ..core.exceptions import CaptureFailed, ScannerError
from .model import CaptureResult, OperationResult
from .session import ScannerSession

logger = logging.getLogger(__name__)


def encode_template(template: bytes) -> str:
    return base64.b64encode(template).decode("ascii")


def decode_template(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CaptureFailed(f"Invalid template encoding: {e}") from e


class ScannerService:
    """Structured-result facade over ScannerSession.

    No ScannerError escapes this class: every adapter failure becomes an
    OperationResult with success=False.
    """

    def __init__(
        self,
        session: ScannerSession,
        *,
        capture_timeout_seconds: float = DEFAULT_CAPTURE_TIMEOUT_SECONDS,
        poll_interval_seconds: float = DEFAULT_CAPTURE_POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._session = session
        self._timeout = float(capture_timeout_seconds)
        self._interval = float(poll_interval_seconds)
        self._sleep = sleep
        self._clock = clock

    @property
    def session(self) -> ScannerSession:
        return self._session

    def status(self) -> OperationResult:
        try:
            st = self._session.status()
        except ScannerError as e:
            return self._failure("status", e)

        data = {
            "initialized": st.sdk_initialized,
            "deviceCount": st.device_count,
            "deviceOpen": st.device_open,
            "dbCacheReady": st.db_cache_ready,
            "scannerModel": SCANNER_MODEL,
        }
        if st.device_info:
            data["deviceInfo"] = {"width": st.device_info.width, "height": st.device_info.height, "dpi": st.device_info.dpi}
        message = "Scanner ready" if st.device_open else ("SDK initialized" if st.sdk_initialized else "SDK not initialized")
        return OperationResult(True, message, data)

    def initialize(self) -> OperationResult:
        try:
            st = self._session.initialize()
        except ScannerError as e:
            return self._failure("initialize", e)
        return OperationResult(
            True,
            f"SDK initialized. Found {st.device_count} device(s).",
            {"deviceCount": st.device_count, "initialized": True},
        )

    def detect(self) -> OperationResult:
        """Initialise if needed and report how many devices are attached."""
        result = self.initialize()
        if not result.success:
            return OperationResult(False, result.message, {"detected": False, "deviceCount": 0})
        count = int(result.data.get("deviceCount", 0))
        return OperationResult(
            True,
            "Fingerprint scanner detected" if count else "No fingerprint scanner detected",
            {"detected": count > 0, "deviceCount": count, "scannerModel": SCANNER_MODEL},
        )

    def open_device(self, index: int = 0) -> OperationResult:
        try:
            if not self._session.is_initialized:
                self._session.initialize()
            info = self._session.open_device(index)
        except ScannerError as e:
            return self._failure("open_device", e)
        return OperationResult(
            True,
            "Device opened successfully",
            {"deviceInfo": {"width": info.width, "height": info.height, "dpi": info.dpi, "model": info.model}},
        )

    def close_device(self) -> OperationResult:
        try:
            self._session.close_device()
        except ScannerError as e:
            return self._failure("close_device", e)
        return OperationResult(True, "Device closed")

    def _poll(self, timeout_seconds: Optional[float] = None) -> CaptureResult:
        timeout = self._timeout if timeout_seconds is None else float(timeout_seconds)
        deadline = self._clock() + timeout
        last_error: Optional[ScannerError] = None
        while True:
            try:
                return self._session.capture()
            except CaptureFailed as e:
                # no finger on the sensor yet
                last_error = e
            if self._clock() >= deadline:
                break
            self._sleep(self._interval)
        raise CaptureFailed(f"Capture timed out after {timeout:g}s", code=getattr(last_error, "code", None))

    def poll_capture(self, timeout_seconds: Optional[float] = None) -> OperationResult:
        try:
            captured = self._poll(timeout_seconds)
        except ScannerError as e:
            return self._failure("capture", e)

        logger.info("Fingerprint captured (%d bytes)", len(captured.template))
        return OperationResult(
            True,
            "Fingerprint captured successfully",
            {
                "template": encode_template(captured.template),
                "image": encode_template(captured.image),
                "width": captured.width,
                "height": captured.height,
            },
        )

    def enroll(self, capture_count: int = REGISTER_FINGER_COUNT, timeout_seconds: Optional[float] = None) -> OperationResult:
        """Capture the same finger several times and merge into one template.

        Fewer than three captures skips the merge and returns the single capture.
        """

        count = max(1, int(capture_count))
        templates: list[bytes] = []
        try:
            for i in range(count):
                captured = self._poll(timeout_seconds)
                templates.append(captured.template)
                logger.info("Enrollment capture %d/%d complete", i + 1, count)

            if len(templates) >= REGISTER_FINGER_COUNT:
                final = self._session.merge_templates(*templates[:REGISTER_FINGER_COUNT])
            else:
                final = templates[0]
        except ScannerError as e:
            return self._failure("enroll", e)

        return OperationResult(
            True,
            "Fingerprint enrolled successfully",
            {"template": encode_template(final), "captureCount": len(templates)},
        )

    def match_templates(self, template_a: str, template_b: str) -> OperationResult:
        try:
            score = self._session.match(decode_template(template_a), decode_template(template_b))
        except ScannerError as e:
            return self._failure("match", e)
        return OperationResult(True, "Match completed", {"score": score})

    def _failure(self, op: str, e: ScannerError) -> OperationResult:
        logger.warning("Scanner %s failed: %s", op, e)
        data = {"errorCode": e.code} if e.code is not None else {}
        return OperationResult(False, str(e), data)
