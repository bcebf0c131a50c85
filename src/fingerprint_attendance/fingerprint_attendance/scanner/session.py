from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional

from ..core.exceptions import CaptureFailed, DeviceBusy, NoDevice, SdkUnavailable
from . import native
from .model import CaptureResult, DeviceInfo, IdentifyResult, ScannerStatus

logger = logging.getLogger(__name__)

LibraryLoader = Callable[[], "native.ZKFingerLibrary"]


class ScannerSession:
    """The single owner of the scanner device handle and the match-cache handle.

    Every native call happens while holding ``self._lock`` (one operation in
    flight). Callers block until the lock is free; nothing is cancelled
    mid-flight. One instance per process, injected where needed.
    """

    def __init__(self, loader: Optional[LibraryLoader] = None, *, library_path: Optional[str] = None):
        self._loader = loader or (lambda: native.ZKFingerLibrary(library_path))
        self._lock = threading.Lock()
        self._lib = None
        self._initialized = False
        self._device = None
        self._cache = None
        self._width = 0
        self._height = 0
        self._dpi = 0

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_device_open(self) -> bool:
        return self._device is not None

    @property
    def device_info(self) -> Optional[DeviceInfo]:
        if self._device is None:
            return None
        return DeviceInfo(width=self._width, height=self._height, dpi=self._dpi)

    # ------------------------------------------------------------ lifecycle
    def initialize(self) -> ScannerStatus:
        with self._lock:
            if not self._initialized:
                if self._lib is None:
                    self._lib = self._loader()
                ret = self._lib.init()
                if ret not in (native.ZKFP_ERR_OK, native.ZKFP_ERR_ALREADY_INIT):
                    raise SdkUnavailable(f"Failed to initialize SDK: {native.error_message(ret)}", code=ret)
                self._initialized = True
                logger.info("ZKFinger SDK initialized")

                try:
                    self._ensure_cache()
                except CaptureFailed as exc:
                    logger.warning("Failed to initialize matching cache: %s", exc)

            return self._status()

    def status(self) -> ScannerStatus:
        with self._lock:
            return self._status()

    def terminate(self) -> None:
        with self._lock:
            if not self._initialized:
                return
            self._close_device()
            self._close_cache()
            ret = self._lib.terminate()
            self._initialized = False
            if ret != native.ZKFP_ERR_OK:
                logger.warning("SDK terminate returned %s", native.error_message(ret))

    # --------------------------------------------------------------- device
    def open_device(self, index: int = 0) -> DeviceInfo:
        with self._lock:
            if not self._initialized:
                raise NoDevice("SDK not initialized. Call initialize first.", code=native.ZKFP_ERR_NOT_INIT)
            if self._device is not None:
                return self.device_info

            count = self._lib.get_device_count()
            if count <= 0:
                raise NoDevice("No fingerprint devices connected", code=native.ZKFP_ERR_NO_DEVICE)
            if index < 0 or index >= count:
                raise NoDevice(f"Device index {index} out of range. Only {count} device(s) available.")

            handle = self._lib.open_device(index)
            if not handle:
                raise DeviceBusy("Failed to open device", code=native.ZKFP_ERR_OPEN)

            ret, width, height, dpi = self._lib.get_capture_params(handle)
            if ret != native.ZKFP_ERR_OK:
                self._lib.close_device(handle)
                if ret in (native.ZKFP_ERR_BUSY, native.ZKFP_ERR_ALREADY_OPENED):
                    raise DeviceBusy(native.error_message(ret), code=ret)
                raise NoDevice(f"Failed to get device parameters: {native.error_message(ret)}", code=ret)

            self._device = handle
            self._width, self._height, self._dpi = width, height, dpi
            logger.info("Device opened: %sx%s @ %sdpi", width, height, dpi)
            return self.device_info

    def close_device(self) -> None:
        with self._lock:
            self._close_device()

    def capture(self) -> CaptureResult:
        with self._lock:
            if self._device is None:
                raise CaptureFailed("Device not open. Call open_device first.", code=native.ZKFP_ERR_NOT_OPENED)
            image_size = self._width * self._height
            if image_size <= 0:
                raise CaptureFailed("Invalid image dimensions", code=native.ZKFP_ERR_INVALID_PARAM)

            ret, image, template = self._lib.acquire_fingerprint(self._device, image_size)
            if ret == native.ZKFP_ERR_BUSY:
                raise DeviceBusy(native.error_message(ret), code=ret)
            if ret != native.ZKFP_ERR_OK or not template:
                raise CaptureFailed(native.error_message(ret), code=ret)
            return CaptureResult(template=template, image=image, width=self._width, height=self._height)

    # ------------------------------------------------------------- matching
    def merge_templates(self, t1: bytes, t2: bytes, t3: bytes) -> bytes:
        with self._lock:
            cache = self._ensure_cache()
            ret, merged = self._lib.merge_templates(cache, t1, t2, t3)
            if ret != native.ZKFP_ERR_OK or not merged:
                raise CaptureFailed(f"Failed to merge templates: {native.error_message(ret)}", code=ret)
            return merged

    def match(self, template_a: bytes, template_b: bytes) -> int:
        with self._lock:
            cache = self._ensure_cache()
            score = self._lib.match(cache, template_a, template_b)
            # MatchFinger returns a negative error code on failure.
            if score < 0:
                raise CaptureFailed(f"Match failed: {native.error_message(score)}", code=score)
            return score

    def identify(self, sample: bytes, candidates: Iterable[tuple[object, bytes]]) -> IdentifyResult:
        """1:N search of ``sample`` against ``(candidate_id, template)`` pairs.

        The native cache is rebuilt from the given candidates on every call, so
        the cache never holds templates the caller did not pass in.
        """

        with self._lock:
            cache = self._ensure_cache()
            self._lib.clear_db_cache(cache)

            ids: dict[int, object] = {}
            for fid, (candidate_id, template) in enumerate(candidates, start=1):
                ret = self._lib.add_to_cache(cache, fid, template)
                if ret != native.ZKFP_ERR_OK:
                    logger.warning("Skipping candidate %s: %s", candidate_id, native.error_message(ret))
                    continue
                ids[fid] = candidate_id

            if not ids:
                return IdentifyResult(matched=False)

            ret, fid, score = self._lib.identify(cache, sample)
            if ret != native.ZKFP_ERR_OK or fid not in ids:
                return IdentifyResult(matched=False)
            return IdentifyResult(matched=True, candidate_id=ids[fid], score=score)

    # ------------------------------------------------------------ internals
    def _status(self) -> ScannerStatus:
        count = self._lib.get_device_count() if self._initialized else 0
        return ScannerStatus(
            sdk_initialized=self._initialized,
            device_count=count,
            device_open=self._device is not None,
            db_cache_ready=self._cache is not None,
            device_info=self.device_info,
        )

    def _ensure_cache(self):
        if not self._initialized:
            raise SdkUnavailable("SDK not initialized", code=native.ZKFP_ERR_NOT_INIT)
        if self._cache is None:
            cache = self._lib.create_db_cache()
            if not cache:
                raise CaptureFailed("Failed to initialize database cache", code=native.ZKFP_ERR_FAIL)
            self._cache = cache
        return self._cache

    def _close_device(self) -> None:
        if self._device is None:
            return
        ret = self._lib.close_device(self._device)
        self._device = None
        self._width = self._height = self._dpi = 0
        if ret != native.ZKFP_ERR_OK:
            logger.warning("Close device returned %s", native.error_message(ret))

    def _close_cache(self) -> None:
        if self._cache is None:
            return
        self._lib.close_db_cache(self._cache)
        self._cache = None
