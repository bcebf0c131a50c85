"""ctypes binding for the ZKFinger ``libzkfp`` SDK.

Only this module touches native pointers and buffers. Everything it returns is
plain Python (ints, bytes, tuples); the rest of the package never sees ctypes.
Calls are NOT thread safe: ScannerSession serialises every call through its
lock.
"""
from __future__ import annotations

import ctypes
import logging
import sys
from typing import Optional

from ..core.constants import MAX_TEMPLATE_SIZE
from ..core.exceptions import SdkUnavailable

logger = logging.getLogger(__name__)

ZKFP_ERR_OK = 0
ZKFP_ERR_ALREADY_INIT = 1
ZKFP_ERR_INITLIB = -1
ZKFP_ERR_INIT = -2
ZKFP_ERR_NO_DEVICE = -3
ZKFP_ERR_NOT_SUPPORT = -4
ZKFP_ERR_INVALID_PARAM = -5
ZKFP_ERR_OPEN = -6
ZKFP_ERR_INVALID_HANDLE = -7
ZKFP_ERR_CAPTURE = -8
ZKFP_ERR_EXTRACT_FP = -9
ZKFP_ERR_ABSORT = -10
ZKFP_ERR_MEMORY_NOT_ENOUGH = -11
ZKFP_ERR_BUSY = -12
ZKFP_ERR_ADD_FINGER = -13
ZKFP_ERR_DEL_FINGER = -14
ZKFP_ERR_FAIL = -17
ZKFP_ERR_CANCEL = -18
ZKFP_ERR_VERIFY_FP = -20
ZKFP_ERR_MERGE = -22
ZKFP_ERR_NOT_OPENED = -23
ZKFP_ERR_NOT_INIT = -24
ZKFP_ERR_ALREADY_OPENED = -25

ERROR_MESSAGES = {
    ZKFP_ERR_OK: "Success",
    ZKFP_ERR_ALREADY_INIT: "SDK already initialized",
    ZKFP_ERR_INITLIB: "Failed to initialize library",
    ZKFP_ERR_INIT: "Initialization error",
    ZKFP_ERR_NO_DEVICE: "No device connected",
    ZKFP_ERR_NOT_SUPPORT: "Operation not supported",
    ZKFP_ERR_INVALID_PARAM: "Invalid parameter",
    ZKFP_ERR_OPEN: "Failed to open device",
    ZKFP_ERR_INVALID_HANDLE: "Invalid handle",
    ZKFP_ERR_CAPTURE: "Capture failed",
    ZKFP_ERR_EXTRACT_FP: "Failed to extract fingerprint template",
    ZKFP_ERR_ABSORT: "Operation aborted",
    ZKFP_ERR_MEMORY_NOT_ENOUGH: "Not enough memory",
    ZKFP_ERR_BUSY: "Device busy",
    ZKFP_ERR_ADD_FINGER: "Failed to add fingerprint",
    ZKFP_ERR_DEL_FINGER: "Failed to delete fingerprint",
    ZKFP_ERR_FAIL: "General failure",
    ZKFP_ERR_CANCEL: "Operation cancelled",
    ZKFP_ERR_VERIFY_FP: "Fingerprint verification failed",
    ZKFP_ERR_MERGE: "Failed to merge templates",
    ZKFP_ERR_NOT_OPENED: "Device not opened",
    ZKFP_ERR_NOT_INIT: "SDK not initialized",
    ZKFP_ERR_ALREADY_OPENED: "Device already opened",
}


def error_message(code: int) -> str:
    return ERROR_MESSAGES.get(code, f"Unknown error ({code})")


def default_library_name() -> str:
    if sys.platform.startswith("win"):
        return "libzkfp.dll"
    return "libzkfp.so"


class ZKFingerLibrary:
    """Thin Python facade over the exported ZKFPM_* functions."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or default_library_name()
        try:
            if sys.platform.startswith("win"):
                self._lib = ctypes.WinDLL(self.path)
            else:
                self._lib = ctypes.CDLL(self.path)
        except OSError as exc:
            raise SdkUnavailable(f"ZKFinger SDK not available ({self.path}): {exc}") from exc
        try:
            self._declare()
        except AttributeError as exc:
            raise SdkUnavailable(f"ZKFinger SDK at {self.path} is missing an export: {exc}") from exc

    def _declare(self) -> None:
        lib = self._lib
        c_int, c_uint, c_void_p = ctypes.c_int, ctypes.c_uint, ctypes.c_void_p
        pint, puint = ctypes.POINTER(ctypes.c_int), ctypes.POINTER(ctypes.c_uint)

        signatures = {
            "ZKFPM_Init": (c_int, []),
            "ZKFPM_Terminate": (c_int, []),
            "ZKFPM_GetDeviceCount": (c_int, []),
            "ZKFPM_OpenDevice": (c_void_p, [c_int]),
            "ZKFPM_CloseDevice": (c_int, [c_void_p]),
            "ZKFPM_GetCaptureParamsEx": (c_int, [c_void_p, pint, pint, pint]),
            "ZKFPM_AcquireFingerprint": (c_int, [c_void_p, c_void_p, c_uint, c_void_p, pint]),
            "ZKFPM_CreateDBCache": (c_void_p, []),
            "ZKFPM_CloseDBCache": (c_int, [c_void_p]),
            "ZKFPM_ClearDBCache": (c_int, [c_void_p]),
            "ZKFPM_GenRegTemplate": (c_int, [c_void_p, c_void_p, c_void_p, c_void_p, c_void_p, pint]),
            "ZKFPM_AddRegTemplateToDBCache": (c_int, [c_void_p, c_uint, c_void_p, c_uint]),
            "ZKFPM_Identify": (c_int, [c_void_p, c_void_p, c_uint, puint, pint]),
            "ZKFPM_MatchFinger": (c_int, [c_void_p, c_void_p, c_uint, c_void_p, c_uint]),
        }
        for name, (restype, argtypes) in signatures.items():
            fn = getattr(lib, name)
            fn.restype = restype
            fn.argtypes = argtypes

    # ------------------------------------------------------------------ SDK
    def init(self) -> int:
        return int(self._lib.ZKFPM_Init())

    def terminate(self) -> int:
        return int(self._lib.ZKFPM_Terminate())

    def get_device_count(self) -> int:
        return int(self._lib.ZKFPM_GetDeviceCount())

    # --------------------------------------------------------------- device
    def open_device(self, index: int) -> Optional[int]:
        return self._lib.ZKFPM_OpenDevice(int(index)) or None

    def close_device(self, handle: int) -> int:
        return int(self._lib.ZKFPM_CloseDevice(ctypes.c_void_p(handle)))

    def get_capture_params(self, handle: int) -> tuple[int, int, int, int]:
        width, height, dpi = ctypes.c_int(0), ctypes.c_int(0), ctypes.c_int(0)
        ret = self._lib.ZKFPM_GetCaptureParamsEx(
            ctypes.c_void_p(handle), ctypes.byref(width), ctypes.byref(height), ctypes.byref(dpi)
        )
        return int(ret), width.value, height.value, dpi.value

    def acquire_fingerprint(self, handle: int, image_size: int) -> tuple[int, bytes, bytes]:
        image_buf = ctypes.create_string_buffer(image_size)
        template_buf = ctypes.create_string_buffer(MAX_TEMPLATE_SIZE)
        template_size = ctypes.c_int(MAX_TEMPLATE_SIZE)
        ret = self._lib.ZKFPM_AcquireFingerprint(
            ctypes.c_void_p(handle), image_buf, ctypes.c_uint(image_size), template_buf, ctypes.byref(template_size)
        )
        if ret != ZKFP_ERR_OK:
            return int(ret), b"", b""
        return int(ret), image_buf.raw[:image_size], template_buf.raw[: template_size.value]

    # ------------------------------------------------------------- db cache
    def create_db_cache(self) -> Optional[int]:
        return self._lib.ZKFPM_CreateDBCache() or None

    def close_db_cache(self, cache: int) -> int:
        return int(self._lib.ZKFPM_CloseDBCache(ctypes.c_void_p(cache)))

    def clear_db_cache(self, cache: int) -> int:
        return int(self._lib.ZKFPM_ClearDBCache(ctypes.c_void_p(cache)))

    def merge_templates(self, cache: int, t1: bytes, t2: bytes, t3: bytes) -> tuple[int, bytes]:
        reg_buf = ctypes.create_string_buffer(MAX_TEMPLATE_SIZE)
        reg_size = ctypes.c_int(MAX_TEMPLATE_SIZE)
        ret = self._lib.ZKFPM_GenRegTemplate(
            ctypes.c_void_p(cache),
            ctypes.create_string_buffer(t1, len(t1)),
            ctypes.create_string_buffer(t2, len(t2)),
            ctypes.create_string_buffer(t3, len(t3)),
            reg_buf,
            ctypes.byref(reg_size),
        )
        if ret != ZKFP_ERR_OK:
            return int(ret), b""
        return int(ret), reg_buf.raw[: reg_size.value]

    def add_to_cache(self, cache: int, fid: int, template: bytes) -> int:
        return int(
            self._lib.ZKFPM_AddRegTemplateToDBCache(
                ctypes.c_void_p(cache),
                ctypes.c_uint(fid),
                ctypes.create_string_buffer(template, len(template)),
                ctypes.c_uint(len(template)),
            )
        )

    def identify(self, cache: int, template: bytes) -> tuple[int, int, int]:
        fid, score = ctypes.c_uint(0), ctypes.c_int(0)
        ret = self._lib.ZKFPM_Identify(
            ctypes.c_void_p(cache),
            ctypes.create_string_buffer(template, len(template)),
            ctypes.c_uint(len(template)),
            ctypes.byref(fid),
            ctypes.byref(score),
        )
        return int(ret), fid.value, score.value

    def match(self, cache: int, t1: bytes, t2: bytes) -> int:
        return int(
            self._lib.ZKFPM_MatchFinger(
                ctypes.c_void_p(cache),
                ctypes.create_string_buffer(t1, len(t1)),
                ctypes.c_uint(len(t1)),
                ctypes.create_string_buffer(t2, len(t2)),
                ctypes.c_uint(len(t2)),
            )
        )
