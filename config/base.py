"""Settings shared by every environment module."""

import os
import sys


def env_bool(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def default_zkfp_library() -> str:
    return "libzkfp.dll" if sys.platform.startswith("win") else "libzkfp.so"


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "fingerprint_attendance"),
}

# Ngưỡng điểm khớp vân tay (0-100)
MATCH_THRESHOLD = float(os.getenv("MATCH_THRESHOLD", "50"))

# ZKFinger SDK
ZKFP_LIBRARY = os.getenv("ZKFP_LIBRARY", default_zkfp_library())
CAPTURE_TIMEOUT_SECONDS = float(os.getenv("CAPTURE_TIMEOUT_SECONDS", "30"))

# Bỏ qua lần quét lặp lại trong khoảng này (giây)
DUPLICATE_SCAN_SECONDS = int(os.getenv("DUPLICATE_SCAN_SECONDS", "1"))

TOKEN_MAX_AGE_SECONDS = int(os.getenv("TOKEN_MAX_AGE_SECONDS", str(7 * 24 * 3600)))
