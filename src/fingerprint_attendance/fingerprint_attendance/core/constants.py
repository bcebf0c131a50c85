"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_MATCH_THRESHOLD = 50.0
DEFAULT_HISTORY_DAYS = 30
DEFAULT_TODAY_ENTRIES_LIMIT = 20
DEFAULT_PATTERN_LIMIT = 10
DEFAULT_CAPTURE_TIMEOUT_SECONDS = 30.0
DEFAULT_CAPTURE_POLL_INTERVAL_SECONDS = 0.5
DEFAULT_DUPLICATE_SCAN_SECONDS = 1
DEFAULT_TOKEN_MAX_AGE_SECONDS = 7 * 24 * 3600
MAX_TIMELOG_ATTEMPTS = 3

# Remarks thresholds (wall clock)
AM_LATE_AFTER = time(8, 0, 0)
AM_UNDERTIME_BEFORE = time(12, 0, 0)
PM_LATE_AFTER = time(13, 0, 0)
PM_UNDERTIME_BEFORE = time(17, 0, 0)
PM_OVERTIME_AFTER = time(18, 0, 0)
NOON_HOUR = 12

# ZKFinger SDK
MAX_TEMPLATE_SIZE = 2048
REGISTER_FINGER_COUNT = 3
SCANNER_MODEL = "ZK Live20R"
