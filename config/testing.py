import os

from .base import (  # noqa: F401
    CAPTURE_TIMEOUT_SECONDS,
    DB_CONFIG,
    MATCH_THRESHOLD,
    TOKEN_MAX_AGE_SECONDS,
    ZKFP_LIBRARY,
    env_bool,
)

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = False
AUTO_SEED_DB = False
SCANNER_AUTO_INIT = False

DUPLICATE_SCAN_SECONDS = 1
