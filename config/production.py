import os

from .base import (  # noqa: F401
    CAPTURE_TIMEOUT_SECONDS,
    DB_CONFIG,
    DUPLICATE_SCAN_SECONDS,
    MATCH_THRESHOLD,
    TOKEN_MAX_AGE_SECONDS,
    ZKFP_LIBRARY,
    env_bool,
)

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", "0")

SCANNER_AUTO_INIT = env_bool("SCANNER_AUTO_INIT", "1")
