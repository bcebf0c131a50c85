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

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "1")
# Optional: also seed demo data on startup
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", "0")

# Dev machines usually have no scanner attached
SCANNER_AUTO_INIT = env_bool("SCANNER_AUTO_INIT", "0")
