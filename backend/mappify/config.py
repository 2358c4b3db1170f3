"""
Environment configuration for mappify.

Values are read once at import time from the process environment, after
loading a ``.env`` file from the working directory when one exists.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _as_bool(raw):
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


# ── Database ──────────────────────────────────────────────
DB_PATH: str = os.getenv("MAPPIFY_DB_PATH", ":memory:")
DB_TIMEOUT: float = float(os.getenv("MAPPIFY_DB_TIMEOUT", "5.0"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("MAPPIFY_LOG_LEVEL", "INFO").upper()
LOG_SQL: bool = _as_bool(os.getenv("MAPPIFY_LOG_SQL", "true"))
