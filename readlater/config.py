"""Process configuration loaded from environment variables.

Values are read once at import time. Timeouts here are defaults only; the
fetcher takes an explicit timeout on every call.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}; using default {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}; using default {default}")
        return default


# Network timeouts (seconds)
FETCH_TIMEOUT = _env_float("READLATER_FETCH_TIMEOUT", 30.0)
FALLBACK_TIMEOUT = _env_float("READLATER_FALLBACK_TIMEOUT", 15.0)
WAYBACK_API_TIMEOUT = _env_float("READLATER_WAYBACK_API_TIMEOUT", 10.0)

# Request identity
USER_AGENT = os.getenv(
    "READLATER_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/129.0.0.0 Safari/537.36",
)
ACCEPT_LANGUAGE = os.getenv("READLATER_ACCEPT_LANGUAGE", "en-US,en;q=0.9,tr;q=0.8")

# Fallback channel endpoints
WAYBACK_API_URL = os.getenv(
    "READLATER_WAYBACK_API_URL", "https://archive.org/wayback/available"
)
SEARCH_CACHE_URL = os.getenv(
    "READLATER_SEARCH_CACHE_URL",
    "https://webcache.googleusercontent.com/search?q=cache:{url}&strip=1",
)
ARCHIVE_MIRROR_URL = os.getenv(
    "READLATER_ARCHIVE_MIRROR_URL", "https://archive.today/newest/{url}"
)

# Normalizer
EMAIL_TABLE_THRESHOLD = _env_int("READLATER_EMAIL_TABLE_THRESHOLD", 10)

LOG_LEVEL = os.getenv("READLATER_LOG_LEVEL", "INFO")
