"""Runtime settings for swiftread.

Values come from the environment (a ``.env`` file in the working directory
is loaded on import) and fall back to the defaults below.
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# -------------------------------
# Reading rate bounds (words per minute)
# -------------------------------
MIN_WPM = 60
MAX_WPM = 1000
WPM_STEP = 10

# A text must have more units than this before a read is logged.
RECORD_MIN_UNITS = 5

ALLOWED_EXTENSIONS = {".pdf", ".epub", ".txt", ".md"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


HOST = os.environ.get("SWIFTREAD_HOST", "127.0.0.1")
PORT = _env_int("SWIFTREAD_PORT", 5000)
DEFAULT_WPM = _env_int("SWIFTREAD_DEFAULT_WPM", 500)
ANALYTICS_PATH = Path(
    os.environ.get("SWIFTREAD_ANALYTICS_PATH", "~/.swiftread/analytics.json")
).expanduser()
ADMIN_PASSWORD = os.environ.get("SWIFTREAD_ADMIN_PASSWORD", "")
SECRET_KEY = os.environ.get("SWIFTREAD_SECRET_KEY") or secrets.token_hex(32)
MAX_UPLOAD_MB = _env_int("SWIFTREAD_MAX_UPLOAD_MB", 200)
FETCH_TIMEOUT = _env_float("SWIFTREAD_FETCH_TIMEOUT", 15.0)
# The web server refuses to fetch loopback and private-network URLs unless
# this is set.
ALLOW_PRIVATE_FETCH = _env_bool("SWIFTREAD_ALLOW_PRIVATE_FETCH", False)


@dataclass
class Settings:
    host: str = HOST
    port: int = PORT
    default_wpm: int = DEFAULT_WPM
    analytics_path: Path = ANALYTICS_PATH
    admin_password: str = ADMIN_PASSWORD
    secret_key: str = SECRET_KEY
    max_upload_mb: int = MAX_UPLOAD_MB
    fetch_timeout: float = FETCH_TIMEOUT
    allow_private_fetch: bool = ALLOW_PRIVATE_FETCH

    @classmethod
    def from_env(cls) -> "Settings":
        return cls()
