"""
utils.py — Logging setup plus id, timestamp and form-field helpers.
"""

import logging
import os
import threading
import time
from datetime import datetime, timezone
from typing import Optional

# ── Logging setup ─────────────────────────────────────

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DIR = os.path.dirname(os.path.abspath(__file__))
LOG_FILE = os.environ.get("LOG_FILE", os.path.join(LOG_DIR, "app.log"))

logging.basicConfig(
    level=logging.DEBUG,
    format=LOG_FORMAT,
    handlers=[
        logging.FileHandler(LOG_FILE, encoding="utf-8"),
        logging.StreamHandler(),
    ],
)

logger = logging.getLogger("portfolio_cms")
logger.setLevel(logging.DEBUG)

logger.info("Logging initialised — file: %s", LOG_FILE)


# ── Record ids ────────────────────────────────────────

_id_lock = threading.Lock()
_last_id = 0


def generate_id() -> str:
    """Millisecond timestamp id, bumped so ids never repeat within this process."""
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)


# ── Timestamps ────────────────────────────────────────

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def now_iso() -> str:
    return to_iso(utc_now())


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a stored ISO timestamp; returns None when it is missing or unreadable."""
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def split_list_field(raw: Optional[str]) -> list:
    """Comma-separated form value to a list of trimmed, non-empty strings."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
