"""
resources.py — The named collections and documents kept in the record store.
"""

from datetime import datetime, timezone
from typing import List, Optional

from record_store import Collection, RecordStore
from utils import logger, now_iso, parse_timestamp

MESSAGES_FILE = "messages.json"
STATS_FILE = "stats.json"
PERSONAL_INFO_FILE = "personal-info.json"

DEFAULT_PERSONAL_INFO = {
    "name": "",
    "profession": "Backend Developer",
    "experience": "",
    "education": "",
    "skills": [],
    "location": "",
    "languages": [],
    "projects": "",
    "specialization": "",
    "personality": "",
    "additionalInfo": "",
}


def archive_file_for(year: int) -> str:
    return f"message-archive-{year}.json"


def default_stats() -> dict:
    return {
        "visitors": 0,
        "cvViews": 0,
        "cvDownloads": 0,
        "messageCount": 0,
        "monthlyVisitors": [0] * 12,
    }


class Resources:
    """Bundle of collections sharing one RecordStore."""

    def __init__(self, store: RecordStore):
        self.store = store
        self.projects = Collection(store, "projects.json", "Project")
        self.education = Collection(store, "education.json", "Education entry")
        self.skills = Collection(store, "skills.json", "Skill", wrapper_key="skills")
        self.technologies = Collection(store, "technologies.json", "Technology")
        self.messages = Collection(store, MESSAGES_FILE, "Message")

    # ── Inbox ─────────────────────────────────────────

    def messages_newest_first(self) -> List[dict]:
        def created(record):
            return parse_timestamp(record.get("createdAt")) or datetime.min.replace(tzinfo=timezone.utc)

        return sorted(self.messages.list(), key=created, reverse=True)

    def unread_count(self) -> int:
        return sum(1 for m in self.messages.list() if not m.get("read"))

    def mark_read(self, message_id: str) -> dict:
        def apply(record):
            record["read"] = True
            record["readAt"] = now_iso()
            return record

        return self.messages.update(message_id, apply)

    def backfill_messages(self) -> int:
        """Bring legacy message records onto the canonical shape. Returns the number changed."""
        changed = 0
        with self.messages.editing() as records:
            for index, record in enumerate(records):
                normalized = normalize_message(record)
                if normalized != record:
                    records[index] = normalized
                    changed += 1
        if changed:
            logger.info("Backfilled %d legacy message records", changed)
        return changed

    # ── Stats ─────────────────────────────────────────

    def _stats_transaction(self):
        return self.store.transaction(STATS_FILE, default_stats)

    def increment_counter(self, counter: str) -> dict:
        with self._stats_transaction() as stats:
            stats[counter] = int(stats.get(counter) or 0) + 1
        return stats

    def record_visitor(self, when: Optional[datetime] = None) -> dict:
        month = (when or datetime.now()).month - 1
        with self._stats_transaction() as stats:
            monthly = stats.get("monthlyVisitors")
            if not isinstance(monthly, list) or len(monthly) != 12:
                monthly = (list(monthly) if isinstance(monthly, list) else []) + [0] * 12
                monthly = monthly[:12]
            monthly[month] = int(monthly[month] or 0) + 1
            stats["monthlyVisitors"] = monthly
            stats["visitors"] = int(stats.get("visitors") or 0) + 1
        return stats

    def stats_snapshot(self) -> dict:
        """Current counters with ``messageCount`` refreshed from the inbox."""
        message_count = len(self.messages.list())
        with self._stats_transaction() as stats:
            for key, value in default_stats().items():
                stats.setdefault(key, value)
            stats["messageCount"] = message_count
        return stats

    # ── Personal info ─────────────────────────────────

    def personal_info(self) -> dict:
        info = self.store.load(PERSONAL_INFO_FILE)
        if isinstance(info, dict):
            return info
        # An unreadable file is left for the owner to repair; only a missing one is created
        with self.store.lock(PERSONAL_INFO_FILE):
            if not self.store.path_for(PERSONAL_INFO_FILE).exists():
                self.store.save(PERSONAL_INFO_FILE, DEFAULT_PERSONAL_INFO)
        return dict(DEFAULT_PERSONAL_INFO)

    def replace_personal_info(self, info: dict) -> dict:
        with self.store.transaction(PERSONAL_INFO_FILE, dict) as current:
            current.clear()
            current.update(info)
        return info


def normalize_message(record: dict) -> dict:
    """Canonical message shape: ``id`` instead of ``_id``, boolean ``read``, ISO ``createdAt``."""
    normalized = dict(record)
    if "id" not in normalized and "_id" in normalized:
        normalized["id"] = str(normalized.pop("_id"))
    elif "_id" in normalized:
        normalized.pop("_id")
    normalized["read"] = bool(normalized.get("read", False))
    if not isinstance(normalized.get("requirements", []), list):
        normalized["requirements"] = [str(normalized["requirements"])]
    if "createdAt" not in normalized:
        normalized["createdAt"] = now_iso()
    return normalized
