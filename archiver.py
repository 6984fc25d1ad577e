"""
archiver.py — Message archival and the housekeeping timers that run it.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from resources import MESSAGES_FILE, Resources, archive_file_for
from utils import logger, parse_timestamp, utc_now


def archive_old_messages(resources: Resources, now: Optional[datetime] = None, max_age_days: int = 30) -> int:
    """
    Move read messages older than ``max_age_days`` into this year's archive file.
    Unread messages stay in the inbox whatever their age. Returns the count moved.
    """
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.astimezone()
    cutoff = now - timedelta(days=max_age_days)
    store = resources.store
    archive_name = archive_file_for(now.year)

    with store.lock(MESSAGES_FILE), store.lock(archive_name):
        old, current = [], []
        for message in resources.messages.list():
            created = parse_timestamp(message.get("createdAt"))
            if created is not None and created < cutoff and message.get("read"):
                old.append(message)
            else:
                current.append(message)

        if not old:
            logger.info("No messages to archive")
            return 0

        with store.transaction(archive_name, list) as archive:
            archive.extend(old)
        resources.messages.replace_all(current)

    logger.info("Archived %d messages to %s", len(old), archive_name)
    return len(old)


def weekly_cleanup(resources: Resources) -> None:
    logger.info("Running weekly cleanup; no cleanup tasks registered")


# ── Scheduling ────────────────────────────────────────

def next_daily_run(now: datetime, hour: int = 0, minute: int = 0) -> datetime:
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def next_weekly_run(now: datetime, weekday: int = 6, hour: int = 1, minute: int = 0) -> datetime:
    """``weekday`` uses datetime's convention: Monday is 0, Sunday is 6."""
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    candidate += timedelta(days=(weekday - now.weekday()) % 7)
    if candidate <= now:
        candidate += timedelta(days=7)
    return candidate


class HousekeepingScheduler:
    """Runs the daily archival and the weekly cleanup slot on the service's event loop."""

    def __init__(self, resources: Resources, max_age_days: int = 30, clock: Callable[[], datetime] = datetime.now):
        self.resources = resources
        self.max_age_days = max_age_days
        self.clock = clock
        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def daily_job(self) -> None:
        logger.info("Running scheduled message archival task...")
        archive_old_messages(self.resources, max_age_days=self.max_age_days)

    def weekly_job(self) -> None:
        logger.info("Running weekly database cleanup...")
        weekly_cleanup(self.resources)

    async def _loop(self, name: str, next_run: Callable[[datetime], datetime], job: Callable[[], None]):
        while True:
            now = self.clock()
            delay = (next_run(now) - now).total_seconds()
            logger.debug("Next %s run in %.0f seconds", name, delay)
            await asyncio.sleep(delay)
            try:
                await asyncio.to_thread(job)
            except Exception:
                logger.exception("Scheduled %s job failed", name)

    def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._loop("daily", next_daily_run, self.daily_job)),
            asyncio.create_task(self._loop("weekly", next_weekly_run, self.weekly_job)),
        ]
        logger.info("Cron jobs initialized")

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
