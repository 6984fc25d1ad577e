"""
Archival and housekeeping schedule tests.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from archiver import HousekeepingScheduler, archive_old_messages, next_daily_run, next_weekly_run
from record_store import RecordStore
from resources import Resources, archive_file_for
from utils import to_iso

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def resources(tmp_path):
    return Resources(RecordStore(tmp_path / "data"))


def _message(message_id, age_days, read):
    return {
        "id": message_id,
        "name": "Sam",
        "email": "sam@example.com",
        "message": "hello",
        "read": read,
        "createdAt": to_iso(NOW - timedelta(days=age_days)),
    }


class TestArchiveOldMessages:

    def test_old_read_message_moves_to_year_archive(self, resources):
        resources.messages.replace_all([_message("old-read", 31, True), _message("fresh", 1, True)])

        moved = archive_old_messages(resources, now=NOW)

        assert moved == 1
        assert [m["id"] for m in resources.messages.list()] == ["fresh"]
        archive = resources.store.load(archive_file_for(2026))
        assert [m["id"] for m in archive] == ["old-read"]

    def test_old_unread_message_is_kept(self, resources):
        resources.messages.replace_all([_message("old-unread", 31, False)])

        assert archive_old_messages(resources, now=NOW) == 0
        assert [m["id"] for m in resources.messages.list()] == ["old-unread"]
        assert resources.store.load(archive_file_for(2026)) is None

    def test_appends_to_existing_archive(self, resources):
        resources.store.save(archive_file_for(2026), [{"id": "earlier"}])
        resources.messages.replace_all([_message("a", 40, True), _message("b", 90, True)])

        assert archive_old_messages(resources, now=NOW) == 2
        archive = resources.store.load(archive_file_for(2026))
        assert [m["id"] for m in archive] == ["earlier", "a", "b"]
        assert resources.messages.list() == []

    def test_unreadable_created_at_stays_in_inbox(self, resources):
        broken = _message("broken", 0, True)
        broken["createdAt"] = "last tuesday"
        resources.messages.replace_all([broken])

        assert archive_old_messages(resources, now=NOW) == 0
        assert len(resources.messages.list()) == 1

    def test_respects_custom_age(self, resources):
        resources.messages.replace_all([_message("week-old", 8, True)])
        assert archive_old_messages(resources, now=NOW, max_age_days=7) == 1


class TestSchedule:

    def test_next_daily_run_is_next_midnight(self):
        assert next_daily_run(datetime(2026, 6, 15, 12, 0)) == datetime(2026, 6, 16, 0, 0)
        assert next_daily_run(datetime(2026, 6, 15, 0, 0)) == datetime(2026, 6, 16, 0, 0)

    def test_next_weekly_run_is_sunday_one_am(self):
        # 2026-06-15 is a Monday
        assert next_weekly_run(datetime(2026, 6, 15, 12, 0)) == datetime(2026, 6, 21, 1, 0)
        assert next_weekly_run(datetime(2026, 6, 21, 0, 30)) == datetime(2026, 6, 21, 1, 0)
        assert next_weekly_run(datetime(2026, 6, 21, 1, 0)) == datetime(2026, 6, 28, 1, 0)

    def test_scheduler_starts_and_stops(self, resources):
        scheduler = HousekeepingScheduler(resources)

        async def run():
            scheduler.start()
            assert scheduler.running
            await scheduler.stop()
            assert not scheduler.running

        asyncio.run(run())

    def test_daily_job_archives(self, resources):
        resources.messages.replace_all([
            {"id": "x", "read": True, "createdAt": to_iso(datetime.now(timezone.utc) - timedelta(days=45))},
        ])
        HousekeepingScheduler(resources).daily_job()
        assert resources.messages.list() == []
