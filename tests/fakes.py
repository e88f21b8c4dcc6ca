from __future__ import annotations

import os
import tempfile
from datetime import datetime, timedelta, timezone

from todoapp.domain.calendar.models import CalendarEvent
from todoapp.domain.calendar.ports import CalendarError, CalendarProvider
from todoapp.domain.common.time import to_iso
from todoapp.domain.tasks.models import Task
from todoapp.domain.tasks.ports import Clock
from todoapp.infra.db.connection import Database
from todoapp.infra.db.repo.tasks_sqlite import TasksSqliteStore
from todoapp.infra.db.schema_version import apply_migrations

# Tuesday
TODAY = datetime(2025, 6, 10, 9, 30, tzinfo=timezone.utc)


class FixedClock(Clock):
    def __init__(self, now: datetime = TODAY) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


class FakeCalendar(CalendarProvider):
    """In-memory calendar; `fail` makes every write raise."""

    def __init__(self, permission: bool = True, fail: bool = False) -> None:
        self.events: list[CalendarEvent] = []
        self.permission = permission
        self.fail = fail

    async def has_permission(self) -> bool:
        return self.permission

    async def insert_event(self, event: CalendarEvent) -> None:
        if self.fail:
            raise CalendarError("provider unavailable")
        self.events.append(event)

    async def delete_events(self, title, all_day, start_from_ms, start_until_ms) -> int:
        if self.fail:
            raise CalendarError("provider unavailable")
        keep = [
            e for e in self.events
            if not (e.title == title and e.all_day == all_day and start_from_ms <= e.start_ms < start_until_ms)
        ]
        removed = len(self.events) - len(keep)
        self.events = keep
        return removed

    async def delete_events_for_task(self, task_id: int) -> int:
        if self.fail:
            raise CalendarError("provider unavailable")
        keep = [e for e in self.events if e.task_id != task_id]
        removed = len(self.events) - len(keep)
        self.events = keep
        return removed

    @property
    def titles(self) -> list[str]:
        return [e.title for e in self.events]


def make_task(
    task_id: int,
    name: str = "Task",
    due_date: str = "June 10, 2025",
    important: bool = False,
    completed: bool = False,
    overdue: bool = False,
) -> Task:
    return Task(
        id=task_id,
        name=name,
        creation_date=str(1_700_000_000_000 + task_id),
        due_date=due_date,
        is_important=important,
        is_completed=completed,
        is_overdue=overdue,
    )


def temp_db_path() -> str:
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    return path


def remove_db(path: str) -> None:
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(path + suffix):
            os.unlink(path + suffix)


async def run_with_store(test_fn) -> None:
    """Run test_fn(store) against a migrated temporary database."""
    path = temp_db_path()
    try:
        db = Database(path)
        await apply_migrations(db, to_iso(TODAY))
        await test_fn(TasksSqliteStore(db))
    finally:
        remove_db(path)
