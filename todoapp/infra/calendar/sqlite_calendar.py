from __future__ import annotations

import logging

import aiosqlite

from todoapp.domain.calendar.models import CalendarEvent
from todoapp.domain.calendar.ports import CalendarError, CalendarPermissionError, CalendarProvider
from todoapp.infra.db.connection import Database

logger = logging.getLogger(__name__)


class SqliteCalendarProvider(CalendarProvider):
    """
    All-day event calendar kept in its own SQLite file.

    Stands in for the device calendar: the task database never reads from it.
    """

    def __init__(self, db: Database, permission_granted: bool = True) -> None:
        self._db = db
        self._permission_granted = permission_granted

    async def init(self) -> None:
        await self._db.executescript(
            """
            CREATE TABLE IF NOT EXISTS calendar_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                dtstart INTEGER NOT NULL,
                dtend INTEGER NOT NULL,
                all_day INTEGER NOT NULL DEFAULT 1,
                event_timezone TEXT NOT NULL DEFAULT 'UTC',
                task_id INTEGER
            );
            CREATE INDEX IF NOT EXISTS idx_calendar_events_task ON calendar_events(task_id);
            CREATE INDEX IF NOT EXISTS idx_calendar_events_title_start ON calendar_events(title, dtstart);
            """
        )

    async def has_permission(self) -> bool:
        return self._permission_granted

    async def insert_event(self, event: CalendarEvent) -> None:
        self._check_permission()
        try:
            await self._db.insert(
                """
                INSERT INTO calendar_events(title, dtstart, dtend, all_day, event_timezone, task_id)
                VALUES (?, ?, ?, ?, 'UTC', ?);
                """,
                (event.title, event.start_ms, event.end_ms, int(event.all_day), event.task_id),
            )
        except aiosqlite.Error as e:
            raise CalendarError(f"insert failed: {e}") from e

    async def delete_events(self, title: str, all_day: bool, start_from_ms: int, start_until_ms: int) -> int:
        self._check_permission()
        try:
            return await self._db.execute(
                """
                DELETE FROM calendar_events
                WHERE all_day = ?
                  AND title = ?
                  AND dtstart >= ?
                  AND dtstart < ?;
                """,
                (int(all_day), title, start_from_ms, start_until_ms),
            )
        except aiosqlite.Error as e:
            raise CalendarError(f"delete failed: {e}") from e

    async def delete_events_for_task(self, task_id: int) -> int:
        self._check_permission()
        try:
            return await self._db.execute("DELETE FROM calendar_events WHERE task_id = ?;", (task_id,))
        except aiosqlite.Error as e:
            raise CalendarError(f"delete failed: {e}") from e

    async def list_events(self) -> list[CalendarEvent]:
        rows = await self._db.fetchall(
            "SELECT title, dtstart, dtend, all_day, task_id FROM calendar_events ORDER BY dtstart, id;"
        )
        return [
            CalendarEvent(
                title=r["title"],
                start_ms=int(r["dtstart"]),
                end_ms=int(r["dtend"]),
                all_day=bool(r["all_day"]),
                task_id=r["task_id"],
            )
            for r in rows
        ]

    def _check_permission(self) -> None:
        if not self._permission_granted:
            raise CalendarPermissionError("calendar access not granted")
