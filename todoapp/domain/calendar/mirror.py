"""
One-way projection of tasks onto an all-day event calendar.

Best effort only: every failure is logged and swallowed, the task store is
the source of truth. Events carry the task id; removal looks events up by
that id first and falls back to the title + day range match for events that
were written without one.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from todoapp.domain.calendar.models import CalendarEvent
from todoapp.domain.calendar.ports import CalendarPermissionError, CalendarProvider
from todoapp.domain.common.time import to_epoch_ms, utc_midnight
from todoapp.domain.tasks.dates import parse_due_date
from todoapp.domain.tasks.models import Task

logger = logging.getLogger(__name__)

IMPORTANT_MARKER = "⭐ "
DAY_MS = 24 * 60 * 60 * 1000


def event_title(name: str, is_important: bool) -> str:
    return f"{IMPORTANT_MARKER}{name}" if is_important else name


def day_range_utc(day: date) -> tuple[int, int]:
    """UTC midnight of `day` and of the following day, in epoch milliseconds."""
    start = to_epoch_ms(utc_midnight(day))
    end = to_epoch_ms(utc_midnight(day + timedelta(days=1)))
    return start, end


class CalendarMirror:
    def __init__(self, provider: CalendarProvider) -> None:
        self._provider = provider

    async def on_insert(self, task: Task) -> None:
        try:
            await self._write(task)
        except Exception as e:
            logger.error("Calendar sync failed for task_id=%s: %s", task.id, e, exc_info=True)

    async def on_delete(self, task: Task) -> None:
        try:
            await self._remove(task, task.is_important)
        except Exception as e:
            logger.error("Calendar delete failed for task_id=%s: %s", task.id, e, exc_info=True)

    async def on_importance_changed(self, task: Task, was_important: bool) -> None:
        """Replace the event written under the old title with one under the new title."""
        try:
            await self._remove(task, was_important)
            await self._write(task)
        except Exception as e:
            logger.error("Calendar importance sync failed for task_id=%s: %s", task.id, e, exc_info=True)

    async def on_rescheduled(self, before: Task, after: Task) -> None:
        try:
            await self._remove(before, before.is_important)
            await self._write(after)
        except Exception as e:
            logger.error("Calendar reschedule failed for task_id=%s: %s", after.id, e, exc_info=True)

    async def _write(self, task: Task) -> None:
        if not await self._provider.has_permission():
            logger.warning("Calendar permission missing, skip sync for task_id=%s", task.id)
            return
        day = parse_due_date(task.due_date)
        if day is None:
            logger.warning("Unable to parse due date %r, skip sync for task_id=%s", task.due_date, task.id)
            return

        start_ms, end_ms = day_range_utc(day)
        event = CalendarEvent(
            title=event_title(task.name, task.is_important),
            start_ms=start_ms,
            end_ms=end_ms,
            all_day=True,
            task_id=task.id or None,
        )
        try:
            await self._provider.insert_event(event)
        except CalendarPermissionError as e:
            logger.warning("Calendar permission denied for task_id=%s: %s", task.id, e)
            return
        logger.debug("All-day event created: %r on %s", event.title, task.due_date)

    async def _remove(self, task: Task, is_important: bool) -> Optional[int]:
        if not await self._provider.has_permission():
            logger.warning("Calendar permission missing, skip delete for task_id=%s", task.id)
            return None

        deleted = 0
        if task.id:
            deleted = await self._provider.delete_events_for_task(task.id)
        if deleted:
            return deleted

        day = parse_due_date(task.due_date)
        if day is None:
            logger.warning("Failed to parse delete date %r for task_id=%s", task.due_date, task.id)
            return 0
        start_ms, end_ms = day_range_utc(day)
        title = event_title(task.name, is_important)
        deleted = await self._provider.delete_events(title, True, start_ms, end_ms)
        logger.debug("Deleted %d calendar event(s) for %r on %s", deleted, title, task.due_date)
        return deleted
