from __future__ import annotations

from abc import ABC, abstractmethod

from todoapp.domain.calendar.models import CalendarEvent


class CalendarError(Exception):
    """Raised by calendar adapters; never escapes CalendarMirror."""


class CalendarPermissionError(CalendarError):
    pass


class CalendarProvider(ABC):
    @abstractmethod
    async def has_permission(self) -> bool: ...

    @abstractmethod
    async def insert_event(self, event: CalendarEvent) -> None: ...

    @abstractmethod
    async def delete_events(self, title: str, all_day: bool, start_from_ms: int, start_until_ms: int) -> int:
        """Delete events matching title and all-day flag whose start is in [from, until). Returns count."""

    @abstractmethod
    async def delete_events_for_task(self, task_id: int) -> int: ...
