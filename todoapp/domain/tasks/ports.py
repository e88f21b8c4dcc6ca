from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import AsyncIterator

from todoapp.domain.tasks.models import Task


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime: ...


class TaskStore(ABC):
    """
    Durable mapping from task id to Task.

    Every read is a full snapshot ordered incomplete-first, then important-first.
    Narrow updates and deletes by id are no-ops when the id does not exist.
    """

    @abstractmethod
    async def insert(self, task: Task) -> int: ...

    @abstractmethod
    async def update(self, task: Task) -> None: ...

    @abstractmethod
    async def delete(self, task: Task) -> None: ...

    @abstractmethod
    async def update_due_date(self, task_id: int, due_date: str) -> None: ...

    @abstractmethod
    async def update_importance(self, task_id: int, is_important: bool) -> None: ...

    @abstractmethod
    async def update_overdue(self, task: Task) -> bool:
        """
        Store task.is_overdue only if the row still has task's due_date and
        is_completed. Returns True when the row was updated.
        """

    @abstractmethod
    async def delete_by_id(self, task_id: int) -> None: ...

    @abstractmethod
    async def delete_if_due(self, task_id: int, due_date: str) -> bool:
        """Delete the task only if its due date is still due_date. Returns True when deleted."""

    @abstractmethod
    async def delete_all(self) -> None: ...

    @abstractmethod
    async def get(self, task_id: int) -> Task | None: ...

    @abstractmethod
    async def list_all(self) -> list[Task]: ...

    @abstractmethod
    def watch(self) -> AsyncIterator[list[Task]]: ...
