from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Awaitable, Optional

from todoapp.domain.calendar.mirror import CalendarMirror
from todoapp.domain.common.time import to_epoch_ms
from todoapp.domain.tasks import buckets
from todoapp.domain.tasks.dates import format_due_date
from todoapp.domain.tasks.models import DeletedTaskSnapshot, PlanFilter, Task
from todoapp.domain.tasks.ports import Clock, TaskStore
from todoapp.domain.tasks.rules import validate_name, validate_retention_days
from todoapp.domain.tasks.status import reconcile_overdue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllTasksView:
    tasks: list[Task]
    invalid_due_date: list[Task]


class TaskService:
    """
    Task use cases. No aiogram. No sqlite.

    A mutation is complete once the store write returns; calendar mirroring is
    scheduled in the background and never affects the result.
    """

    def __init__(
        self,
        store: TaskStore,
        clock: Clock,
        mirror: Optional[CalendarMirror] = None,
        retention_days: int = buckets.DEFAULT_RETENTION_DAYS,
    ) -> None:
        self._store = store
        self._clock = clock
        self._mirror = mirror
        self._retention_days = validate_retention_days(retention_days)
        self._background: set[asyncio.Task] = set()

    @property
    def store(self) -> TaskStore:
        return self._store

    def today(self) -> date:
        return self._clock.now().date()

    # --- mutations ---

    async def add_task(self, name: str, due: date, is_important: bool = False) -> Task:
        task = Task(
            id=0,
            name=validate_name(name),
            creation_date=str(to_epoch_ms(self._clock.now())),
            due_date=format_due_date(due),
            is_important=is_important,
        )
        return await self.insert(task)

    async def insert(self, task: Task) -> Task:
        task_id = await self._store.insert(task)
        task = replace(task, id=task_id)
        logger.info("Task created: id=%s due=%s important=%s", task.id, task.due_date, task.is_important)
        if self._mirror is not None:
            self._spawn(self._mirror.on_insert(task))
        return task

    async def set_completed(self, task_id: int, is_completed: bool) -> Optional[Task]:
        task = await self._store.get(task_id)
        if task is None:
            return None
        updated = replace(task, is_completed=is_completed)
        await self._store.update(updated)
        return updated

    async def toggle_importance(self, task_id: int) -> Optional[Task]:
        task = await self._store.get(task_id)
        if task is None:
            return None
        updated = replace(task, is_important=not task.is_important)
        await self._store.update_importance(task_id, updated.is_important)
        if self._mirror is not None:
            self._spawn(self._mirror.on_importance_changed(updated, was_important=task.is_important))
        return updated

    async def reschedule(self, task_id: int, due: date) -> Optional[Task]:
        task = await self._store.get(task_id)
        if task is None:
            return None
        updated = replace(task, due_date=format_due_date(due))
        await self._store.update_due_date(task_id, updated.due_date)
        if self._mirror is not None:
            self._spawn(self._mirror.on_rescheduled(task, updated))
        return updated

    async def delete_task(self, task_id: int) -> Optional[Task]:
        task = await self._store.get(task_id)
        if task is None:
            return None
        await self._store.delete(task)
        logger.info("Task deleted: id=%s", task_id)
        if self._mirror is not None:
            self._spawn(self._mirror.on_delete(task))
        return task

    async def restore(self, snapshot: DeletedTaskSnapshot) -> Task:
        # same id: insert is an upsert
        return await self.insert(snapshot.task)

    # --- maintenance ---

    async def refresh_overdue(self) -> int:
        """Recompute the cached is_overdue flags against today; returns the number of updated tasks."""
        today = self.today()
        updated = 0
        for task in reconcile_overdue(await self._store.list_all(), today):
            # skipped when the row changed since the snapshot; the next pass picks it up
            if await self._store.update_overdue(task):
                updated += 1
        if updated:
            logger.info("Overdue flags updated: %d task(s)", updated)
        return updated

    async def prune_stale(self) -> int:
        """Delete tasks due more than retention_days ago."""
        stale = buckets.bucket_stale(await self._store.list_all(), self.today(), self._retention_days)
        pruned = 0
        for task in stale:
            if not await self._store.delete_if_due(task.id, task.due_date):
                continue
            pruned += 1
            if self._mirror is not None:
                self._spawn(self._mirror.on_delete(task))
        if pruned:
            logger.info("Pruned %d task(s) older than %d days", pruned, self._retention_days)
        return pruned

    # --- views ---

    async def today_view(self) -> list[Task]:
        await self.refresh_overdue()
        return buckets.bucket_today(await self._store.list_all(), self.today())

    async def important_view(self) -> list[Task]:
        await self.refresh_overdue()
        return buckets.bucket_important(await self._store.list_all())

    async def plan_view(self, plan_filter: PlanFilter) -> list[Task]:
        return buckets.plan_view(await self._store.list_all(), self.today(), plan_filter)

    async def all_view(self, query: Optional[str] = None) -> AllTasksView:
        tasks = await self._store.list_all()
        recent = buckets.bucket_recent(tasks, self.today(), self._retention_days)
        return AllTasksView(
            tasks=buckets.search(recent, query),
            invalid_due_date=buckets.search(buckets.bucket_invalid_due_date(tasks), query),
        )

    # --- background calendar work ---

    def _spawn(self, coro: Awaitable[None]) -> None:
        job = asyncio.ensure_future(coro)
        self._background.add(job)
        job.add_done_callback(self._background.discard)

    async def drain(self) -> None:
        """Wait for outstanding calendar work."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
