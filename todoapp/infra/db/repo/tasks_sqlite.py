from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator

import aiosqlite

from todoapp.domain.common.errors import StorageError
from todoapp.domain.tasks.models import Task
from todoapp.domain.tasks.ports import TaskStore
from todoapp.infra.db.connection import Database

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, creation_date, due_date, is_important, is_completed, is_overdue"


@contextlib.asynccontextmanager
async def _storage_errors(op: str):
    try:
        yield
    except aiosqlite.Error as e:
        logger.error("Task store %s failed: %s", op, e, exc_info=True)
        raise StorageError(f"Task store {op} failed: {e}") from e


class TasksSqliteStore(TaskStore):
    """
    tasks table on the shared Database helper.

    Mutations are serialized by one lock. After each mutation every watcher
    gets the new full snapshot; a slow watcher only ever sees the latest one.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()
        self._watchers: set[asyncio.Queue] = set()

    async def insert(self, task: Task) -> int:
        async with self._lock, _storage_errors("insert"):
            if task.id:
                await self._db.execute(
                    f"INSERT OR REPLACE INTO tasks({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?);",
                    (task.id, *self._values(task)),
                )
                task_id = task.id
            else:
                task_id = await self._db.insert(
                    """
                    INSERT INTO tasks(name, creation_date, due_date, is_important, is_completed, is_overdue)
                    VALUES (?, ?, ?, ?, ?, ?);
                    """,
                    self._values(task),
                )
            await self._publish()
        return task_id

    async def update(self, task: Task) -> None:
        async with self._lock, _storage_errors("update"):
            changed = await self._db.execute(
                """
                UPDATE tasks
                SET name = ?,
                    creation_date = ?,
                    due_date = ?,
                    is_important = ?,
                    is_completed = ?,
                    is_overdue = ?
                WHERE id = ?;
                """,
                (*self._values(task), task.id),
            )
            if changed:
                await self._publish()

    async def delete(self, task: Task) -> None:
        await self.delete_by_id(task.id)

    async def update_due_date(self, task_id: int, due_date: str) -> None:
        async with self._lock, _storage_errors("update_due_date"):
            if await self._db.execute("UPDATE tasks SET due_date = ? WHERE id = ?;", (due_date, task_id)):
                await self._publish()

    async def update_importance(self, task_id: int, is_important: bool) -> None:
        async with self._lock, _storage_errors("update_importance"):
            if await self._db.execute(
                "UPDATE tasks SET is_important = ? WHERE id = ?;", (int(is_important), task_id)
            ):
                await self._publish()

    async def update_overdue(self, task: Task) -> bool:
        # guarded on the fields the flag was computed from
        async with self._lock, _storage_errors("update_overdue"):
            changed = await self._db.execute(
                """
                UPDATE tasks
                SET is_overdue = ?
                WHERE id = ?
                  AND due_date = ?
                  AND is_completed = ?;
                """,
                (int(task.is_overdue), task.id, task.due_date, int(task.is_completed)),
            )
            if changed:
                await self._publish()
        return bool(changed)

    async def delete_by_id(self, task_id: int) -> None:
        async with self._lock, _storage_errors("delete"):
            if await self._db.execute("DELETE FROM tasks WHERE id = ?;", (task_id,)):
                await self._publish()

    async def delete_if_due(self, task_id: int, due_date: str) -> bool:
        async with self._lock, _storage_errors("delete_if_due"):
            deleted = await self._db.execute(
                "DELETE FROM tasks WHERE id = ? AND due_date = ?;", (task_id, due_date)
            )
            if deleted:
                await self._publish()
        return bool(deleted)

    async def delete_all(self) -> None:
        async with self._lock, _storage_errors("delete_all"):
            await self._db.execute("DELETE FROM tasks;")
            await self._publish()

    async def get(self, task_id: int) -> Task | None:
        async with _storage_errors("get"):
            row = await self._db.fetchone(f"SELECT {_COLUMNS} FROM tasks WHERE id = ?;", (task_id,))
        return self._row_to_task(row) if row else None

    async def list_all(self) -> list[Task]:
        async with _storage_errors("list"):
            rows = await self._db.fetchall(
                f"SELECT {_COLUMNS} FROM tasks ORDER BY is_completed ASC, is_important DESC, id ASC;"
            )
        return [self._row_to_task(r) for r in rows]

    async def watch(self) -> AsyncIterator[list[Task]]:
        queue: asyncio.Queue[list[Task]] = asyncio.Queue()
        self._watchers.add(queue)
        try:
            yield await self.list_all()
            while True:
                snapshot = await queue.get()
                while not queue.empty():
                    snapshot = queue.get_nowait()
                yield snapshot
        finally:
            self._watchers.discard(queue)

    async def _publish(self) -> None:
        if not self._watchers:
            return
        snapshot = await self.list_all()
        for queue in self._watchers:
            queue.put_nowait(snapshot)

    @staticmethod
    def _values(task: Task) -> tuple:
        return (
            task.name,
            task.creation_date,
            task.due_date,
            int(task.is_important),
            int(task.is_completed),
            int(task.is_overdue),
        )

    @staticmethod
    def _row_to_task(row) -> Task:
        return Task(
            id=int(row["id"]),
            name=row["name"],
            creation_date=row["creation_date"],
            due_date=row["due_date"],
            is_important=bool(row["is_important"]),
            is_completed=bool(row["is_completed"]),
            is_overdue=bool(row["is_overdue"]),
        )
