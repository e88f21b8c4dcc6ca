from __future__ import annotations

from datetime import timedelta
from typing import Dict, Optional

from todoapp.domain.tasks.models import DeletedTaskSnapshot, Task
from todoapp.domain.tasks.ports import Clock


class UndoBuffer:
    """
    Recently deleted tasks for one UI session.

    A snapshot can be taken back once, and only within the offer window.
    """

    def __init__(self, clock: Clock, window_seconds: int = 10) -> None:
        self._clock = clock
        self._window = timedelta(seconds=window_seconds)
        self._items: Dict[int, DeletedTaskSnapshot] = {}

    def offer(self, task: Task, position: int) -> DeletedTaskSnapshot:
        self._expire()
        snapshot = DeletedTaskSnapshot(task=task, position=position, deleted_at=self._clock.now())
        self._items[task.id] = snapshot
        return snapshot

    def take(self, task_id: int) -> Optional[DeletedTaskSnapshot]:
        self._expire()
        return self._items.pop(task_id, None)

    def __len__(self) -> int:
        self._expire()
        return len(self._items)

    def _expire(self) -> None:
        now = self._clock.now()
        for task_id in [k for k, s in self._items.items() if now - s.deleted_at > self._window]:
            del self._items[task_id]
