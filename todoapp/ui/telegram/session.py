from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
from typing import Dict, Optional

from todoapp.domain.tasks.models import PlanFilter
from todoapp.domain.tasks.ports import Clock, TaskStore
from todoapp.domain.tasks.report import ReportModel
from todoapp.domain.tasks.undo import UndoBuffer


@dataclass
class ChatSession:
    """UI state for one chat. Lives in memory only; lost on restart."""

    undo: UndoBuffer
    report: ReportModel
    plan_filter: PlanFilter = PlanFilter.THIS_WEEK
    search_query: str = ""
    live_report: Optional[asyncio.Task] = field(default=None, repr=False)

    def stop_live_report(self) -> None:
        if self.live_report is not None and not self.live_report.done():
            self.live_report.cancel()
        self.live_report = None


class SessionRegistry:
    def __init__(self, store: TaskStore, clock: Clock, undo_window_seconds: int) -> None:
        self._store = store
        self._clock = clock
        self._undo_window = undo_window_seconds
        self._sessions: Dict[int, ChatSession] = {}

    def get(self, chat_id: int) -> ChatSession:
        session = self._sessions.get(chat_id)
        if session is None:
            session = ChatSession(
                undo=UndoBuffer(self._clock, self._undo_window),
                report=ReportModel(self._store, self._clock),
            )
            self._sessions[chat_id] = session
        return session

    async def close(self) -> None:
        tasks = [s.live_report for s in self._sessions.values() if s.live_report is not None]
        for s in self._sessions.values():
            s.stop_live_report()
        for t in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await t
