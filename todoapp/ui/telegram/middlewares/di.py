from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from todoapp.domain.tasks.service import TaskService
from todoapp.ui.telegram.session import SessionRegistry


class DIMiddleware(BaseMiddleware):
    """
    Inject dependencies to handlers via `data` dict.

    Handlers can request args by name, e.g.
      async def handler(message: Message, task_service: TaskService, sessions: SessionRegistry): ...
    """

    def __init__(self, task_service: TaskService, sessions: SessionRegistry) -> None:
        self._service = task_service
        self._sessions = sessions

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        # keep names stable across the project
        data["task_service"] = self._service
        data["sessions"] = self._sessions

        return await handler(event, data)
