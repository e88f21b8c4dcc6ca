# todoapp/infra/scheduler/loop.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from todoapp.domain.tasks.service import TaskService

logger = logging.getLogger(__name__)


@dataclass
class MaintenanceConfig:
    interval_seconds: int = 3600


class MaintenanceLoop:
    """
    Periodic housekeeping: overdue reconciliation, then retention prune.
    Runs once immediately, then every interval until stop().
    """

    def __init__(self, service: TaskService, cfg: Optional[MaintenanceConfig] = None) -> None:
        self._service = service
        self._cfg = cfg or MaintenanceConfig()
        self._stop = asyncio.Event()

    def stop(self) -> None:
        self._stop.set()

    async def run_forever(self) -> None:
        while not self._stop.is_set():
            try:
                await self.tick()
            except Exception as e:
                # never crash the bot because of housekeeping, but log errors
                logger.error(f"Maintenance tick error: {e}", exc_info=True)
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._cfg.interval_seconds)
            except asyncio.TimeoutError:
                pass

    async def tick(self) -> tuple[int, int]:
        refreshed = await self._service.refresh_overdue()
        pruned = await self._service.prune_stale()
        logger.debug("Maintenance tick: refreshed=%d pruned=%d", refreshed, pruned)
        return refreshed, pruned
