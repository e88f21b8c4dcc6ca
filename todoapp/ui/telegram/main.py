from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from todoapp.config import Settings, load_settings
from todoapp.domain.calendar.mirror import CalendarMirror
from todoapp.domain.common.time import to_iso
from todoapp.domain.tasks.service import TaskService
from todoapp.infra.calendar.sqlite_calendar import SqliteCalendarProvider
from todoapp.infra.clock.system_clock import SystemClock
from todoapp.infra.db.connection import Database
from todoapp.infra.db.repo.tasks_sqlite import TasksSqliteStore
from todoapp.infra.db.schema_version import apply_migrations
from todoapp.infra.scheduler.loop import MaintenanceConfig, MaintenanceLoop
from todoapp.infra.seed import seed_demo_tasks
from todoapp.ui.telegram.handlers.cancel import router as cancel_router
from todoapp.ui.telegram.handlers.report import router as report_router
from todoapp.ui.telegram.handlers.start import router as start_router
from todoapp.ui.telegram.handlers.tasks import router as tasks_router
from todoapp.ui.telegram.handlers.views import router as views_router
from todoapp.ui.telegram.middlewares.auth import OwnerOnlyMiddleware
from todoapp.ui.telegram.middlewares.di import DIMiddleware
from todoapp.ui.telegram.session import SessionRegistry

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]  # .../todoapp/ui/telegram/main.py -> repo root


def _absolute(path: Path) -> Path:
    if not path.is_absolute():
        path = REPO_ROOT / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


async def build_service(settings: Settings, clock: SystemClock) -> TaskService:
    db_path = _absolute(settings.db_path)
    logger.info("DB_PATH: %s", db_path)
    db = Database(str(db_path))
    await apply_migrations(db=db, now_iso=to_iso(clock.now()))

    store = TasksSqliteStore(db)
    if settings.seed_demo_data:
        await seed_demo_tasks(store, clock)

    mirror = None
    if settings.calendar_sync:
        calendar_path = _absolute(settings.calendar_db_path)
        logger.info("CALENDAR_DB_PATH: %s", calendar_path)
        provider = SqliteCalendarProvider(Database(str(calendar_path)))
        await provider.init()
        mirror = CalendarMirror(provider)

    return TaskService(store=store, clock=clock, mirror=mirror, retention_days=settings.retention_days)


async def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    clock = SystemClock(settings.timezone)
    service = await build_service(settings, clock)
    sessions = SessionRegistry(service.store, clock, settings.undo_window_seconds)

    # --- bot/dispatcher ---
    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    dp = Dispatcher()

    # --- middlewares ---
    dp.message.middleware(OwnerOnlyMiddleware(settings.owner_telegram_id))
    dp.callback_query.middleware(OwnerOnlyMiddleware(settings.owner_telegram_id))

    dp.message.middleware(DIMiddleware(service, sessions))
    dp.callback_query.middleware(DIMiddleware(service, sessions))

    # --- routers ---
    dp.include_router(start_router)
    dp.include_router(cancel_router)
    dp.include_router(views_router)
    dp.include_router(tasks_router)
    dp.include_router(report_router)

    # --- maintenance (background) ---
    maintenance = MaintenanceLoop(service, MaintenanceConfig(interval_seconds=settings.maintenance_interval_seconds))
    maintenance_task = asyncio.create_task(maintenance.run_forever())

    logger.info("Starting polling")
    try:
        await dp.start_polling(bot)
    finally:
        maintenance.stop()
        maintenance_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await maintenance_task
        await sessions.close()
        await service.drain()
        await bot.session.close()
        logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
