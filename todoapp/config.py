from dataclasses import dataclass
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    bot_token: str
    owner_telegram_id: int
    timezone: str
    db_path: Path
    calendar_db_path: Path
    calendar_sync: bool
    retention_days: int
    undo_window_seconds: int
    maintenance_interval_seconds: int
    seed_demo_data: bool
    log_level: str


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default).strip()
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def load_settings() -> Settings:
    bot_token = os.getenv("BOT_TOKEN", "").strip()
    owner_id = _env_int("OWNER_TELEGRAM_ID", "0")
    tz = os.getenv("TZ", "Australia/Melbourne").strip()

    if not bot_token:
        raise RuntimeError("BOT_TOKEN missing in .env")
    if owner_id <= 0:
        raise RuntimeError("OWNER_TELEGRAM_ID missing/invalid in .env")

    retention_days = _env_int("RETENTION_DAYS", "14")
    if retention_days < 1:
        raise RuntimeError("RETENTION_DAYS must be at least 1")

    # relative paths are resolved against the repo root in main()
    return Settings(
        bot_token=bot_token,
        owner_telegram_id=owner_id,
        timezone=tz,
        db_path=Path(os.getenv("DB_PATH", "data/todo.db").strip()),
        calendar_db_path=Path(os.getenv("CALENDAR_DB_PATH", "data/calendar.db").strip()),
        calendar_sync=_env_bool("CALENDAR_SYNC", "1"),
        retention_days=retention_days,
        undo_window_seconds=_env_int("UNDO_WINDOW_SECONDS", "10"),
        maintenance_interval_seconds=_env_int("MAINTENANCE_INTERVAL_SECONDS", "3600"),
        seed_demo_data=_env_bool("SEED_DEMO_DATA", "0"),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    )
