"""
Settings loading from environment variables.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from todoapp.config import load_settings


def _base_env(monkeypatch):
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    monkeypatch.setenv("OWNER_TELEGRAM_ID", "42")
    for name in (
        "TZ",
        "DB_PATH",
        "CALENDAR_DB_PATH",
        "CALENDAR_SYNC",
        "RETENTION_DAYS",
        "UNDO_WINDOW_SECONDS",
        "MAINTENANCE_INTERVAL_SECONDS",
        "SEED_DEMO_DATA",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _base_env(monkeypatch)
    s = load_settings()
    assert s.owner_telegram_id == 42
    assert s.db_path == Path("data/todo.db")
    assert s.calendar_sync is True
    assert s.retention_days == 14
    assert s.undo_window_seconds == 10
    assert s.seed_demo_data is False
    assert s.log_level == "INFO"


def test_overrides(monkeypatch):
    _base_env(monkeypatch)
    monkeypatch.setenv("CALENDAR_SYNC", "off")
    monkeypatch.setenv("RETENTION_DAYS", "30")
    monkeypatch.setenv("SEED_DEMO_DATA", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = load_settings()
    assert s.calendar_sync is False
    assert s.retention_days == 30
    assert s.seed_demo_data is True
    assert s.log_level == "DEBUG"


def test_missing_token_is_rejected(monkeypatch):
    _base_env(monkeypatch)
    monkeypatch.setenv("BOT_TOKEN", "")
    with pytest.raises(RuntimeError):
        load_settings()


def test_bad_retention_is_rejected(monkeypatch):
    _base_env(monkeypatch)
    monkeypatch.setenv("RETENTION_DAYS", "0")
    with pytest.raises(RuntimeError):
        load_settings()

    monkeypatch.setenv("RETENTION_DAYS", "two weeks")
    with pytest.raises(RuntimeError):
        load_settings()
