"""
Tests for TaskService: mutations, calendar mirroring in the background,
overdue refresh on view entry, retention prune and the all-tasks view.
"""
from __future__ import annotations

import asyncio
from datetime import date

import pytest

from fakes import FakeCalendar, FixedClock, make_task, run_with_store
from todoapp.domain.calendar.mirror import CalendarMirror
from todoapp.domain.common.errors import ValidationError
from todoapp.domain.tasks.models import PlanFilter
from todoapp.domain.tasks.service import TaskService
from todoapp.domain.tasks.undo import UndoBuffer


def _service(store, calendar=None, retention_days=14):
    mirror = CalendarMirror(calendar) if calendar is not None else None
    return TaskService(store=store, clock=FixedClock(), mirror=mirror, retention_days=retention_days)


def test_add_task_stores_display_date_and_mirrors_event():
    async def run(store):
        calendar = FakeCalendar()
        service = _service(store, calendar)
        task = await service.add_task("  Buy milk ", date(2025, 6, 12), is_important=True)
        assert task.id > 0
        assert task.name == "Buy milk"
        assert task.due_date == "June 12, 2025"
        assert (await store.get(task.id)) == task

        await service.drain()
        assert calendar.titles == ["⭐ Buy milk"]
        assert calendar.events[0].task_id == task.id

    asyncio.run(run_with_store(run))


def test_add_task_rejects_blank_name():
    async def run(store):
        service = _service(store)
        with pytest.raises(ValidationError):
            await service.add_task("   ", date(2025, 6, 12))
        assert await store.list_all() == []

    asyncio.run(run_with_store(run))


def test_calendar_failure_never_blocks_store_write():
    async def run(store):
        calendar = FakeCalendar(fail=True)
        service = _service(store, calendar)
        task = await service.add_task("Still saved", date(2025, 6, 12))
        await service.drain()
        assert (await store.get(task.id)) is not None
        assert calendar.events == []

        await service.delete_task(task.id)
        await service.drain()
        assert await store.list_all() == []

    asyncio.run(run_with_store(run))


def test_toggle_importance_replaces_calendar_event_title():
    async def run(store):
        calendar = FakeCalendar()
        service = _service(store, calendar)
        task = await service.add_task("Report", date(2025, 6, 12))
        await service.drain()

        toggled = await service.toggle_importance(task.id)
        await service.drain()
        assert toggled.is_important is True
        assert (await store.get(task.id)).is_important is True
        assert calendar.titles == ["⭐ Report"]

        await service.toggle_importance(task.id)
        await service.drain()
        assert calendar.titles == ["Report"]

    asyncio.run(run_with_store(run))


def test_delete_removes_task_and_event():
    async def run(store):
        calendar = FakeCalendar()
        service = _service(store, calendar)
        task = await service.add_task("Gone", date(2025, 6, 12))
        await service.drain()
        deleted = await service.delete_task(task.id)
        await service.drain()
        assert deleted == task
        assert await store.list_all() == []
        assert calendar.events == []

    asyncio.run(run_with_store(run))


def test_mutations_on_missing_task_return_none():
    async def run(store):
        service = _service(store)
        assert await service.set_completed(404, True) is None
        assert await service.toggle_importance(404) is None
        assert await service.reschedule(404, date(2025, 6, 12)) is None
        assert await service.delete_task(404) is None

    asyncio.run(run_with_store(run))


def test_reschedule_moves_due_date_and_event():
    async def run(store):
        calendar = FakeCalendar()
        service = _service(store, calendar)
        task = await service.add_task("Move me", date(2025, 6, 12))
        await service.drain()
        moved = await service.reschedule(task.id, date(2025, 6, 20))
        await service.drain()
        assert moved.due_date == "June 20, 2025"
        assert (await store.get(task.id)).due_date == "June 20, 2025"
        assert len(calendar.events) == 1
        assert calendar.events[0].start_ms > 0

    asyncio.run(run_with_store(run))


def test_overdue_flag_is_stale_until_view_entry():
    async def run(store):
        service = _service(store)
        task = await service.add_task("Late", date(2025, 6, 9))
        assert (await store.get(task.id)).is_overdue is False

        await service.plan_view(PlanFilter.OUT_OF_DATE)
        assert (await store.get(task.id)).is_overdue is False

        await service.today_view()
        assert (await store.get(task.id)).is_overdue is True

        await service.set_completed(task.id, True)
        await service.important_view()
        assert (await store.get(task.id)).is_overdue is False

    asyncio.run(run_with_store(run))


def test_refresh_overdue_counts_updates():
    async def run(store):
        await store.insert(make_task(0, due_date="June 1, 2025"))
        await store.insert(make_task(0, due_date="June 30, 2025"))
        await store.insert(make_task(0, due_date="garbage", overdue=True))
        service = _service(store)
        assert await service.refresh_overdue() == 1
        assert await service.refresh_overdue() == 0

    asyncio.run(run_with_store(run))


def test_prune_stale_deletes_tasks_older_than_retention():
    async def run(store):
        calendar = FakeCalendar()
        service = _service(store, calendar)
        old = await service.add_task("Ancient", date(2025, 5, 1))
        kept = await service.add_task("Recent", date(2025, 6, 1))
        await store.insert(make_task(0, "No date", due_date="n/a"))
        await service.drain()

        assert await service.prune_stale() == 1
        await service.drain()
        ids = [t.id for t in await store.list_all()]
        assert old.id not in ids
        assert kept.id in ids
        assert calendar.titles == ["Recent"]

    asyncio.run(run_with_store(run))


def test_all_view_is_read_only_and_searches_recent_tasks():
    async def run(store):
        service = _service(store)
        await service.add_task("Ancient rent", date(2025, 5, 1))
        await service.add_task("Pay rent", date(2025, 6, 10))
        await service.add_task("Walk dog", date(2025, 6, 11))
        await store.insert(make_task(0, "Rent someday", due_date="someday"))

        view = await service.all_view("RENT")
        assert [t.name for t in view.tasks] == ["Pay rent"]
        assert [t.name for t in view.invalid_due_date] == ["Rent someday"]
        # nothing was deleted by reading
        assert len(await store.list_all()) == 4

    asyncio.run(run_with_store(run))


def test_restore_after_delete_keeps_id():
    async def run(store):
        calendar = FakeCalendar()
        clock = FixedClock()
        service = TaskService(store=store, clock=clock, mirror=CalendarMirror(calendar))
        undo = UndoBuffer(clock, window_seconds=10)

        task = await service.add_task("Oops", date(2025, 6, 12))
        await service.delete_task(task.id)
        undo.offer(task, position=0)

        snapshot = undo.take(task.id)
        restored = await service.restore(snapshot)
        await service.drain()
        assert restored.id == task.id
        assert await store.get(task.id) == task
        assert calendar.titles == ["Oops"]

    asyncio.run(run_with_store(run))


def test_retention_days_must_be_positive():
    async def run(store):
        with pytest.raises(ValidationError):
            _service(store, retention_days=0)

    asyncio.run(run_with_store(run))


def _after_snapshot(store, action):
    """Make the next list_all() run `action` once the snapshot has been read."""
    real_list_all = store.list_all

    async def list_all():
        tasks = await real_list_all()
        store.list_all = real_list_all
        await action()
        return tasks

    store.list_all = list_all


def test_refresh_overdue_keeps_completion_made_after_snapshot():
    async def run(store):
        service = _service(store)
        task = await service.add_task("Late", date(2025, 6, 9))
        _after_snapshot(store, lambda: service.set_completed(task.id, True))

        assert await service.refresh_overdue() == 0
        stored = await store.get(task.id)
        assert stored.is_completed is True
        assert stored.is_overdue is False

    asyncio.run(run_with_store(run))


def test_refresh_overdue_keeps_reschedule_made_after_snapshot():
    async def run(store):
        service = _service(store)
        task = await service.add_task("Late", date(2025, 6, 9))
        _after_snapshot(store, lambda: service.reschedule(task.id, date(2025, 6, 20)))

        assert await service.refresh_overdue() == 0
        stored = await store.get(task.id)
        assert stored.due_date == "June 20, 2025"
        assert stored.is_overdue is False

    asyncio.run(run_with_store(run))


def test_prune_stale_skips_task_rescheduled_after_snapshot():
    async def run(store):
        calendar = FakeCalendar()
        service = _service(store, calendar)
        task = await service.add_task("Ancient", date(2025, 5, 1))
        await service.drain()
        _after_snapshot(store, lambda: service.reschedule(task.id, date(2025, 6, 12)))

        assert await service.prune_stale() == 0
        await service.drain()
        assert (await store.get(task.id)).due_date == "June 12, 2025"
        assert len(calendar.events) == 1

    asyncio.run(run_with_store(run))
