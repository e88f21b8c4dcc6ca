"""
Tests for overdue reconciliation (pure functions, no DB).
"""
from __future__ import annotations

from datetime import date

from fakes import make_task
from todoapp.domain.tasks.status import compute_overdue, is_overdue_now, reconcile_overdue

TODAY = date(2025, 6, 10)


def test_task_due_yesterday_becomes_overdue():
    task = make_task(1, due_date="June 9, 2025")
    changed = reconcile_overdue([task], TODAY)
    assert len(changed) == 1
    assert changed[0].id == 1
    assert changed[0].is_overdue is True


def test_task_due_today_is_not_overdue():
    assert compute_overdue(make_task(1, due_date="June 10, 2025"), TODAY) is False


def test_completed_task_is_never_overdue():
    task = make_task(1, due_date="June 9, 2025", completed=True, overdue=True)
    changed = reconcile_overdue([task], TODAY)
    assert [t.is_overdue for t in changed] == [False]


def test_unparseable_due_date_is_skipped_and_keeps_stale_flag():
    task = make_task(1, due_date="not a date", overdue=True)
    assert compute_overdue(task, TODAY) is None
    assert reconcile_overdue([task], TODAY) == []


def test_reconcile_returns_only_changed_tasks():
    correct = make_task(1, due_date="June 1, 2025", overdue=True)
    stale = make_task(2, due_date="June 20, 2025", overdue=True)
    changed = reconcile_overdue([correct, stale], TODAY)
    assert [(t.id, t.is_overdue) for t in changed] == [(2, False)]


def test_after_reconcile_flags_match_definition():
    tasks = [
        make_task(1, due_date="June 9, 2025"),
        make_task(2, due_date="June 10, 2025", overdue=True),
        make_task(3, due_date="May 1, 2025", completed=True, overdue=True),
        make_task(4, due_date="July 1, 2025"),
    ]
    fixed = {t.id: t for t in reconcile_overdue(tasks, TODAY)}
    for task in tasks:
        result = fixed.get(task.id, task)
        assert result.is_overdue == is_overdue_now(task, TODAY)
