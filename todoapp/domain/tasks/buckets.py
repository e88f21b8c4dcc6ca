"""
Named views over a task snapshot.

All functions are pure and keep the store's ordering. Date predicates work on
calendar days; a task whose due date does not parse never matches one of them.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Iterable, Optional

from todoapp.domain.tasks.dates import end_of_week, parse_due_date
from todoapp.domain.tasks.models import PlanFilter, Task

DEFAULT_RETENTION_DAYS = 14

DayPredicate = Callable[[Task, date], bool]


def _by_due_day(tasks: Iterable[Task], keep: DayPredicate) -> list[Task]:
    out: list[Task] = []
    for task in tasks:
        due = parse_due_date(task.due_date)
        if due is None:
            continue
        if keep(task, due):
            out.append(task)
    return out


def bucket_today(tasks: Iterable[Task], today: date) -> list[Task]:
    return _by_due_day(tasks, lambda t, due: due == today)


def bucket_this_week(tasks: Iterable[Task], today: date) -> list[Task]:
    last = end_of_week(today)
    return _by_due_day(tasks, lambda t, due: not t.is_completed and today <= due <= last)


def bucket_tomorrow(tasks: Iterable[Task], today: date) -> list[Task]:
    tomorrow = today + timedelta(days=1)
    return _by_due_day(tasks, lambda t, due: not t.is_completed and due == tomorrow)


def bucket_out_of_date(tasks: Iterable[Task], today: date) -> list[Task]:
    return _by_due_day(tasks, lambda t, due: not t.is_completed and due < today)


def bucket_important(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if t.is_important]


def bucket_recent(tasks: Iterable[Task], today: date, days: int = DEFAULT_RETENTION_DAYS) -> list[Task]:
    """Tasks due no earlier than `days` days ago (the all-tasks view)."""
    cutoff = today - timedelta(days=days)
    return _by_due_day(tasks, lambda t, due: due >= cutoff)


def bucket_stale(tasks: Iterable[Task], today: date, days: int = DEFAULT_RETENTION_DAYS) -> list[Task]:
    """Tasks due more than `days` days ago; candidates for prune_stale()."""
    cutoff = today - timedelta(days=days)
    return _by_due_day(tasks, lambda t, due: due < cutoff)


def bucket_invalid_due_date(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if parse_due_date(t.due_date) is None]


def search(tasks: Iterable[Task], query: Optional[str]) -> list[Task]:
    needle = (query or "").casefold()
    if not needle:
        return list(tasks)
    return [t for t in tasks if needle in t.name.casefold()]


_PLAN_BUCKETS = {
    PlanFilter.THIS_WEEK: bucket_this_week,
    PlanFilter.TOMORROW: bucket_tomorrow,
    PlanFilter.OUT_OF_DATE: bucket_out_of_date,
}


def plan_view(tasks: Iterable[Task], today: date, plan_filter: PlanFilter) -> list[Task]:
    return _PLAN_BUCKETS[plan_filter](tasks, today)
