"""
Completion report: status buckets and completion percentage.

A report is computed from one snapshot plus the selected DateFilter. The same
date-filtered set feeds both the three status entries and the percentage, so
the entry totals always add up to the denominator.
"""
from __future__ import annotations

import asyncio
import contextlib
from datetime import date, timedelta
from typing import AsyncIterator, Iterable

from todoapp.domain.tasks.dates import parse_due_date
from todoapp.domain.tasks.models import DateFilter, Task, TaskReport, TaskStatusSummaryEntry
from todoapp.domain.tasks.ports import Clock, TaskStore

STATUS_UPCOMING = "Upcoming Tasks"
STATUS_OVERDUE = "Overdue Tasks"
STATUS_COMPLETED = "Completed Tasks"


def filter_by_date_range(tasks: Iterable[Task], date_filter: DateFilter, today: date) -> list[Task]:
    """
    Keep tasks due within [today - N weeks, today]; ALL keeps every task with a
    parseable due date.
    """
    start = today - timedelta(weeks=date_filter.weeks) if date_filter is not DateFilter.ALL else None
    out: list[Task] = []
    for task in tasks:
        due = parse_due_date(task.due_date)
        if due is None:
            continue
        if start is not None and not (start <= due <= today):
            continue
        out.append(task)
    return out


def _entry(name: str, bucket: list[Task]) -> TaskStatusSummaryEntry:
    return TaskStatusSummaryEntry(
        status_name=name,
        total_tasks=len(bucket),
        important_tasks=sum(1 for t in bucket if t.is_important),
    )


def summarize(tasks: Iterable[Task], date_filter: DateFilter, today: date) -> TaskReport:
    relevant = filter_by_date_range(tasks, date_filter, today)

    upcoming: list[Task] = []
    overdue: list[Task] = []
    completed: list[Task] = []
    for task in relevant:
        if task.is_completed:
            completed.append(task)
        elif parse_due_date(task.due_date) < today:
            overdue.append(task)
        else:
            upcoming.append(task)

    percentage = len(completed) / len(relevant) * 100 if relevant else 0.0
    return TaskReport(
        entries=[
            _entry(STATUS_UPCOMING, upcoming),
            _entry(STATUS_OVERDUE, overdue),
            _entry(STATUS_COMPLETED, completed),
        ],
        completion_percentage=percentage,
    )


def completion_advice(percentage: float) -> str:
    if percentage < 50:
        return (
            "Keep pushing! Every task completed is a step forward. "
            "Try breaking down larger tasks into smaller, more manageable ones."
        )
    if percentage < 76:
        return (
            "Good progress! You're getting things done. "
            "Maintain your momentum and focus on your priorities to reach your goals."
        )
    return "Excellent work! You're on top of your tasks. Keep up the great habits and enjoy your accomplishments!"


class ReportModel:
    """
    Selected DateFilter plus a live report.

    watch() yields a fresh TaskReport for the current snapshot, then again each
    time the store emits or set_filter() changes the selection.
    """

    def __init__(self, store: TaskStore, clock: Clock, date_filter: DateFilter = DateFilter.ALL) -> None:
        self._store = store
        self._clock = clock
        self._filter = date_filter
        self._listeners: set[asyncio.Event] = set()

    @property
    def date_filter(self) -> DateFilter:
        return self._filter

    def set_filter(self, date_filter: DateFilter) -> None:
        if date_filter is self._filter:
            return
        self._filter = date_filter
        for event in self._listeners:
            event.set()

    async def current(self) -> TaskReport:
        tasks = await self._store.list_all()
        return summarize(tasks, self._filter, self._clock.now().date())

    async def watch(self) -> AsyncIterator[TaskReport]:
        filter_changed = asyncio.Event()
        self._listeners.add(filter_changed)
        snapshots = self._store.watch()
        next_snapshot: asyncio.Future = asyncio.ensure_future(snapshots.__anext__())
        filter_wait: asyncio.Future = asyncio.ensure_future(filter_changed.wait())
        try:
            tasks = await next_snapshot
            next_snapshot = asyncio.ensure_future(snapshots.__anext__())
            yield summarize(tasks, self._filter, self._clock.now().date())

            while True:
                done, _ = await asyncio.wait(
                    {next_snapshot, filter_wait}, return_when=asyncio.FIRST_COMPLETED
                )
                if next_snapshot in done:
                    try:
                        tasks = next_snapshot.result()
                    except StopAsyncIteration:
                        return
                    next_snapshot = asyncio.ensure_future(snapshots.__anext__())
                if filter_wait in done:
                    filter_changed.clear()
                    filter_wait = asyncio.ensure_future(filter_changed.wait())
                yield summarize(tasks, self._filter, self._clock.now().date())
        finally:
            self._listeners.discard(filter_changed)
            filter_wait.cancel()
            next_snapshot.cancel()
            with contextlib.suppress(asyncio.CancelledError, StopAsyncIteration):
                await next_snapshot
            await snapshots.aclose()
