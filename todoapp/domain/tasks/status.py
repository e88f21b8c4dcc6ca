"""
Overdue reconciliation.

is_overdue is stored on each task but only recomputed when a reconciliation
pass runs (view entry, maintenance loop). Between passes the flag can be stale.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Iterable, Optional

from todoapp.domain.tasks.dates import parse_due_date
from todoapp.domain.tasks.models import Task


def compute_overdue(task: Task, today: date) -> Optional[bool]:
    """Overdue iff not completed and the due day is strictly before today. None if the date does not parse."""
    due = parse_due_date(task.due_date)
    if due is None:
        return None
    return (not task.is_completed) and due < today


def is_overdue_now(task: Task, today: date) -> bool:
    # computed on read, ignores the stored flag
    return bool(compute_overdue(task, today))


def reconcile_overdue(tasks: Iterable[Task], today: date) -> list[Task]:
    """Return the tasks whose stored flag is wrong, with the corrected flag applied."""
    changed: list[Task] = []
    for task in tasks:
        expected = compute_overdue(task, today)
        if expected is None:
            continue
        if task.is_overdue != expected:
            changed.append(replace(task, is_overdue=expected))
    return changed
