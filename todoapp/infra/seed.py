"""
Sample tasks for a fresh database (SEED_DEMO_DATA=1).
"""
from __future__ import annotations

import logging
import random
from datetime import timedelta

from todoapp.domain.common.time import to_epoch_ms
from todoapp.domain.tasks.dates import format_due_date
from todoapp.domain.tasks.models import Task
from todoapp.domain.tasks.ports import Clock, TaskStore

logger = logging.getLogger(__name__)

# (name prefix, count, days from today, important, completed)
DEMO_GROUPS = [
    ("Upcoming Important Task", 5, 3, True, False),
    ("Upcoming Task", 10, 3, False, False),
    ("Overdue Important Task", 3, -5, True, False),
    ("Completed Important Task", 2, -2, True, True),
    ("Completed Task", 4, -2, False, True),
]


async def seed_demo_tasks(store: TaskStore, clock: Clock, rng: random.Random | None = None) -> int:
    """Insert the demo set when the store is empty. Returns the number of inserted tasks."""
    if await store.list_all():
        return 0

    rng = rng or random.Random()
    now = clock.now()
    today = now.date()
    current_ms = to_epoch_ms(now)

    inserted = 0
    for prefix, count, offset_days, important, completed in DEMO_GROUPS:
        due = format_due_date(today + timedelta(days=offset_days))
        for i in range(1, count + 1):
            # distinct, strictly decreasing creation timestamps
            current_ms -= rng.randint(1000, 5000)
            await store.insert(
                Task(
                    id=0,
                    name=f"{prefix} {i}",
                    creation_date=str(current_ms),
                    due_date=due,
                    is_important=important,
                    is_completed=completed,
                )
            )
            inserted += 1

    logger.info("Seeded %d demo tasks", inserted)
    return inserted
