from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CalendarEvent:
    title: str
    start_ms: int  # UTC epoch milliseconds
    end_ms: int
    all_day: bool = True
    task_id: Optional[int] = None
