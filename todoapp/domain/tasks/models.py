from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Task:
    id: int  # 0 until the store assigns one
    name: str
    creation_date: str  # epoch milliseconds as text
    due_date: str  # display format, e.g. "June 9, 2025"
    is_important: bool = False
    is_completed: bool = False
    is_overdue: bool = False  # cached, see TaskService.refresh_overdue


@dataclass(frozen=True)
class DeletedTaskSnapshot:
    task: Task
    position: int
    deleted_at: datetime


@dataclass(frozen=True)
class TaskStatusSummaryEntry:
    status_name: str
    total_tasks: int
    important_tasks: int


@dataclass(frozen=True)
class TaskReport:
    entries: list[TaskStatusSummaryEntry]
    completion_percentage: float


class PlanFilter(str, Enum):
    THIS_WEEK = "this_week"
    TOMORROW = "tomorrow"
    OUT_OF_DATE = "out_of_date"


class DateFilter(str, Enum):
    ALL = "all"
    LAST_1_WEEK = "last_1_week"
    LAST_2_WEEKS = "last_2_weeks"

    @property
    def weeks(self) -> int:
        return {"all": 0, "last_1_week": 1, "last_2_weeks": 2}[self.value]
