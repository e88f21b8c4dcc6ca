from __future__ import annotations

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from todoapp.domain.tasks.models import DateFilter, PlanFilter, Task
from todoapp.ui.telegram.texts.tasks import PLAN_TITLES, REPORT_FILTER_TITLES


def _task_buttons(kb: InlineKeyboardBuilder, tasks: list[Task], view: str) -> None:
    """
    Three buttons per task: done toggle, star toggle, delete.
    callback_data: t:<action>:<view>:<task_id>
    """
    for t in tasks:
        label = t.name if len(t.name) <= 30 else t.name[:29] + "…"
        kb.button(text=("✅ " if t.is_completed else "⬜ ") + label, callback_data=f"t:done:{view}:{t.id}")
        kb.button(text="⭐" if t.is_important else "☆", callback_data=f"t:star:{view}:{t.id}")
        kb.button(text="🗑️", callback_data=f"t:del:{view}:{t.id}")


def tasks_list_kb(tasks: list[Task], view: str) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    _task_buttons(kb, tasks, view)
    kb.adjust(3)
    return kb.as_markup()


def plan_view_kb(tasks: list[Task], selected: PlanFilter) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for f in PlanFilter:
        mark = "• " if f is selected else ""
        kb.button(text=f"{mark}{PLAN_TITLES[f]}", callback_data=f"plan:{f.value}")
    _task_buttons(kb, tasks, "plan")
    # filter row, then one row per task
    kb.adjust(3)
    return kb.as_markup()


def undo_kb(view: str, task_id: int) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="Undo", callback_data=f"t:undo:{view}:{task_id}")
    return kb.as_markup()


def important_choice_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="⭐ Important", callback_data="add:imp:1")
    kb.button(text="Normal", callback_data="add:imp:0")
    kb.button(text="Cancel", callback_data="cancel")
    kb.adjust(2, 1)
    return kb.as_markup()


def report_filter_kb(selected: DateFilter) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for f in DateFilter:
        mark = "• " if f is selected else ""
        kb.button(text=f"{mark}{REPORT_FILTER_TITLES[f]}", callback_data=f"rep:{f.value}")
    kb.adjust(3)
    return kb.as_markup()
