from __future__ import annotations

from aiogram.types import ReplyKeyboardMarkup
from aiogram.utils.keyboard import ReplyKeyboardBuilder

BTN_TODAY = "My Day"
BTN_IMPORTANT = "Important"
BTN_PLAN = "Plan"
BTN_ALL = "All tasks"
BTN_REPORT = "Report"
BTN_ADD = "Add task"


def main_menu_kb() -> ReplyKeyboardMarkup:
    kb = ReplyKeyboardBuilder()

    kb.button(text=BTN_TODAY)
    kb.button(text=BTN_IMPORTANT)
    kb.button(text=BTN_PLAN)
    kb.button(text=BTN_ALL)
    kb.button(text=BTN_REPORT)
    kb.button(text=BTN_ADD)

    # 3x2 grid
    kb.adjust(3, 3)

    return kb.as_markup(resize_keyboard=True, one_time_keyboard=False)


MENU_BUTTONS = {BTN_TODAY, BTN_IMPORTANT, BTN_PLAN, BTN_ALL, BTN_REPORT, BTN_ADD}
