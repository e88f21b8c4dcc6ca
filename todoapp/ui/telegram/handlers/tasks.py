from __future__ import annotations

import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from todoapp.domain.common.errors import ValidationError
from todoapp.domain.tasks.dates import format_due_date, parse_user_date
from todoapp.domain.tasks.rules import validate_name
from todoapp.domain.tasks.service import TaskService
from todoapp.ui.telegram.handlers.views import refresh_view, view_tasks
from todoapp.ui.telegram.keyboards.common import BTN_ADD, MENU_BUTTONS, main_menu_kb
from todoapp.ui.telegram.keyboards.tasks import important_choice_kb, undo_kb
from todoapp.ui.telegram.session import SessionRegistry
from todoapp.ui.telegram.states.tasks import TasksFlow
from todoapp.ui.telegram.texts.tasks import (
    ASK_DUE,
    ASK_IMPORTANT,
    ASK_NAME,
    BAD_DATE,
    TASK_ADDED,
    TASK_DELETED,
    TASK_GONE,
    TASK_RESTORED,
    UNDO_EXPIRED,
)

logger = logging.getLogger(__name__)

router = Router()

VIEWS = {"today", "important", "plan", "all"}


def _parse_task_cb(data: str) -> tuple[str, str, int] | None:
    # t:<action>:<view>:<task_id>
    parts = (data or "").split(":")
    if len(parts) != 4 or parts[2] not in VIEWS:
        return None
    try:
        return parts[1], parts[2], int(parts[3])
    except ValueError:
        return None


# --- add flow ---


@router.message(Command("add"))
@router.message(F.text == BTN_ADD)
async def add_start(message: Message, state: FSMContext):
    await state.clear()
    await state.set_state(TasksFlow.add_name)
    await message.answer(ASK_NAME, reply_markup=main_menu_kb())


@router.message(TasksFlow.add_name, F.text, ~F.text.in_(MENU_BUTTONS), ~F.text.startswith("/"))
async def add_name(message: Message, state: FSMContext):
    try:
        name = validate_name(message.text)
    except ValidationError as e:
        await message.answer(str(e))
        return
    await state.update_data(name=name)
    await state.set_state(TasksFlow.add_due)
    await message.answer(ASK_DUE)


@router.message(TasksFlow.add_due, F.text, ~F.text.in_(MENU_BUTTONS), ~F.text.startswith("/"))
async def add_due(message: Message, state: FSMContext, task_service: TaskService):
    due = parse_user_date(message.text, task_service.today())
    if due is None:
        await message.answer(BAD_DATE)
        return
    await state.update_data(due=due.isoformat())
    await state.set_state(TasksFlow.add_important)
    await message.answer(ASK_IMPORTANT, reply_markup=important_choice_kb())


@router.callback_query(TasksFlow.add_important, F.data.startswith("add:imp:"))
async def add_important(cb: CallbackQuery, state: FSMContext, task_service: TaskService):
    await cb.answer()
    data = await state.get_data()
    await state.clear()

    due = parse_user_date(data.get("due", ""), task_service.today())
    if due is None or not data.get("name"):
        await cb.message.answer(BAD_DATE, reply_markup=main_menu_kb())
        return

    try:
        task = await task_service.add_task(data["name"], due, is_important=cb.data.endswith(":1"))
    except ValidationError as e:
        await cb.message.answer(str(e), reply_markup=main_menu_kb())
        return
    await cb.message.answer(f"{TASK_ADDED} #{task.id} · {task.due_date}", reply_markup=main_menu_kb())


@router.message(Command("due"))
async def due_cmd(message: Message, command: CommandObject, task_service: TaskService):
    # /due <id> <date>
    parts = (command.args or "").split(maxsplit=1)
    if len(parts) != 2 or not parts[0].lstrip("#").isdigit():
        await message.answer("Usage: /due <id> <date>")
        return
    due = parse_user_date(parts[1], task_service.today())
    if due is None:
        await message.answer(BAD_DATE)
        return
    task = await task_service.reschedule(int(parts[0].lstrip("#")), due)
    if task is None:
        await message.answer(TASK_GONE)
        return
    await message.answer(f"#{task.id} moved to {format_due_date(due)}.")


# --- list buttons ---


@router.callback_query(F.data.startswith("t:done:"))
async def task_done(cb: CallbackQuery, task_service: TaskService, sessions: SessionRegistry):
    parsed = _parse_task_cb(cb.data)
    if parsed is None:
        await cb.answer()
        return
    _, view, task_id = parsed

    task = await task_service.store.get(task_id)
    if task is None:
        await cb.answer(TASK_GONE)
        return
    await task_service.set_completed(task_id, not task.is_completed)
    await cb.answer("Done!" if not task.is_completed else "Reopened.")
    await refresh_view(cb.message, view, task_service, sessions.get(cb.message.chat.id))


@router.callback_query(F.data.startswith("t:star:"))
async def task_star(cb: CallbackQuery, task_service: TaskService, sessions: SessionRegistry):
    parsed = _parse_task_cb(cb.data)
    if parsed is None:
        await cb.answer()
        return
    _, view, task_id = parsed

    task = await task_service.toggle_importance(task_id)
    if task is None:
        await cb.answer(TASK_GONE)
        return
    await cb.answer("Marked important." if task.is_important else "No longer important.")
    await refresh_view(cb.message, view, task_service, sessions.get(cb.message.chat.id))


@router.callback_query(F.data.startswith("t:del:"))
async def task_delete(cb: CallbackQuery, task_service: TaskService, sessions: SessionRegistry):
    parsed = _parse_task_cb(cb.data)
    if parsed is None:
        await cb.answer()
        return
    _, view, task_id = parsed
    session = sessions.get(cb.message.chat.id)

    shown = await view_tasks(view, task_service, session)
    position = next((i for i, t in enumerate(shown) if t.id == task_id), -1)

    task = await task_service.delete_task(task_id)
    if task is None:
        await cb.answer(TASK_GONE)
        return
    session.undo.offer(task, position)
    await cb.answer()
    await refresh_view(cb.message, view, task_service, session)
    await cb.message.answer(f"{TASK_DELETED} “{task.name}”", reply_markup=undo_kb(view, task.id))


@router.callback_query(F.data.startswith("t:undo:"))
async def task_undo(cb: CallbackQuery, task_service: TaskService, sessions: SessionRegistry):
    parsed = _parse_task_cb(cb.data)
    if parsed is None:
        await cb.answer()
        return
    _, view, task_id = parsed
    session = sessions.get(cb.message.chat.id)

    snapshot = session.undo.take(task_id)
    if snapshot is None:
        await cb.answer(UNDO_EXPIRED, show_alert=True)
        return
    await task_service.restore(snapshot)
    await cb.answer(TASK_RESTORED)
    await cb.message.edit_text(f"{TASK_RESTORED} “{snapshot.task.name}”")
    logger.info("Task restored: id=%s position=%s", snapshot.task.id, snapshot.position)
