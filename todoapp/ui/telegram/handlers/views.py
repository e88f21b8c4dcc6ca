from __future__ import annotations

import logging

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from todoapp.domain.tasks.models import PlanFilter
from todoapp.domain.tasks.service import TaskService
from todoapp.ui.telegram.keyboards.common import BTN_ALL, BTN_IMPORTANT, BTN_PLAN, BTN_TODAY, MENU_BUTTONS
from todoapp.ui.telegram.keyboards.tasks import plan_view_kb, tasks_list_kb
from todoapp.ui.telegram.session import ChatSession, SessionRegistry
from todoapp.ui.telegram.states.tasks import TasksFlow
from todoapp.ui.telegram.texts.tasks import (
    ASK_SEARCH,
    PLAN_EMPTY,
    PLAN_TITLES,
    VIEW_TITLES,
    render_invalid_dates,
    render_task_list,
    render_today_header,
)

logger = logging.getLogger(__name__)

router = Router()


async def view_tasks(view: str, task_service: TaskService, session: ChatSession):
    """Tasks currently shown in a view, in display order."""
    if view == "today":
        return await task_service.today_view()
    if view == "important":
        return await task_service.important_view()
    if view == "plan":
        return await task_service.plan_view(session.plan_filter)
    return (await task_service.all_view(session.search_query)).tasks


async def render_view(view: str, task_service: TaskService, session: ChatSession) -> tuple[str, InlineKeyboardMarkup]:
    if view == "today":
        tasks = await task_service.today_view()
        title = f"{VIEW_TITLES['today']} · {render_today_header(task_service.today())}"
        return render_task_list(title, tasks, "No tasks for today."), tasks_list_kb(tasks, view)

    if view == "important":
        tasks = await task_service.important_view()
        return render_task_list(VIEW_TITLES["important"], tasks, "No important tasks."), tasks_list_kb(tasks, view)

    if view == "plan":
        tasks = await task_service.plan_view(session.plan_filter)
        text = render_task_list(PLAN_TITLES[session.plan_filter], tasks, PLAN_EMPTY[session.plan_filter])
        return text, plan_view_kb(tasks, session.plan_filter)

    result = await task_service.all_view(session.search_query)
    title = VIEW_TITLES["all"]
    if session.search_query:
        title = f"{title} · “{session.search_query}”"
    text = render_task_list(title, result.tasks, "No tasks found.") + render_invalid_dates(result.invalid_due_date)
    return text, tasks_list_kb(result.tasks, "all")


async def send_view(message: Message, view: str, task_service: TaskService, session: ChatSession) -> None:
    text, markup = await render_view(view, task_service, session)
    await message.answer(text, reply_markup=markup)


async def refresh_view(message: Message, view: str, task_service: TaskService, session: ChatSession) -> None:
    """Edit a view message in place; fall back to a new message when Telegram refuses the edit."""
    text, markup = await render_view(view, task_service, session)
    try:
        await message.edit_text(text, reply_markup=markup)
    except TelegramBadRequest as e:
        if "message is not modified" in str(e).lower():
            return
        logger.debug("View edit failed, sending new message: %s", e)
        await message.answer(text, reply_markup=markup)


@router.message(Command("today"))
@router.message(F.text == BTN_TODAY)
async def today_cmd(message: Message, state: FSMContext, task_service: TaskService, sessions: SessionRegistry):
    await state.clear()
    await send_view(message, "today", task_service, sessions.get(message.chat.id))


@router.message(Command("important"))
@router.message(F.text == BTN_IMPORTANT)
async def important_cmd(message: Message, state: FSMContext, task_service: TaskService, sessions: SessionRegistry):
    await state.clear()
    await send_view(message, "important", task_service, sessions.get(message.chat.id))


@router.message(Command("plan"))
@router.message(F.text == BTN_PLAN)
async def plan_cmd(message: Message, state: FSMContext, task_service: TaskService, sessions: SessionRegistry):
    await state.clear()
    await send_view(message, "plan", task_service, sessions.get(message.chat.id))


@router.callback_query(F.data.startswith("plan:"))
async def plan_filter_cb(cb: CallbackQuery, task_service: TaskService, sessions: SessionRegistry):
    await cb.answer()
    try:
        selected = PlanFilter(cb.data.split(":", 1)[1])
    except ValueError:
        return
    session = sessions.get(cb.message.chat.id)
    session.plan_filter = selected
    await refresh_view(cb.message, "plan", task_service, session)


@router.message(Command("all"))
@router.message(F.text == BTN_ALL)
async def all_cmd(
    message: Message,
    state: FSMContext,
    task_service: TaskService,
    sessions: SessionRegistry,
    command: CommandObject | None = None,
):
    await state.clear()
    session = sessions.get(message.chat.id)
    session.search_query = (command.args or "").strip() if command else ""

    # retention runs as its own step; the view itself never deletes
    await task_service.prune_stale()
    await send_view(message, "all", task_service, session)
    if not session.search_query:
        await state.set_state(TasksFlow.search)
        await message.answer(ASK_SEARCH)


@router.message(TasksFlow.search, F.text, ~F.text.in_(MENU_BUTTONS), ~F.text.startswith("/"))
async def all_search(message: Message, task_service: TaskService, sessions: SessionRegistry):
    session = sessions.get(message.chat.id)
    session.search_query = message.text.strip()
    await send_view(message, "all", task_service, session)
