from __future__ import annotations

import asyncio
import logging

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from todoapp.domain.tasks.models import DateFilter
from todoapp.ui.telegram.keyboards.common import BTN_REPORT
from todoapp.ui.telegram.keyboards.tasks import report_filter_kb
from todoapp.ui.telegram.session import ChatSession, SessionRegistry
from todoapp.ui.telegram.texts.tasks import render_report

logger = logging.getLogger(__name__)

router = Router()

# how long a report message keeps following store changes
LIVE_REPORT_SECONDS = 15 * 60


async def _follow_report(message: Message, session: ChatSession, first_text: str) -> None:
    last_text = first_text
    async for report in session.report.watch():
        text = render_report(report, session.report.date_filter)
        if text == last_text:
            continue
        last_text = text
        try:
            await message.edit_text(text, reply_markup=report_filter_kb(session.report.date_filter))
        except TelegramBadRequest as e:
            logger.debug("Report edit skipped: %s", e)


async def _run_live_report(message: Message, session: ChatSession, first_text: str) -> None:
    try:
        await asyncio.wait_for(_follow_report(message, session, first_text), timeout=LIVE_REPORT_SECONDS)
    except asyncio.TimeoutError:
        pass
    except Exception as e:
        logger.error(f"Live report stopped: {e}", exc_info=True)


@router.message(Command("report"))
@router.message(F.text == BTN_REPORT)
async def report_cmd(message: Message, state: FSMContext, sessions: SessionRegistry):
    await state.clear()
    session = sessions.get(message.chat.id)
    session.stop_live_report()

    report = await session.report.current()
    text = render_report(report, session.report.date_filter)
    sent = await message.answer(text, reply_markup=report_filter_kb(session.report.date_filter))
    session.live_report = asyncio.create_task(_run_live_report(sent, session, text))


@router.callback_query(F.data.startswith("rep:"))
async def report_filter_cb(cb: CallbackQuery, sessions: SessionRegistry):
    await cb.answer()
    try:
        selected = DateFilter(cb.data.split(":", 1)[1])
    except ValueError:
        return
    session = sessions.get(cb.message.chat.id)
    session.report.set_filter(selected)

    if session.live_report is not None and not session.live_report.done():
        # the live view re-renders on the filter change
        return

    report = await session.report.current()
    try:
        await cb.message.edit_text(render_report(report, selected), reply_markup=report_filter_kb(selected))
    except TelegramBadRequest as e:
        logger.debug("Report edit skipped: %s", e)
