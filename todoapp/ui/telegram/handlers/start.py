from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from todoapp.ui.telegram.texts.tasks import HELP
from todoapp.ui.telegram.utils.navigation import go_to_main_menu

router = Router()


@router.message(CommandStart())
async def start_cmd(message: Message, state: FSMContext):
    await go_to_main_menu(message, state)
    await message.answer(HELP)


@router.message(Command("menu"))
async def menu_cmd(message: Message, state: FSMContext):
    await go_to_main_menu(message, state)


@router.message(Command("help"))
async def help_cmd(message: Message):
    await message.answer(HELP)
