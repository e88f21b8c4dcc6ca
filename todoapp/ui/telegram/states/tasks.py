from aiogram.fsm.state import StatesGroup, State


class TasksFlow(StatesGroup):
    # add flow
    add_name = State()
    add_due = State()
    add_important = State()

    # all-tasks search
    search = State()
