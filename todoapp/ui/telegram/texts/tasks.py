from __future__ import annotations

from datetime import date
from html import escape

from todoapp.domain.tasks.dates import WEEKDAY_NAMES, format_due_date
from todoapp.domain.tasks.models import DateFilter, PlanFilter, Task, TaskReport
from todoapp.domain.tasks.report import completion_advice

MENU_PROMPT = "Choose a view."
ASK_NAME = "What needs doing? (one message)"
ASK_DUE = "Due date? (today, tomorrow, 2025-06-09, 9.6.2025 or June 9, 2025)"
ASK_IMPORTANT = "Mark as important?"
ASK_SEARCH = "Send a search word, or /all to clear the search."
BAD_DATE = "Could not read that date. Try again, e.g. 2025-06-09."
TASK_ADDED = "Task added."
TASK_DELETED = "Task deleted."
TASK_RESTORED = "Task restored."
TASK_GONE = "That task no longer exists."
UNDO_EXPIRED = "Too late to undo."
CANCELLED = "Cancelled."
HELP = (
    "/today - tasks due today\n"
    "/important - starred tasks\n"
    "/plan - this week, tomorrow, out of date\n"
    "/all [word] - everything from the last two weeks\n"
    "/report - completion report\n"
    "/add - new task\n"
    "/due <id> <date> - move a task\n"
    "/cancel - stop the current step"
)

VIEW_TITLES = {
    "today": "My Day",
    "important": "Important",
    "all": "All tasks",
}

PLAN_TITLES = {
    PlanFilter.THIS_WEEK: "This Week",
    PlanFilter.TOMORROW: "Tomorrow",
    PlanFilter.OUT_OF_DATE: "Out of date",
}

PLAN_EMPTY = {
    PlanFilter.THIS_WEEK: "No tasks for this week!",
    PlanFilter.TOMORROW: "No tasks for tomorrow!",
    PlanFilter.OUT_OF_DATE: "No overdue tasks!",
}

REPORT_FILTER_TITLES = {
    DateFilter.ALL: "All",
    DateFilter.LAST_1_WEEK: "Last 1 week",
    DateFilter.LAST_2_WEEKS: "Last 2 weeks",
}


def render_task_line(task: Task) -> str:
    box = "✅" if task.is_completed else "⬜"
    star = " ⭐" if task.is_important else ""
    overdue = " ⚠️ overdue" if task.is_overdue else ""
    return f"{box} <b>{escape(task.name)}</b>{star}\n    #{task.id} · {escape(task.due_date)}{overdue}"


def render_task_list(title: str, tasks: list[Task], empty_text: str = "Nothing here.") -> str:
    lines = [f"<b>{escape(title)}</b>"]
    if not tasks:
        lines.append(empty_text)
    else:
        lines.extend(render_task_line(t) for t in tasks)
    return "\n".join(lines)


def render_today_header(today: date) -> str:
    return f"{WEEKDAY_NAMES[today.weekday()]}, {format_due_date(today)}"


def render_invalid_dates(tasks: list[Task]) -> str:
    if not tasks:
        return ""
    lines = ["", "<b>Unreadable due date</b>"]
    lines.extend(f"❔ {escape(t.name)} (#{t.id}: {escape(t.due_date)})" for t in tasks)
    return "\n".join(lines)


def render_report(report: TaskReport, date_filter: DateFilter) -> str:
    lines = [f"<b>Task Status Overview</b> ({REPORT_FILTER_TITLES[date_filter]})", ""]
    for entry in report.entries:
        lines.append(f"{entry.status_name}: {entry.total_tasks} (important {entry.important_tasks})")
    lines.append("")
    lines.append(f"Completion: {report.completion_percentage:.0f}%")
    lines.append(completion_advice(report.completion_percentage))
    return "\n".join(lines)
