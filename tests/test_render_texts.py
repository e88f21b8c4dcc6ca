"""
Telegram text rendering.
"""
from __future__ import annotations

from datetime import date

from fakes import make_task
from todoapp.domain.tasks.models import DateFilter, TaskReport, TaskStatusSummaryEntry
from todoapp.ui.telegram.texts.tasks import (
    render_invalid_dates,
    render_report,
    render_task_line,
    render_task_list,
    render_today_header,
)


def test_task_line_escapes_html_and_marks_flags():
    line = render_task_line(make_task(4, "<b>rent</b> & bills", important=True, overdue=True))
    assert "&lt;b&gt;rent&lt;/b&gt; &amp; bills" in line
    assert "⭐" in line
    assert "#4 · June 10, 2025" in line
    assert "overdue" in line


def test_task_list_empty_text():
    assert render_task_list("My Day", [], "No tasks for today.") == "<b>My Day</b>\nNo tasks for today."


def test_today_header():
    assert render_today_header(date(2025, 6, 10)) == "Tuesday, June 10, 2025"


def test_invalid_dates_section_only_when_present():
    assert render_invalid_dates([]) == ""
    text = render_invalid_dates([make_task(2, "Later", due_date="someday")])
    assert "Later (#2: someday)" in text


def test_report_lists_entries_and_advice():
    report = TaskReport(
        entries=[
            TaskStatusSummaryEntry("Upcoming Tasks", 2, 1),
            TaskStatusSummaryEntry("Overdue Tasks", 1, 0),
            TaskStatusSummaryEntry("Completed Tasks", 1, 1),
        ],
        completion_percentage=25.0,
    )
    text = render_report(report, DateFilter.LAST_1_WEEK)
    assert "(Last 1 week)" in text
    assert "Upcoming Tasks: 2 (important 1)" in text
    assert "Completion: 25%" in text
