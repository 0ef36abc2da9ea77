"""Completion progress series for charts."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from productivity_analytics.clock import Clock
from productivity_analytics.schema import Task, normalize_category


def _percentage(completed: int, total: int) -> int:
    return round(completed / total * 100) if total else 0


def _point(label: str, completed: int, total: int) -> dict:
    return {"label": label, "completed": completed, "total": total, "percentage": _percentage(completed, total)}


def daily_progress(tasks: Iterable[Task], clock: Clock, days: int = 7) -> list[dict]:
    """Per-day points for the last ``days`` days, oldest first.

    A task belongs to a day when it was created or completed on it; it counts as
    completed only on the day it was completed.
    """

    tasks = list(tasks)
    created = [clock.bucket(task.created_at) for task in tasks]
    done = [clock.bucket(task.completed_at) if task.completed else None for task in tasks]

    points = []
    for offset in range(days - 1, -1, -1):
        day = clock.days_ago(offset)
        total = sum(1 for c, d in zip(created, done) if c == day or d == day)
        completed = sum(1 for d in done if d == day)
        points.append(_point(day.isoformat(), completed, total))
    return points


def _week_start(day: date) -> date:
    # Weeks start on Sunday.
    return day - timedelta(days=(day.weekday() + 1) % 7)


def weekly_progress(tasks: Iterable[Task], clock: Clock, weeks: int = 4) -> list[dict]:
    """Points for the last ``weeks`` calendar weeks, grouped by creation date."""

    created = [(clock.bucket(task.created_at), task.completed) for task in tasks]
    current = _week_start(clock.today())
    points = []
    for index in range(weeks - 1, -1, -1):
        start = current - timedelta(weeks=index)
        end = start + timedelta(days=6)
        in_week = [done for day, done in created if day is not None and start <= day <= end]
        points.append(_point(f"Week {weeks - index}", sum(1 for done in in_week if done), len(in_week)))
    return points


def _shift_month(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def monthly_progress(tasks: Iterable[Task], clock: Clock, months: int = 6) -> list[dict]:
    """Points for the last ``months`` calendar months, grouped by creation date."""

    tasks = list(tasks)
    created = [(clock.bucket(task.created_at), task.completed) for task in tasks]
    points = []
    for index in range(months - 1, -1, -1):
        month = _shift_month(clock.today(), index)
        in_month = [done for day, done in created if day and (day.year, day.month) == (month.year, month.month)]
        points.append(_point(month.strftime("%Y-%m"), sum(1 for done in in_month if done), len(in_month)))
    return points


def category_breakdown(tasks: Iterable[Task]) -> list[dict]:
    """Completed/total per category in first-seen order."""

    totals: dict[str, int] = {}
    done: dict[str, int] = {}
    for task in tasks:
        category = normalize_category(task.category)
        totals[category] = totals.get(category, 0) + 1
        if task.completed:
            done[category] = done.get(category, 0) + 1
    return [
        {
            "category": category,
            "completed": done.get(category, 0),
            "total": total,
            "percentage": _percentage(done.get(category, 0), total),
        }
        for category, total in totals.items()
    ]
