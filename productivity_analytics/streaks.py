"""Consecutive-day streaks with a one-day grace period."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from productivity_analytics.clock import Clock
from productivity_analytics.schema import Task

_ONE_DAY = timedelta(days=1)


def current_streak(dates: Iterable[Optional[date]], clock: Clock) -> int:
    """Count consecutive completion days ending today, or yesterday if today is empty.

    A day without a completion yet does not reset the streak until it is over,
    so a run ending yesterday still counts.
    """

    days = {d for d in dates if d is not None}
    if not days:
        return 0

    today = clock.today()
    if today in days:
        cursor = today
    elif today - _ONE_DAY in days:
        cursor = today - _ONE_DAY
    else:
        return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= _ONE_DAY
    return streak


def longest_streak(dates: Iterable[Optional[date]]) -> int:
    """Length of the longest run of consecutive days anywhere in ``dates``."""

    longest = 0
    run = 0
    last_day: Optional[date] = None
    for day in sorted({d for d in dates if d is not None}):
        if last_day is not None and day == last_day + _ONE_DAY:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last_day = day
    return longest


def completion_dates(tasks: Iterable[Task], clock: Clock) -> set[date]:
    """Calendar dates of completed tasks; invalid ``completed_at`` values are skipped."""

    days = set()
    for task in tasks:
        if not task.completed:
            continue
        day = clock.bucket(task.completed_at)
        if day is not None:
            days.add(day)
    return days
