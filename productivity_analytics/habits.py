"""Habit completion toggling and summary statistics."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional

from productivity_analytics.clock import Clock
from productivity_analytics.schema import Habit, HabitSummary
from productivity_analytics.streaks import current_streak, longest_streak

logger = logging.getLogger(__name__)


def habit_dates(habit: Habit, clock: Clock) -> set[date]:
    """Valid calendar dates on which ``habit`` was marked done."""

    completions = habit.completions
    if isinstance(completions, (str, bytes)) or not hasattr(completions, "__iter__"):
        if completions:
            logger.debug("Habit %s has non-iterable completions %r, treating as empty", habit.id, completions)
        return set()

    days = set()
    for value in completions:
        day = clock.bucket(value)
        if day is not None:
            days.add(day)
    return days


def toggle_completion(habit: Habit, day: date, clock: Optional[Clock] = None) -> Habit:
    """Return a copy of ``habit`` with ``day`` marked done, or unmarked if it already was."""

    clock = clock or Clock()
    days = habit_dates(habit, clock)
    if day in days:
        days.discard(day)
    else:
        days.add(day)
    return replace(habit, completions=frozenset(days))


def _target(habit: Habit) -> int:
    try:
        target = int(habit.target_frequency)
    except (TypeError, ValueError, OverflowError):
        return 7
    return target if target > 0 else 7


def _habit_stats(habit: Habit, clock: Clock, window_days: int) -> tuple[bool, int, int, float]:
    days = habit_dates(habit, clock)
    recent = sum(1 for day in days if clock.within_last(day, window_days))
    return (
        clock.today() in days,
        current_streak(days, clock),
        longest_streak(days),
        min(100.0, recent / _target(habit) * 100.0),
    )


def summarize_habits(habits: Iterable[Habit], clock: Clock, window_days: int = 7) -> HabitSummary:
    habits = [habit for habit in habits or () if isinstance(habit, Habit)]
    if not habits:
        return HabitSummary()

    streaks: dict[str, int] = {}
    attainment: dict[str, float] = {}
    active = 0
    completed_today = 0
    best_longest = 0

    for habit in habits:
        try:
            done_today, streak, longest, reached = _habit_stats(habit, clock, window_days)
            key = str(habit.id)
        except Exception:  # noqa: BLE001
            logger.warning("Skipping malformed habit %r", habit.id, exc_info=True)
            continue

        active += 1
        completed_today += 1 if done_today else 0
        streaks[key] = streak
        attainment[key] = reached
        best_longest = max(best_longest, longest)

    return HabitSummary(
        active_habits=active,
        completed_today=completed_today,
        best_current_streak=max(streaks.values(), default=0),
        best_longest_streak=best_longest,
        streaks=streaks,
        weekly_attainment=attainment,
    )
