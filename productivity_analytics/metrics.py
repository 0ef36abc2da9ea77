"""Productivity metrics aggregated from a task and habit snapshot."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Optional

import numpy as np

from productivity_analytics.clock import Clock
from productivity_analytics.config import EngineConfig
from productivity_analytics.habits import summarize_habits
from productivity_analytics.schema import (
    Habit,
    Metrics,
    PriorityDistribution,
    Task,
    normalize_category,
    normalize_priority,
)
from productivity_analytics.streaks import completion_dates, current_streak, longest_streak

logger = logging.getLogger(__name__)


def valid_tasks(tasks: Optional[Iterable]) -> list[Task]:
    """Keep only ``Task`` records; anything else in the snapshot is dropped."""

    kept = []
    for task in tasks or ():
        if isinstance(task, Task):
            kept.append(task)
        else:
            logger.debug("Skipping non-task record %r", task)
    return kept


def best_working_hour(hours: Iterable[int], default: int = 9) -> int:
    """Hour of day with the most completions; ties go to the earliest hour."""

    values = [h for h in hours if h is not None and 0 <= h <= 23]
    if not values:
        return default
    counts = np.bincount(np.asarray(values, dtype=int), minlength=24)
    # argmax returns the first maximum, which is the smallest hour.
    return int(np.argmax(counts))


def most_productive_category(
    totals: dict[str, int], done: dict[str, int]
) -> tuple[Optional[str], float]:
    """Return (category, completion rate in percent) with the best completion ratio.

    Ties go to the category with more tasks, then to the one seen first;
    ``totals`` must be in first-seen order.
    """

    best: Optional[str] = None
    best_key: Optional[tuple[float, int, int]] = None
    for position, (category, total) in enumerate(totals.items()):
        if total <= 0:
            continue
        rate = done.get(category, 0) / total
        key = (rate, total, -position)
        if best_key is None or key > best_key:
            best, best_key = category, key
    if best is None or best_key is None:
        return None, 0.0
    return best, best_key[0] * 100.0


def compute_metrics(
    tasks: Iterable[Task],
    habits: Optional[Iterable[Habit]] = None,
    clock: Optional[Clock] = None,
    config: Optional[EngineConfig] = None,
) -> Metrics:
    """Compute completion, velocity, streak, priority and deadline metrics."""

    clock = clock or Clock()
    config = config or EngineConfig()
    tasks = valid_tasks(tasks)

    today = clock.today()
    yesterday = clock.days_ago(1)
    window = config.velocity_window_days
    upcoming_end = clock.days_ahead(config.upcoming_window_days)
    previous_start = clock.days_ago(2 * window - 1)
    previous_end = clock.days_ago(window)

    priorities = Counter()
    category_total: dict[str, int] = {}
    category_done: dict[str, int] = {}
    completion_hours: list[int] = []

    completed_count = 0
    created_recent = 0
    weekly_velocity = 0
    previous_velocity = 0
    completed_today = 0
    completed_yesterday = 0
    overdue = 0
    upcoming = 0
    invalid_timestamps = 0

    for task in tasks:
        priorities[normalize_priority(task.priority)] += 1

        category = normalize_category(task.category)
        category_total[category] = category_total.get(category, 0) + 1

        created_day = clock.bucket(task.created_at)
        if created_day is None:
            invalid_timestamps += 1
        elif clock.within_last(created_day, window):
            created_recent += 1

        if task.completed:
            completed_count += 1
            category_done[category] = category_done.get(category, 0) + 1

            completed_at = clock.localize(task.completed_at)
            if completed_at is None:
                invalid_timestamps += 1
                continue
            completed_day = completed_at.date()
            completion_hours.append(completed_at.hour)
            if clock.within_last(completed_day, window):
                weekly_velocity += 1
            elif previous_start <= completed_day <= previous_end:
                previous_velocity += 1
            if completed_day == today:
                completed_today += 1
            elif completed_day == yesterday:
                completed_yesterday += 1
            continue

        deadline = clock.bucket(task.deadline)
        if deadline is None:
            continue
        if deadline < today:
            overdue += 1
        elif deadline <= upcoming_end:
            upcoming += 1

    if invalid_timestamps:
        logger.debug("Excluded %d invalid timestamps from time-based metrics", invalid_timestamps)

    total = len(tasks)
    distribution = PriorityDistribution(
        high=priorities["high"],
        medium=priorities["medium"],
        low=priorities["low"],
    )
    category, category_rate = most_productive_category(category_total, category_done)
    done_days = completion_dates(tasks, clock)

    return Metrics(
        total_tasks=total,
        completed_tasks=completed_count,
        completion_rate=(completed_count / total * 100.0) if total else 0.0,
        average_tasks_per_day=created_recent / window,
        best_working_hour=best_working_hour(completion_hours, default=config.default_working_hour),
        most_productive_category=category,
        best_category_rate=category_rate,
        current_streak=current_streak(done_days, clock),
        longest_streak=longest_streak(done_days),
        weekly_velocity=weekly_velocity,
        previous_weekly_velocity=previous_velocity,
        completed_today=completed_today,
        completed_yesterday=completed_yesterday,
        priority_distribution=distribution,
        high_priority_share=(distribution.high / total * 100.0) if total else 0.0,
        overdue_count=overdue,
        upcoming_deadlines=upcoming,
        habits=summarize_habits(habits or (), clock, window_days=window),
    )
