"""Core data schema for tasks, habits and derived analytics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional, Union

PRIORITIES = ("high", "medium", "low")
INSIGHT_TYPES = ("productivity", "pattern", "suggestion", "warning", "achievement", "optimization")
TRENDS = ("up", "down", "stable")

DEFAULT_PRIORITY = "medium"
UNKNOWN_CATEGORY = "unknown"

# Raw timestamps are kept as the record store supplied them; the clock decides validity.
RawTimestamp = Union[datetime, date, str, int, float, None]


@dataclass(frozen=True)
class Task:
    """Task record snapshot as read from the record store."""

    id: str
    title: str = ""
    category: Optional[str] = None
    priority: str = DEFAULT_PRIORITY
    completed: bool = False
    created_at: RawTimestamp = None
    completed_at: RawTimestamp = None
    deadline: RawTimestamp = None


@dataclass(frozen=True)
class Habit:
    """Habit with a set of calendar dates on which it was marked done."""

    id: str
    name: str = ""
    target_frequency: int = 7
    completions: frozenset = field(default_factory=frozenset)


@dataclass(frozen=True)
class Revision:
    """Spaced-repetition follow-up review of a completed task."""

    id: str
    original_task_id: str
    revision_number: int
    scheduled_date: date
    completed: bool = False
    original_title: str = ""


@dataclass(frozen=True)
class PriorityDistribution:
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low


@dataclass(frozen=True)
class HabitSummary:
    active_habits: int = 0
    completed_today: int = 0
    best_current_streak: int = 0
    best_longest_streak: int = 0
    streaks: dict[str, int] = field(default_factory=dict)
    weekly_attainment: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class Metrics:
    """Aggregate statistics for one snapshot at one instant."""

    total_tasks: int = 0
    completed_tasks: int = 0
    completion_rate: float = 0.0
    average_tasks_per_day: float = 0.0
    best_working_hour: int = 9
    most_productive_category: Optional[str] = None
    best_category_rate: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    weekly_velocity: int = 0
    previous_weekly_velocity: int = 0
    completed_today: int = 0
    completed_yesterday: int = 0
    priority_distribution: PriorityDistribution = field(default_factory=PriorityDistribution)
    high_priority_share: float = 0.0
    overdue_count: int = 0
    upcoming_deadlines: int = 0
    habits: HabitSummary = field(default_factory=HabitSummary)


@dataclass(frozen=True)
class Insight:
    """Ranked, human-readable observation derived from metrics."""

    id: str
    type: str
    title: str
    description: str
    priority: str
    value: Optional[float] = None
    trend: Optional[str] = None


def normalize_priority(priority: Any) -> str:
    if isinstance(priority, str):
        value = priority.strip().lower()
        if value in PRIORITIES:
            return value
    return DEFAULT_PRIORITY


def normalize_category(category: Any) -> str:
    if category is None:
        return UNKNOWN_CATEGORY
    normalized = str(category).strip()
    return normalized or UNKNOWN_CATEGORY
