"""Rule catalog that turns metrics into ranked insights.

Every rule is evaluated on every call; results are ranked by priority and
then by catalog position, and the top ``max_insights`` are kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from productivity_analytics.clock import Clock
from productivity_analytics.config import EngineConfig
from productivity_analytics.schema import Insight, Metrics, Task
from productivity_analytics.trends import trend_direction

logger = logging.getLogger(__name__)

RuleFn = Callable[[Metrics, Sequence[Task], datetime, EngineConfig], Optional[Insight]]

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


@dataclass(frozen=True)
class Rule:
    name: str
    fn: RuleFn


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _velocity_trend(metrics: Metrics) -> str:
    return trend_direction(metrics.previous_weekly_velocity, metrics.weekly_velocity)


def high_performance(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.total_tasks == 0 or metrics.completion_rate < config.high_performance_rate:
        return None
    return Insight(
        id="high-performance",
        type="achievement",
        title="Outstanding Completion Rate",
        description=f"You've completed {metrics.completion_rate:.0f}% of your tasks. Excellent follow-through!",
        priority="high",
        value=metrics.completion_rate,
        trend="up",
    )


def low_performance(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.total_tasks == 0 or metrics.completion_rate >= config.low_performance_rate:
        return None
    return Insight(
        id="low-performance",
        type="warning",
        title="Completion Rate Needs Attention",
        description=(
            f"Only {metrics.completion_rate:.0f}% of your tasks are done. "
            "Try breaking large tasks into smaller steps."
        ),
        priority="high",
        value=metrics.completion_rate,
        trend="down",
    )


def peak_window(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.best_working_hour == config.default_working_hour:
        return None
    if abs(now.hour - metrics.best_working_hour) > 1:
        return None
    return Insight(
        id="peak-window",
        type="optimization",
        title="You're in Your Peak Window",
        description=(
            f"You complete the most tasks around {metrics.best_working_hour:02d}:00. "
            "Tackle your most important task now."
        ),
        priority="high",
    )


def streak_fire(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.current_streak < config.streak_fire_days:
        return None
    return Insight(
        id="streak-fire",
        type="achievement",
        title="Incredible Streak!",
        description=f"{metrics.current_streak} days of consistent productivity. You're building excellent habits.",
        priority="high",
        value=float(metrics.current_streak),
        trend="up",
    )


def streak_restart(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.total_tasks == 0 or metrics.current_streak != 0:
        return None
    return Insight(
        id="streak-restart",
        type="suggestion",
        title="Start a New Streak",
        description="Complete one task today to get your streak going again.",
        priority="medium",
        value=0.0,
    )


def high_velocity(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    expected = metrics.average_tasks_per_day * config.velocity_window_days
    if metrics.weekly_velocity <= expected * 1.5:
        return None
    return Insight(
        id="high-velocity",
        type="achievement",
        title="Velocity Surge",
        description=(
            f"You finished {_plural(metrics.weekly_velocity, 'task')} this week, "
            "well ahead of the rate you're adding new ones."
        ),
        priority="medium",
        value=float(metrics.weekly_velocity),
        trend=_velocity_trend(metrics),
    )


def low_velocity(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    expected = metrics.average_tasks_per_day * config.velocity_window_days
    if metrics.weekly_velocity >= expected * 0.5:
        return None
    return Insight(
        id="low-velocity",
        type="suggestion",
        title="Tasks Are Piling Up",
        description=(
            f"You added {expected:.0f} tasks this week but finished {metrics.weekly_velocity}. "
            "Consider pruning or rescheduling."
        ),
        priority="medium",
        value=float(metrics.weekly_velocity),
        trend=_velocity_trend(metrics),
    )


def category_mastery(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.most_productive_category is None or metrics.best_category_rate <= config.category_mastery_rate:
        return None
    return Insight(
        id="category-mastery",
        type="pattern",
        title="Category Mastery",
        description=(
            f"You excel at {metrics.most_productive_category} tasks "
            f"with a {metrics.best_category_rate:.0f}% completion rate."
        ),
        priority="medium",
        value=metrics.best_category_rate,
    )


def overdue_alert(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.overdue_count <= 0:
        return None
    return Insight(
        id="overdue-alert",
        type="warning",
        title="Overdue Tasks Alert",
        description=(
            f"You have {_plural(metrics.overdue_count, 'overdue task')}. "
            "Consider rescheduling or breaking them down."
        ),
        priority="high",
        value=float(metrics.overdue_count),
    )


def upcoming_deadlines(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.upcoming_deadlines <= 0:
        return None
    return Insight(
        id="upcoming-deadlines",
        type="suggestion",
        title="Deadlines Approaching",
        description=(
            f"{_plural(metrics.upcoming_deadlines, 'task')} due within "
            f"the next {config.upcoming_window_days} days."
        ),
        priority="medium",
        value=float(metrics.upcoming_deadlines),
    )


def priority_overload(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.high_priority_share <= config.priority_overload_share:
        return None
    return Insight(
        id="priority-overload",
        type="warning",
        title="Too Many High Priorities",
        description=(
            f"{metrics.high_priority_share:.0f}% of your tasks are high priority. "
            "When everything is urgent, nothing is."
        ),
        priority="medium",
        value=metrics.high_priority_share,
    )


def balanced_priorities(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.total_tasks <= config.balanced_min_tasks:
        return None
    if metrics.high_priority_share >= config.balanced_priority_share:
        return None
    return Insight(
        id="balanced-priorities",
        type="optimization",
        title="Room for Focus",
        description="Few of your tasks are marked high priority. Flag the ones that matter most this week.",
        priority="low",
        value=metrics.high_priority_share,
    )


def productivity_boost(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.completed_today == 0 or metrics.completed_today <= metrics.completed_yesterday:
        return None
    return Insight(
        id="productivity-boost",
        type="productivity",
        title="Productivity Boost!",
        description=(
            f"You completed {metrics.completed_today} tasks today vs "
            f"{metrics.completed_yesterday} yesterday. Keep the momentum!"
        ),
        priority="high",
        value=float(metrics.completed_today),
        trend="up",
    )


def morning_window(
    metrics: Metrics, tasks: Sequence[Task], now: datetime, config: EngineConfig
) -> Optional[Insight]:
    if metrics.total_tasks == 0 or metrics.completed_today != 0:
        return None
    if not 9 <= now.hour <= 11:
        return None
    return Insight(
        id="morning-window",
        type="suggestion",
        title="Morning Productivity Window",
        description="It's peak morning hours, typically the best time for focused work.",
        priority="medium",
    )


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("high_performance", high_performance),
    Rule("low_performance", low_performance),
    Rule("peak_window", peak_window),
    Rule("streak_fire", streak_fire),
    Rule("streak_restart", streak_restart),
    Rule("high_velocity", high_velocity),
    Rule("low_velocity", low_velocity),
    Rule("category_mastery", category_mastery),
    Rule("overdue_alert", overdue_alert),
    Rule("upcoming_deadlines", upcoming_deadlines),
    Rule("priority_overload", priority_overload),
    Rule("balanced_priorities", balanced_priorities),
    Rule("productivity_boost", productivity_boost),
    Rule("morning_window", morning_window),
)


def evaluate_rules(
    metrics: Metrics,
    tasks: Sequence[Task],
    now: datetime,
    config: EngineConfig,
    rules: Iterable[Rule] = DEFAULT_RULES,
) -> list[Insight]:
    """Run every rule in catalog order and collect the insights that fire."""

    fired: list[Insight] = []
    for rule in rules:
        try:
            insight = rule.fn(metrics, tasks, now, config)
        except Exception:  # noqa: BLE001
            logger.warning("Insight rule %s failed, skipping", rule.name, exc_info=True)
            continue
        if isinstance(insight, Insight):
            fired.append(insight)
    return fired


def rank_insights(insights: Sequence[Insight], max_insights: int) -> list[Insight]:
    """Order by priority then catalog position and keep the first ``max_insights``."""

    ranked = sorted(
        enumerate(insights),
        key=lambda item: (PRIORITY_RANK.get(item[1].priority, len(PRIORITY_RANK)), item[0]),
    )
    return [insight for _, insight in ranked[: max(0, max_insights)]]


def generate_insights(
    metrics: Metrics,
    tasks: Sequence[Task],
    clock: Optional[Clock] = None,
    config: Optional[EngineConfig] = None,
    rules: Iterable[Rule] = DEFAULT_RULES,
    max_insights: Optional[int] = None,
) -> list[Insight]:
    """Evaluate the rule catalog and return the top-ranked insights."""

    clock = clock or Clock()
    config = config or EngineConfig()
    limit = config.max_insights if max_insights is None else max_insights

    fired = evaluate_rules(metrics, list(tasks or ()), clock.now(), config, rules)
    ranked = rank_insights(fired, limit)
    logger.debug("%d of %d fired insights kept", len(ranked), len(fired))
    return ranked
