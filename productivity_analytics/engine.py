"""Recompute entry point called by the record store after every change."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime
from typing import Iterable, Optional

from productivity_analytics.clock import Clock, parse_timestamp, resolve_timezone
from productivity_analytics.config import EngineConfig
from productivity_analytics.insights import DEFAULT_RULES, Rule, generate_insights
from productivity_analytics.metrics import compute_metrics, valid_tasks
from productivity_analytics.progress import category_breakdown, daily_progress, monthly_progress, weekly_progress
from productivity_analytics.scheduling import schedule_revisions
from productivity_analytics.schema import Habit, Insight, Metrics, Revision, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsReport:
    metrics: Metrics
    insights: list[Insight]
    progress: dict = field(default_factory=dict)


def make_clock(now=None, config: Optional[EngineConfig] = None) -> Clock:
    config = config or EngineConfig()
    return Clock(now=now, tz=resolve_timezone(config.timezone))


def recompute(
    tasks: Iterable[Task],
    habits: Optional[Iterable[Habit]] = None,
    now: Optional[datetime] = None,
    config: Optional[EngineConfig] = None,
    rules: Iterable[Rule] = DEFAULT_RULES,
) -> AnalyticsReport:
    """Recompute metrics, insights and progress from a fresh snapshot.

    Never raises on malformed records: anything the aggregation cannot handle
    degrades to empty metrics and no insights.
    """

    config = config or EngineConfig()
    clock = make_clock(now, config)
    tasks = valid_tasks(tasks)
    habits = list(habits or ())

    try:
        metrics = compute_metrics(tasks, habits, clock, config)
    except Exception:  # noqa: BLE001
        logger.exception("Metrics aggregation failed, falling back to empty metrics")
        metrics = Metrics(best_working_hour=config.default_working_hour)

    insights = generate_insights(metrics, tasks, clock, config, rules)

    try:
        progress = {
            "daily": daily_progress(tasks, clock),
            "weekly": weekly_progress(tasks, clock),
            "monthly": monthly_progress(tasks, clock),
            "categories": category_breakdown(tasks),
        }
    except Exception:  # noqa: BLE001
        logger.exception("Progress series failed, omitting them")
        progress = {}

    logger.debug(
        "Recomputed analytics for %d tasks and %d habits: %d insights",
        len(tasks),
        len(habits),
        len(insights),
    )
    return AnalyticsReport(metrics=metrics, insights=insights, progress=progress)


def complete_task(
    task: Task,
    completed_at=None,
    config: Optional[EngineConfig] = None,
) -> tuple[Task, list[Revision]]:
    """Mark ``task`` complete and return it with its revision batch.

    Completing an already completed task returns it unchanged with no revisions.
    """

    config = config or EngineConfig()
    if task.completed:
        return task, []

    clock = make_clock(completed_at, config)
    if completed_at is not None and parse_timestamp(completed_at, clock.tz) is None:
        logger.debug("Task %s has invalid completion time %r, using current time", task.id, completed_at)
    finished_at = clock.now()
    updated = replace(task, completed=True, completed_at=finished_at)
    revisions = schedule_revisions(updated, clock, finished_at, offsets=config.revision_offsets)
    logger.debug("Task %s completed, scheduled %d revisions", task.id, len(revisions))
    return updated, revisions


def reopen_task(task: Task) -> Task:
    """Mark ``task`` incomplete, clearing its completion time."""

    return replace(task, completed=False, completed_at=None)


def _jsonable(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def report_to_dict(report: AnalyticsReport) -> dict:
    """Plain-JSON form of a report."""

    return {
        "metrics": _jsonable(asdict(report.metrics)),
        "insights": [_jsonable(asdict(insight)) for insight in report.insights],
        "progress": _jsonable(report.progress),
    }


def revision_to_dict(revision: Revision) -> dict:
    return _jsonable(asdict(revision))
