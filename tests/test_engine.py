import json
import logging
from datetime import date, datetime, timezone

from productivity_analytics.config import EngineConfig
from productivity_analytics.engine import complete_task, recompute, reopen_task, report_to_dict, revision_to_dict
from productivity_analytics.schema import Habit, Task

NOW = datetime(2024, 1, 10, 14, 30, tzinfo=timezone.utc)


def sample_snapshot():
    tasks = [
        Task("t1", "Fix bug", "Bug Fix", "high", True, "2024-01-08T09:00:00Z", "2024-01-08T15:10:00Z"),
        Task("t2", "Review", "Review", "medium", True, "2024-01-09T08:00:00Z", "2024-01-09T15:05:00Z"),
        Task("t3", "Plan", "Meeting", "high", False, "2024-01-05T10:00:00Z", None, "2024-01-09"),
        Task("t4", "Broken", None, "???", True, "not-a-date", "also-not-a-date"),
    ]
    habits = [Habit("h1", "Read", 5, frozenset({"2024-01-09", "2024-01-10"}))]
    return tasks, habits


def test_recompute_empty_snapshot():
    report = recompute([], [], now=NOW)
    assert report.metrics.completion_rate == 0.0
    assert report.metrics.current_streak == 0
    assert report.insights == []
    assert len(report.progress["daily"]) == 7


def test_recompute_is_idempotent():
    tasks, habits = sample_snapshot()
    first = recompute(tasks, habits, now=NOW)
    second = recompute(tasks, habits, now=NOW)
    assert first.metrics == second.metrics
    assert [i.id for i in first.insights] == [i.id for i in second.insights]
    assert report_to_dict(first) == report_to_dict(second)


def test_recompute_respects_insight_cap():
    tasks, habits = sample_snapshot()
    report = recompute(tasks, habits, now=NOW, config=EngineConfig(max_insights=2))
    assert len(report.insights) == 2
    assert all(i.priority == "high" for i in report.insights)


def test_recompute_tolerates_malformed_records():
    tasks, _ = sample_snapshot()
    report = recompute([None, "junk", *tasks], ["not a habit"], now=NOW)
    assert report.metrics.total_tasks == 4
    assert report.metrics.habits.active_habits == 0


def test_report_to_dict_is_json_serializable():
    tasks, habits = sample_snapshot()
    payload = report_to_dict(recompute(tasks, habits, now=NOW))
    decoded = json.loads(json.dumps(payload))
    assert decoded["metrics"]["priority_distribution"] == {"high": 2, "medium": 2, "low": 0}
    assert decoded["progress"]["daily"][-1]["label"] == "2024-01-10"


def test_complete_task_schedules_three_revisions():
    task = Task("t9", "Study", completed=False, created_at="2023-12-30T08:00:00Z")
    updated, revisions = complete_task(task, completed_at=datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc))

    assert updated.completed is True
    assert updated.completed_at == datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)
    assert [r.scheduled_date for r in revisions] == [date(2024, 1, 4), date(2024, 1, 7), date(2024, 1, 13)]
    assert revision_to_dict(revisions[0])["scheduled_date"] == "2024-01-04"


def test_complete_task_twice_emits_nothing():
    task = Task("t9", completed=True, completed_at="2024-01-01T18:00:00Z")
    updated, revisions = complete_task(task)
    assert updated is task
    assert revisions == []


def test_reopen_then_complete_reuses_revision_ids():
    task = Task("t9")
    done, first = complete_task(task, completed_at="2024-01-01T18:00:00Z")
    _, second = complete_task(reopen_task(done), completed_at="2024-01-05T18:00:00Z")
    assert [r.id for r in first] == [r.id for r in second]
    assert second[0].scheduled_date == date(2024, 1, 8)


def test_recompute_keeps_task_metrics_with_malformed_habits():
    tasks, _ = sample_snapshot()
    for habit in (Habit("h", "Read", float("inf")), Habit("h", "Read", 3, 5)):
        report = recompute(tasks, [habit], now=NOW)
        assert report.metrics.total_tasks == 4
        assert report.metrics.completion_rate == 75.0
        assert report.metrics.current_streak == 2


def test_complete_task_always_emits_three_revisions():
    config = EngineConfig(revision_offsets=(1, 2, 3, 4, 5))
    _, revisions = complete_task(Task("t9"), completed_at="2024-01-01T18:00:00Z", config=config)
    assert [r.revision_number for r in revisions] == [1, 2, 3]
    assert [r.scheduled_date for r in revisions] == [date(2024, 1, 4), date(2024, 1, 7), date(2024, 1, 13)]


def test_complete_task_logs_unparsable_completion_time(caplog):
    with caplog.at_level(logging.DEBUG, logger="productivity_analytics.engine"):
        updated, revisions = complete_task(Task("t9"), completed_at="not-a-time")
    assert updated.completed is True
    assert len(revisions) == 3
    assert "invalid completion time" in caplog.text
