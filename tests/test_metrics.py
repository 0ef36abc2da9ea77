from datetime import datetime, timezone

from productivity_analytics.clock import Clock
from productivity_analytics.metrics import best_working_hour, compute_metrics, most_productive_category
from productivity_analytics.schema import Habit, Metrics, Task

CLOCK = Clock(now=datetime(2024, 1, 10, 14, 30, tzinfo=timezone.utc))


def sample_tasks():
    return [
        Task("t1", "Fix bug", "Bug Fix", "high", True, "2024-01-08T09:00:00Z", "2024-01-08T15:10:00Z"),
        Task("t2", "Review", "Review", "medium", True, "2024-01-09T08:00:00Z", "2024-01-09T15:05:00Z"),
        Task("t3", "Docs", "Development", "low", True, "2024-01-09T10:00:00Z", "2024-01-10T10:45:00Z"),
        Task("t4", "Plan", "Meeting", "high", False, "2024-01-05T10:00:00Z", None, "2024-01-09"),
        Task("t5", "Learn", "Learning", "medium", False, "2024-01-10T07:00:00Z", None, "2024-01-12"),
    ]


def test_empty_snapshot_defaults():
    metrics = compute_metrics([], clock=CLOCK)
    assert metrics.completion_rate == 0.0
    assert metrics.current_streak == 0
    assert metrics.best_working_hour == 9
    assert metrics.most_productive_category is None
    assert metrics.priority_distribution.total == 0
    assert metrics.high_priority_share == 0.0


def test_completion_rate_three_of_four():
    tasks = [Task(str(i), completed=i < 3, completed_at="2024-01-10T09:00:00Z" if i < 3 else None) for i in range(4)]
    assert compute_metrics(tasks, clock=CLOCK).completion_rate == 75.0


def test_sample_snapshot_metrics():
    metrics = compute_metrics(sample_tasks(), clock=CLOCK)
    assert metrics.total_tasks == 5
    assert metrics.completed_tasks == 3
    assert metrics.completion_rate == 60.0
    assert metrics.current_streak == 3
    assert metrics.weekly_velocity == 3
    assert metrics.completed_today == 1
    assert metrics.completed_yesterday == 1
    assert metrics.best_working_hour == 15
    assert metrics.overdue_count == 1
    assert metrics.upcoming_deadlines == 1
    assert metrics.average_tasks_per_day == 5 / 7


def test_priority_distribution_sums_to_total():
    tasks = sample_tasks() + [Task("x", priority="URGENT"), Task("y", priority=None), Task("z", priority=" Low ")]
    metrics = compute_metrics(tasks, clock=CLOCK)
    dist = metrics.priority_distribution
    assert dist.high + dist.medium + dist.low == metrics.total_tasks
    assert dist.medium == 4
    assert dist.low == 2


def test_best_working_hour_tie_goes_to_earliest():
    assert best_working_hour([14, 10]) == 10
    assert best_working_hour([16, 16, 16, 8, 8]) == 16
    assert best_working_hour([], default=9) == 9


def test_most_productive_category_tie_breaks():
    assert most_productive_category({"A": 1, "B": 2}, {"A": 1, "B": 2}) == ("B", 100.0)
    assert most_productive_category({"C": 2, "D": 2}, {"C": 1, "D": 1}) == ("C", 50.0)
    assert most_productive_category({}, {}) == (None, 0.0)


def test_overdue_and_upcoming_are_exclusive():
    tasks = [
        Task("late", deadline="2024-01-09"),
        Task("soon", deadline="2024-01-12"),
        Task("today", deadline="2024-01-10"),
        Task("far", deadline="2024-01-14"),
        Task("done", completed=True, completed_at="2024-01-10T09:00:00Z", deadline="2024-01-01"),
        Task("bad", deadline="someday"),
    ]
    metrics = compute_metrics(tasks, clock=CLOCK)
    assert metrics.overdue_count == 1
    assert metrics.upcoming_deadlines == 2


def test_invalid_timestamps_still_counted_in_tallies():
    tasks = [
        Task("a", category="Work", priority="high", completed=True, created_at="bad", completed_at="garbage"),
        Task("b", category="Work", priority="low", completed=False, created_at="2024-01-10T08:00:00Z"),
    ]
    metrics = compute_metrics(tasks, clock=CLOCK)
    assert metrics.completed_tasks == 1
    assert metrics.completion_rate == 50.0
    assert metrics.priority_distribution.high == 1
    assert metrics.weekly_velocity == 0
    assert metrics.current_streak == 0
    assert metrics.best_working_hour == 9
    assert metrics.average_tasks_per_day == 1 / 7


def test_velocity_windows():
    tasks = [
        Task("in", completed=True, created_at="2024-01-04T08:00:00Z", completed_at="2024-01-04T09:00:00Z"),
        Task("out", completed=True, created_at="2024-01-03T08:00:00Z", completed_at="2024-01-03T09:00:00Z"),
    ]
    metrics = compute_metrics(tasks, clock=CLOCK)
    assert metrics.weekly_velocity == 1
    assert metrics.previous_weekly_velocity == 1
    assert metrics.average_tasks_per_day == 1 / 7


def test_non_task_records_are_skipped():
    metrics = compute_metrics([None, "task", {"id": "x"}, Task("a")], clock=CLOCK)
    assert metrics.total_tasks == 1


def test_habits_are_summarized():
    habits = [Habit("h1", "Read", 3, frozenset({"2024-01-09", "2024-01-10"}))]
    metrics = compute_metrics([], habits, clock=CLOCK)
    assert metrics.habits.active_habits == 1
    assert metrics.habits.best_current_streak == 2


def test_compute_metrics_is_idempotent():
    first = compute_metrics(sample_tasks(), clock=CLOCK)
    second = compute_metrics(sample_tasks(), clock=CLOCK)
    assert isinstance(first, Metrics)
    assert first == second


def test_malformed_habits_do_not_reset_task_metrics():
    habits = [
        Habit("inf", "Read", float("inf"), frozenset({"2024-01-10"})),
        Habit("num", "Run", 3, 5),
    ]
    metrics = compute_metrics(sample_tasks(), habits, clock=CLOCK)
    assert metrics.total_tasks == 5
    assert metrics.completion_rate == 60.0
    assert metrics.current_streak == 3
    assert metrics.habits.active_habits == 2
    assert metrics.habits.streaks == {"inf": 1, "num": 0}
