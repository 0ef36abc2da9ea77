"""Demo script for productivity-analytics."""

import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from productivity_analytics.adapters.json_adapter import parse_habits, parse_tasks
from productivity_analytics.engine import complete_task, recompute


def main() -> None:
    now = datetime(2024, 1, 10, 14, 30, tzinfo=timezone.utc)
    tasks = parse_tasks("examples/sample_snapshot.json")
    habits = parse_habits("examples/sample_snapshot.json")

    report = recompute(tasks, habits, now=now)
    print("Completion rate:", f"{report.metrics.completion_rate:.1f}%")
    print("Current streak:", report.metrics.current_streak)
    print("Best working hour:", report.metrics.best_working_hour)
    for insight in report.insights:
        print(f"[{insight.priority}] {insight.title}: {insight.description}")

    pending = next(task for task in tasks if not task.completed)
    _, revisions = complete_task(pending, completed_at=now)
    print("Revisions:", [(r.revision_number, r.scheduled_date.isoformat()) for r in revisions])


if __name__ == "__main__":
    main()
