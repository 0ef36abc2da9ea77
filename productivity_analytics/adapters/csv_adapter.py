"""CSV adapter for task snapshots."""

from __future__ import annotations

import csv

from productivity_analytics.schema import DEFAULT_PRIORITY, Task

_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}


def _optional(row: dict, *names: str):
    for name in names:
        value = row.get(name)
        if value not in (None, ""):
            return value.strip()
    return None


def _parse_row(row: dict, row_number: int) -> Task:
    task_id = _optional(row, "id")
    if task_id is None:
        raise ValueError(f"Row {row_number}: missing required field 'id'")

    completed_raw = _optional(row, "completed") or ""
    return Task(
        id=task_id,
        title=_optional(row, "title") or "",
        category=_optional(row, "category"),
        priority=_optional(row, "priority") or DEFAULT_PRIORITY,
        completed=completed_raw.lower() in _TRUE_STRINGS,
        created_at=_optional(row, "createdAt", "created_at"),
        completed_at=_optional(row, "completedAt", "completed_at"),
        deadline=_optional(row, "deadline"),
    )


def parse_tasks(file_path: str) -> list[Task]:
    """Parse CSV file into a list of tasks."""

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []

        if "id" not in reader.fieldnames:
            raise ValueError("CSV header must include an 'id' column")

        tasks: list[Task] = []
        for row_number, row in enumerate(reader, start=2):
            tasks.append(_parse_row(row, row_number))
        return tasks
