"""JSON adapter for task and habit snapshots."""

from __future__ import annotations

import json

from productivity_analytics.schema import DEFAULT_PRIORITY, Habit, Task

_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}


def _field(item: dict, *names: str):
    for name in names:
        if name in item:
            return item[name]
    return None


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def _as_int(value, default: int) -> int:
    try:
        return int(value)
    except Exception:  # noqa: BLE001
        return default


def _parse_task(item: dict, index: int) -> Task:
    if not isinstance(item, dict):
        raise ValueError(f"Item {index}: expected an object")

    task_id = item.get("id")
    if task_id in (None, ""):
        raise ValueError(f"Item {index}: missing required field 'id'")

    priority = item.get("priority")
    return Task(
        id=str(task_id).strip(),
        title=str(item.get("title") or ""),
        category=item.get("category"),
        priority=str(priority) if priority is not None else DEFAULT_PRIORITY,
        completed=_as_bool(item.get("completed")),
        created_at=_field(item, "createdAt", "created_at"),
        completed_at=_field(item, "completedAt", "completed_at"),
        deadline=item.get("deadline"),
    )


def _parse_habit(item: dict, index: int) -> Habit:
    if not isinstance(item, dict):
        raise ValueError(f"Item {index}: expected an object")

    habit_id = item.get("id")
    if habit_id in (None, ""):
        raise ValueError(f"Item {index}: missing required field 'id'")

    completions = item.get("completions") or []
    if not isinstance(completions, list):
        raise ValueError(f"Item {index}: completions must be a list")

    return Habit(
        id=str(habit_id).strip(),
        name=str(item.get("name") or ""),
        target_frequency=_as_int(_field(item, "targetFrequency", "target_frequency"), 7),
        completions=frozenset(value for value in completions if isinstance(value, str)),
    )


def _load_list(file_path: str, key: str) -> list:
    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if isinstance(payload, dict):
        payload = payload.get(key, [])
    if not isinstance(payload, list):
        raise ValueError(f"JSON payload must be a list of objects or an object with a '{key}' list")
    return payload


def parse_tasks(file_path: str) -> list[Task]:
    """Parse a JSON file into tasks."""

    return [_parse_task(item, i) for i, item in enumerate(_load_list(file_path, "tasks"), start=1)]


def parse_habits(file_path: str) -> list[Habit]:
    """Parse a JSON file into habits."""

    return [_parse_habit(item, i) for i, item in enumerate(_load_list(file_path, "habits"), start=1)]
