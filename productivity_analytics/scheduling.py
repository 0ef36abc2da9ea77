"""Spaced-repetition revision scheduling."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, Sequence

from productivity_analytics.clock import Clock
from productivity_analytics.schema import Revision, Task

logger = logging.getLogger(__name__)

REVISION_OFFSETS = (3, 6, 12)


def revision_id(task_id: str, revision_number: int) -> str:
    return f"{task_id}-revision-{revision_number}"


def _valid_offsets(offsets) -> bool:
    if not isinstance(offsets, (list, tuple)) or len(offsets) != len(REVISION_OFFSETS):
        return False
    return all(isinstance(o, int) and not isinstance(o, bool) and o >= 0 for o in offsets)


def schedule_revisions(
    task: Task,
    clock: Clock,
    completed_at=None,
    offsets: Sequence[int] = REVISION_OFFSETS,
) -> list[Revision]:
    """Return the follow-up reviews for a task completed at ``completed_at``.

    ``completed_at`` defaults to the task's own ``completed_at`` and then to the
    clock's current instant. Ids depend only on the task id and revision number,
    so rescheduling the same task yields the same ids.
    """

    if not _valid_offsets(offsets):
        logger.debug("Invalid revision offsets %r, using %r", offsets, REVISION_OFFSETS)
        offsets = REVISION_OFFSETS

    completed_day = clock.bucket(completed_at if completed_at is not None else task.completed_at)
    if completed_day is None:
        logger.debug("Task %s has no valid completion time, scheduling from today", task.id)
        completed_day = clock.today()

    return [
        Revision(
            id=revision_id(task.id, number),
            original_task_id=task.id,
            revision_number=number,
            scheduled_date=completed_day + timedelta(days=int(offset)),
            completed=False,
            original_title=task.title,
        )
        for number, offset in enumerate(offsets, start=1)
    ]


def merge_revisions(existing: Iterable[Revision], batch: Iterable[Revision]) -> list[Revision]:
    """Upsert ``batch`` into ``existing`` by id, keeping first-seen order."""

    merged: dict[str, Revision] = {revision.id: revision for revision in existing}
    for revision in batch:
        if revision.id in merged:
            logger.debug("Replacing existing revision %s", revision.id)
        merged[revision.id] = revision
    return list(merged.values())


def revisions_due(revisions: Iterable[Revision], clock: Clock) -> list[Revision]:
    """Incomplete revisions scheduled for today or earlier."""

    today = clock.today()
    due = [
        revision
        for revision in revisions
        if not revision.completed and revision.scheduled_date is not None and revision.scheduled_date <= today
    ]
    return sorted(due, key=lambda r: (r.scheduled_date, r.revision_number, r.id))
