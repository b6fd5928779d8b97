"""Coerce candidate tasks into the canonical three-task list."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Union

from models.task_record import TaskRecord
from services.tasks.fallback_catalog import get_fallback_task

TASK_COUNT = 3
DEFAULT_TITLE = "Untitled Task"
DEFAULT_DESCRIPTION = "No description provided. Please add detailed steps for this task."
DEFAULT_TIME_ESTIMATE = "1 hour"
MAX_TIME_ESTIMATE_LENGTH = 20

TaskLike = Union[TaskRecord, Mapping[str, Any]]


def coerce_task(task: TaskLike, position: int) -> TaskRecord:
    """Return a well-formed copy of one task.

    Args:
        task: A TaskRecord or a loosely-shaped mapping.
        position: 0-based position, used for the default id.
    """
    record = task if isinstance(task, TaskRecord) else TaskRecord.from_mapping(task)
    title = (record.title or "").strip() or DEFAULT_TITLE
    description = (record.description or "").strip() or DEFAULT_DESCRIPTION
    estimate = (record.time_estimate or "").strip()
    # An overly long estimate means the model wrote prose instead of a duration.
    if not estimate or len(estimate) > MAX_TIME_ESTIMATE_LENGTH:
        estimate = DEFAULT_TIME_ESTIMATE
    task_id = record.id if isinstance(record.id, int) and record.id > 0 else position + 1
    return TaskRecord(title=title, description=description, time_estimate=estimate, id=task_id)


def normalize_tasks(tasks: Iterable[TaskLike] | None, domain: str | None) -> List[TaskRecord]:
    """Return exactly three validated tasks, padding from the fallback catalog.

    The list is truncated to three entries; shorter lists are padded with the
    domain's fallback task at the same position. Running this on its own
    output returns an equal list.
    """
    validated = [coerce_task(task, index) for index, task in enumerate(list(tasks or [])[:TASK_COUNT])]
    while len(validated) < TASK_COUNT:
        validated.append(get_fallback_task(domain, len(validated)))
    return validated
