"""Resolve the loosely-shaped task payloads returned by the language model.

A model reply may be any of::

    [ {task}, ... ]                 a bare array of tasks
    {"tasks": [ {task}, ... ]}      an object wrapping the array
    {task}                          a single task object
    {"reply": "...prose..."}        tasks buried in conversational text
    "...prose..."                   not JSON at all

`resolve_task_payload` walks those shapes in that order and returns the
candidate task list, or None when nothing task-like was found.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Mapping, Optional

from models.task_record import TaskRecord
from services.tasks.task_parser import parse_tasks_from_text

LOGGER = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def load_json_payload(raw: str) -> Any:
    """Parse JSON from a model reply, tolerating a surrounding markdown code fence.

    Raises:
        json.JSONDecodeError: If the text is not JSON.
    """
    text = (raw or "").strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    return json.loads(text)


def tasks_from_json(payload: Any) -> Optional[List[TaskRecord]]:
    """Return tasks from an already-decoded JSON value, or None if it holds none."""
    if isinstance(payload, list):
        return _records(payload)
    if not isinstance(payload, Mapping):
        return None

    tasks = payload.get("tasks")
    if isinstance(tasks, Mapping):
        tasks = list(tasks.values())
    if isinstance(tasks, list):
        records = _records(tasks)
        if records:
            return records

    single = TaskRecord.from_mapping(payload)
    if single.title and single.description and single.time_estimate:
        return [single]
    return None


def resolve_task_payload(raw: Optional[str]) -> Optional[List[TaskRecord]]:
    """Return the candidate tasks carried by a raw model reply.

    Args:
        raw: The text content of the completion.

    Returns:
        A non-empty list of (unvalidated) tasks, or None.
    """
    if not raw or not raw.strip():
        return None
    try:
        payload = load_json_payload(raw)
    except json.JSONDecodeError:
        LOGGER.info("Model reply is not JSON; scanning prose for tasks")
        return parse_tasks_from_text(raw)

    records = tasks_from_json(payload)
    if records:
        return records

    if isinstance(payload, Mapping):
        reply = payload.get("reply")
        if isinstance(reply, str) and reply.strip():
            LOGGER.info("No tasks array in model reply; checking reply text for task content")
            return parse_tasks_from_text(reply)
    return None


def _records(items: List[Any]) -> Optional[List[TaskRecord]]:
    records: List[TaskRecord] = []
    for item in items:
        if isinstance(item, Mapping):
            records.append(TaskRecord.from_mapping(item))
        elif isinstance(item, str) and item.strip():
            records.append(TaskRecord(title=item.strip(), description="", time_estimate=""))
    return records or None
