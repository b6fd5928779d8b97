from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass
class TaskRecord:
    """In-memory representation of one actionable task shown to the user.

    Attributes:
        title: Short action-oriented title.
        description: Step-by-step body of the task.
        time_estimate: Human readable estimate such as "2 hours".
        id: Stable 1-based ordinal, preserved across edits so that
            "edit task 2" keeps pointing at the same task.
    """

    title: str
    description: str
    time_estimate: str
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the wire representation used by the HTTP API."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "timeEstimate": self.time_estimate,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TaskRecord":
        """Build a record from a loosely-shaped mapping (model output or client input).

        Key variants produced by language models ("Title", "Time Estimate",
        "time_estimate", ...) are accepted. Missing values become empty
        strings; validation happens later in the task validator.
        """
        raw_id = data.get("id")
        try:
            task_id = int(raw_id) if raw_id is not None and not isinstance(raw_id, bool) else None
        except (TypeError, ValueError):
            task_id = None
        return cls(
            title=_first_text(data, "title", "Title", "name", "task"),
            description=_first_text(data, "description", "Description", "details", "steps"),
            time_estimate=_first_text(
                data,
                "timeEstimate",
                "time_estimate",
                "TimeEstimate",
                "Time Estimate",
                "timeestimate",
                "estimatedTime",
                "duration",
            ),
            id=task_id,
        )


def _first_text(data: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, list):
            value = "\n".join(str(item) for item in value)
        text = str(value).strip()
        if text:
            return text
    return ""
