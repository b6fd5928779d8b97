from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.task_record import TaskRecord


@dataclass
class ChatResponse:
    """Outcome of one chat turn: either tasks, a conversational reply, or both.

    Attributes:
        tasks: Zero or three tasks once assembled.
        reply: Text for the user; may be None when tasks speak for themselves.
    """

    tasks: List[TaskRecord] = field(default_factory=list)
    reply: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"tasks": [task.to_dict() for task in self.tasks], "reply": self.reply}
