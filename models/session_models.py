"""Session domain models for task-planning conversations."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.task_record import TaskRecord
from models.website_insight import WebsiteInsight


@dataclass
class SessionMessage:
	"""Structured message replayed to the language model."""

	role: str
	content: str = ""
	tool_calls: Optional[List[Dict[str, Any]]] = None
	tool_call_id: Optional[str] = None
	name: Optional[str] = None
	created_at: float = field(default_factory=lambda: time.time())

	def to_openai(self) -> Dict[str, Any]:
		"""Return the Chat Completions representation of this message."""
		payload: Dict[str, Any] = {"role": self.role, "content": self.content or ""}
		if self.tool_calls:
			payload["tool_calls"] = self.tool_calls
		if self.tool_call_id:
			payload["tool_call_id"] = self.tool_call_id
		if self.name and self.role == "tool":
			payload["name"] = self.name
		return payload


@dataclass
class ConversationProgress:
	"""Counters and flags that drive the question/generate decision."""

	questions_asked: int = 0
	ready_for_tasks: bool = False
	tasks_generated: bool = False


@dataclass
class EditRequest:
	"""Pending edit; a None target means regenerate the whole set."""

	target_index: Optional[int] = None


@dataclass
class SessionState:
	"""In-memory session tracking for one conversation."""

	session_id: str
	messages: List[SessionMessage] = field(default_factory=list)
	domain: Optional[str] = None
	progress: ConversationProgress = field(default_factory=ConversationProgress)
	website_insight: Optional[WebsiteInsight] = None
	last_task_set: List[TaskRecord] = field(default_factory=list)
	edit_request: Optional[EditRequest] = None
	failed_website_urls: List[str] = field(default_factory=list)

	@property
	def user_messages(self) -> List[SessionMessage]:
		return [msg for msg in self.messages if msg.role == "user"]

	@property
	def last_user_message(self) -> str:
		users = self.user_messages
		return users[-1].content if users else ""
