"""Simple in-memory store for task-planning conversations."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from models.session_models import EditRequest, SessionMessage, SessionState
from models.task_record import TaskRecord
from models.website_insight import WebsiteInsight
from services.chat.heuristics import classify_domain, is_assistant_question
from services.chat.prompts import base_system_prompt

LOGGER = logging.getLogger(__name__)


class SessionStore:
	"""Manage chat sessions, their transcripts, and their task state.

	Every mutation of a session goes through this store. Callers hold
	``lock(session_id)`` for the duration of a turn so two requests for the
	same session never interleave.
	"""

	def __init__(self) -> None:
		self._sessions: Dict[str, SessionState] = {}
		self._locks: Dict[str, asyncio.Lock] = {}

	def __len__(self) -> int:
		return len(self._sessions)

	def __contains__(self, session_id: object) -> bool:
		return session_id in self._sessions

	def lock(self, session_id: str) -> asyncio.Lock:
		"""Return the per-session lock, creating it on first use."""
		lock = self._locks.get(session_id)
		if lock is None:
			lock = self._locks[session_id] = asyncio.Lock()
		return lock

	def get_or_create(self, session_id: Optional[str] = None) -> SessionState:
		"""Return an existing session or create one seeded with the system prompt."""
		if session_id and session_id in self._sessions:
			return self._sessions[session_id]
		session_id = session_id or uuid4().hex
		state = SessionState(session_id=session_id)
		state.messages.append(SessionMessage(role="system", content=base_system_prompt()))
		self._sessions[session_id] = state
		LOGGER.info("Created chat session %s", session_id)
		return state

	def get(self, session_id: str) -> SessionState:
		"""Return a session or raise KeyError if missing."""
		state = self._sessions.get(session_id)
		if state is None:
			raise KeyError(f"Session {session_id} not found")
		return state

	def delete(self, session_id: str) -> bool:
		"""Forget a session; deleting an unknown id is not an error.

		The lock is kept so a turn still queued on it stays serialized with
		any turn that recreates the same id.
		"""
		removed = self._sessions.pop(session_id, None) is not None
		if removed:
			LOGGER.info("Deleted chat session %s", session_id)
		return removed

	async def clear(self, session_id: str) -> bool:
		"""Delete a session once any in-flight turn for it has finished."""
		async with self.lock(session_id):
			return self.delete(session_id)

	def add_message(
		self,
		session_id: str,
		role: str,
		content: Optional[str],
		*,
		tool_calls: Optional[List[Dict[str, Any]]] = None,
		tool_call_id: Optional[str] = None,
		name: Optional[str] = None,
	) -> SessionState:
		"""Append a message and update the counters it affects.

		The first user message fixes the session domain; assistant messages
		that ask something count toward the readiness threshold.
		"""
		state = self.get(session_id)
		text = (content or "").strip()
		state.messages.append(
			SessionMessage(role=role, content=text, tool_calls=tool_calls, tool_call_id=tool_call_id, name=name)
		)
		if role == "user" and state.domain is None:
			state.domain = classify_domain(text)
			LOGGER.info("Session %s classified as %s", session_id, state.domain)
		elif role == "assistant" and not tool_calls and is_assistant_question(text):
			state.progress.questions_asked += 1
		return state

	def mark_ready(self, session_id: str) -> SessionState:
		state = self.get(session_id)
		state.progress.ready_for_tasks = True
		return state

	def store_tasks(self, session_id: str, tasks: List[TaskRecord]) -> SessionState:
		"""Record the task set most recently shown to the user."""
		state = self.get(session_id)
		state.last_task_set = [
			TaskRecord(title=task.title, description=task.description, time_estimate=task.time_estimate, id=task.id)
			for task in tasks
		]
		return state

	def mark_tasks_generated(self, session_id: str) -> SessionState:
		"""Flag that tasks were surfaced; the questioning counters start over."""
		state = self.get(session_id)
		state.progress.tasks_generated = True
		state.progress.questions_asked = 0
		state.progress.ready_for_tasks = False
		return state

	def reset_for_regeneration(self, session_id: str) -> SessionState:
		"""Return a session to the generation path for a brand new task set."""
		state = self.get(session_id)
		state.progress.tasks_generated = False
		state.edit_request = None
		return state

	def set_edit_request(self, session_id: str, target_index: Optional[int]) -> SessionState:
		state = self.get(session_id)
		state.edit_request = EditRequest(target_index=target_index)
		return state

	def clear_edit_request(self, session_id: str) -> Optional[EditRequest]:
		"""Remove and return the pending edit request."""
		state = self.get(session_id)
		request, state.edit_request = state.edit_request, None
		return request

	def store_website_insight(self, session_id: str, insight: WebsiteInsight) -> SessionState:
		state = self.get(session_id)
		state.website_insight = insight
		return state

	def record_website_failure(self, session_id: str, url: str) -> SessionState:
		"""Remember a URL whose analysis failed so it is not fetched again."""
		state = self.get(session_id)
		if url not in state.failed_website_urls:
			state.failed_website_urls.append(url)
		return state

	def messages_for_model(self, session_id: str, window: int = 6) -> List[Dict[str, Any]]:
		"""Return the base system prompt plus the most recent messages.

		Tool results orphaned from their tool call by the window cut are
		dropped so the replayed history stays well-formed.
		"""
		state = self.get(session_id)
		head: List[SessionMessage] = []
		rest = state.messages
		if rest and rest[0].role == "system":
			head, rest = [rest[0]], rest[1:]
		recent = rest[-window:] if window else list(rest)
		while recent and recent[0].role == "tool":
			recent = recent[1:]
		return [message.to_openai() for message in head + recent]
