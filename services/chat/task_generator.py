"""Generate a fresh three-task set for a conversation."""

from __future__ import annotations

import asyncio
import logging
from typing import List

from models.chat_response import ChatResponse
from models.session_models import SessionState
from models.task_record import TaskRecord
from services.chat.prompts import generation_prompt, render_task_summary
from services.chat.session_store import SessionStore
from services.openai.chat_gateway import ChatGateway, GatewayError
from services.tasks.fallback_catalog import get_fallback_tasks_by_type
from services.tasks.questionnaire import is_questionnaire, render_questions_as_reply
from services.tasks.task_payload import resolve_task_payload
from services.tasks.task_validator import TASK_COUNT, normalize_tasks
from utils.config import ChatSettings

LOGGER = logging.getLogger(__name__)

GENERATED_REPLY = "Here are some tasks based on our conversation. Would you like to make any adjustments to these tasks?"
GENERATION_ERROR_REPLY = "I encountered an error while generating tasks. Here are some general suggestions instead."
UNPARSEABLE_REPLY = "I had some trouble generating custom tasks. Here are some suggestions to get you started."


class TaskGenerator:
	"""Ask the model for a task set and commit a canonical one to the session."""

	def __init__(self, store: SessionStore, gateway: ChatGateway, settings: ChatSettings) -> None:
		self.store = store
		self.gateway = gateway
		self.settings = settings

	async def generate(self, state: SessionState) -> ChatResponse:
		"""Return three tasks, or a questionnaire reply when the model asked questions.

		Gateway failures, timeouts, and replies with no recoverable tasks all
		surface the domain's fallback tasks instead of an error.
		"""
		messages = self.store.messages_for_model(state.session_id, self.settings.context_window)
		messages.append({"role": "system", "content": generation_prompt(state.website_insight)})
		LOGGER.info("Generating tasks for session %s (domain=%s)", state.session_id, state.domain)
		try:
			reply = await asyncio.wait_for(
				self.gateway.complete(messages, json_object=True),
				timeout=self.settings.generation_timeout,
			)
		except asyncio.TimeoutError:
			LOGGER.error("Task generation timed out after %.1fs", self.settings.generation_timeout)
			return self._commit(state, get_fallback_tasks_by_type(state.domain), GENERATION_ERROR_REPLY)
		except GatewayError as exc:
			LOGGER.error("Task generation failed: %s", exc)
			return self._commit(state, get_fallback_tasks_by_type(state.domain), GENERATION_ERROR_REPLY)

		candidates = resolve_task_payload(reply.text)
		if not candidates:
			LOGGER.warning("No tasks found in generation reply; using fallback tasks")
			return self._commit(state, get_fallback_tasks_by_type(state.domain), UNPARSEABLE_REPLY)

		tasks = normalize_tasks(candidates, state.domain)
		if is_questionnaire(candidates[:TASK_COUNT]) or is_questionnaire(tasks):
			LOGGER.info("Generation reply contained questions instead of tasks")
			text = render_questions_as_reply(candidates[:TASK_COUNT])
			self.store.add_message(state.session_id, "assistant", text)
			return ChatResponse(tasks=[], reply=text)
		return self._commit(state, tasks, GENERATED_REPLY)

	def _commit(self, state: SessionState, tasks: List[TaskRecord], reply: str) -> ChatResponse:
		tasks = normalize_tasks(tasks, state.domain)
		self.store.store_tasks(state.session_id, tasks)
		self.store.add_message(state.session_id, "assistant", f"{reply}\n\n{render_task_summary(tasks)}")
		self.store.mark_tasks_generated(state.session_id)
		return ChatResponse(tasks=tasks, reply=reply)
