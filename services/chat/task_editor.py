"""Apply a focused edit to exactly one task of the current set."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping

from models.chat_response import ChatResponse
from models.session_models import SessionState
from models.task_record import TaskRecord
from services.chat.prompts import edit_prompt, render_task_summary
from services.chat.session_store import SessionStore
from services.openai.chat_gateway import ChatGateway, GatewayError
from services.tasks.fallback_catalog import get_fallback_task, get_fallback_tasks_by_type
from services.tasks.task_payload import load_json_payload, tasks_from_json
from services.tasks.task_validator import TASK_COUNT, coerce_task, normalize_tasks
from utils.config import ChatSettings

LOGGER = logging.getLogger(__name__)

UPDATED_PREFIX = "Updated: "
UPDATED_NOTE = "\n\nThis task has been reviewed and updated."


def edited_reply(index: int) -> str:
	return (
		f"I've updated Task {index + 1} as requested, while keeping the other tasks unchanged. "
		"Would you like to make any other changes?"
	)


def edit_failed_reply(index: int) -> str:
	return (
		f"I couldn't apply that edit, so I replaced Task {index + 1} with a suggested alternative "
		"and kept the other tasks unchanged. Would you like to try describing the change differently?"
	)


def _same_content(left: TaskRecord, right: TaskRecord) -> bool:
	return (left.title, left.description, left.time_estimate) == (right.title, right.description, right.time_estimate)


def _candidate_from_payload(payload: Any) -> TaskRecord:
	"""Return the task carried by an edit reply; fields may be missing."""
	if isinstance(payload, Mapping) and isinstance(payload.get("task"), Mapping):
		payload = payload["task"]
	if isinstance(payload, Mapping) and not isinstance(payload.get("tasks"), (list, Mapping)):
		return TaskRecord.from_mapping(payload)
	found = tasks_from_json(payload)
	return found[0] if found else TaskRecord(title="", description="", time_estimate="")


def mark_as_updated(task: TaskRecord) -> TaskRecord:
	"""Make a visible change to a task the model returned unmodified."""
	title = task.title if task.title.startswith(UPDATED_PREFIX) else f"{UPDATED_PREFIX}{task.title}"
	return TaskRecord(
		title=title,
		description=f"{task.description}{UPDATED_NOTE}",
		time_estimate=task.time_estimate,
		id=task.id,
	)


class TaskEditor:
	"""Rewrite one task through the model while leaving its siblings untouched."""

	def __init__(self, store: SessionStore, gateway: ChatGateway, settings: ChatSettings) -> None:
		self.store = store
		self.gateway = gateway
		self.settings = settings

	async def edit(self, state: SessionState, index: int) -> ChatResponse:
		"""Edit the task at a 0-based index using the latest user message.

		Only the targeted task and the user's request are sent to the model.
		On failure the targeted slot receives the domain's fallback task; the
		other two tasks are returned exactly as stored.
		"""
		index = max(0, min(index, TASK_COUNT - 1))
		current = normalize_tasks(state.last_task_set or get_fallback_tasks_by_type(state.domain), state.domain)
		original = current[index]
		instruction = state.last_user_message
		LOGGER.info("Editing task %d for session %s", index + 1, state.session_id)

		failed = False
		try:
			reply = await asyncio.wait_for(
				self.gateway.complete(
					[{"role": "system", "content": edit_prompt(original, index, instruction)}],
					json_object=True,
				),
				timeout=self.settings.generation_timeout,
			)
			candidate = _candidate_from_payload(load_json_payload(reply.text))
			edited = coerce_task(
				TaskRecord(
					title=candidate.title or original.title,
					description=candidate.description or original.description,
					time_estimate=candidate.time_estimate or original.time_estimate,
					id=original.id,
				),
				index,
			)
		except (GatewayError, asyncio.TimeoutError, json.JSONDecodeError) as exc:
			LOGGER.error("Error editing task %d: %s", index + 1, exc)
			failed = True
			substitute = get_fallback_task(state.domain, index)
			edited = TaskRecord(
				title=substitute.title,
				description=substitute.description,
				time_estimate=substitute.time_estimate,
				id=original.id,
			)

		if _same_content(edited, original):
			LOGGER.info("Edit left task %d unchanged; marking it as reviewed", index + 1)
			edited = mark_as_updated(edited)

		tasks = list(current)
		tasks[index] = edited
		text = edit_failed_reply(index) if failed else edited_reply(index)
		self.store.store_tasks(state.session_id, tasks)
		self.store.add_message(state.session_id, "assistant", f"{text}\n\n{render_task_summary(tasks)}")
		return ChatResponse(tasks=tasks, reply=text)
