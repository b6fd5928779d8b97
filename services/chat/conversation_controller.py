"""Drive one chat turn: question, generate, edit, regenerate, or continue."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List, Mapping, Optional
from uuid import uuid4

from models.chat_response import ChatResponse
from models.session_models import SessionState
from models.task_record import TaskRecord
from services.chat.heuristics import detect_edit_request, is_new_project_request, is_ready_for_tasks
from services.chat.prompts import continuation_instruction, question_guidance, tool_followup_instruction
from services.chat.session_store import SessionStore
from services.chat.task_editor import TaskEditor
from services.chat.task_generator import TaskGenerator
from services.chat.tool_schema import FUNCTION_DEFINITION, FUNCTION_NAME
from services.openai.chat_gateway import ChatGateway, GatewayError, GatewayReply
from services.tasks.response_assembler import assemble_response
from services.tasks.task_validator import normalize_tasks
from services.web.insight_provider import WebsiteInsightError, WebsiteInsightProvider, extract_urls
from services.web.page_analyzer import detect_analysis_focus, summarize_analysis
from utils.config import ChatSettings

LOGGER = logging.getLogger(__name__)

QUESTION_ERROR_REPLY = (
	"I'm having a little trouble processing that. Could you tell me more about what you're looking to accomplish?"
)
SEARCH_ERROR_REPLY = "I'm having trouble accessing search results right now. Let me help based on what I already know."
CONTINUATION_ERROR_REPLY = "I'm sorry, I had trouble processing that. How can I help you with your current tasks?"
NO_RESULTS = "No search results were found for that query."


class ConversationController:
	"""Decide what a turn does and keep session state consistent with the reply.

	Phases follow the session progress flags: while gathering context the
	model asks questions (with at most one web tool round-trip); once ready
	a task set is generated; afterwards messages either edit one task,
	regenerate the set, or continue the conversation about it.
	"""

	def __init__(
		self,
		store: SessionStore,
		gateway: ChatGateway,
		insight_provider: WebsiteInsightProvider,
		settings: Optional[ChatSettings] = None,
	) -> None:
		self.store = store
		self.gateway = gateway
		self.insight_provider = insight_provider
		self.settings = settings or ChatSettings()
		self.generator = TaskGenerator(store, gateway, self.settings)
		self.editor = TaskEditor(store, gateway, self.settings)

	async def handle_message(
		self,
		session_id: Optional[str],
		message: str,
		client_tasks: Optional[Iterable[Mapping[str, Any]]] = None,
	) -> tuple[str, ChatResponse]:
		"""Run one turn and return the session id with the assembled response.

		Generation and editing store the tasks they surface themselves; the
		assembled response never writes tasks back into the session.
		"""
		session_id = session_id or uuid4().hex
		async with self.store.lock(session_id):
			state = self.store.get_or_create(session_id)
			if client_tasks:
				self._adopt_client_tasks(state, client_tasks)
			self.store.add_message(session_id, "user", message)
			try:
				raw, scan_reply = await self._next_action(state)
			except KeyError:
				if session_id in self.store:
					raise
				LOGGER.warning("Session %s was deleted during its turn", session_id)
				return session_id, ChatResponse(tasks=[], reply=None)
			response = assemble_response(
				raw,
				state.domain,
				website_known=state.website_insight is not None,
				extract_from_reply=scan_reply,
			)
			return session_id, response

	async def _next_action(self, state: SessionState) -> tuple[ChatResponse, bool]:
		"""Return the raw response and whether its reply may be scanned for tasks."""
		await self._analyze_website(state)
		latest = state.last_user_message

		if state.progress.tasks_generated:
			if is_new_project_request(latest):
				LOGGER.info("Session %s asked for a new task set", state.session_id)
				self.store.reset_for_regeneration(state.session_id)
				return await self.generator.generate(state), True
			edit = detect_edit_request(latest)
			if edit is not None:
				self.store.set_edit_request(state.session_id, edit.target_index)
			request = self.store.clear_edit_request(state.session_id)
			if request is not None:
				if request.target_index is None:
					LOGGER.info("Edit without a task number; regenerating all tasks")
					return await self.generator.generate(state), True
				return await self.editor.edit(state, request.target_index), True
			return await self._continue(state), False

		if self._evaluate_readiness(state):
			return await self.generator.generate(state), True
		return await self._ask_question(state), True

	def _evaluate_readiness(self, state: SessionState) -> bool:
		if state.progress.ready_for_tasks:
			return True
		ready = is_ready_for_tasks(
			user_turns=len(state.user_messages),
			questions_asked=state.progress.questions_asked,
			latest_message=state.last_user_message,
			min_user_turns=self.settings.min_user_turns,
			min_questions=self.settings.min_questions,
			detailed_message_words=self.settings.detailed_message_words,
		)
		if ready:
			self.store.mark_ready(state.session_id)
		return ready

	def _adopt_client_tasks(self, state: SessionState, client_tasks: Iterable[Mapping[str, Any]]) -> None:
		records = [TaskRecord.from_mapping(task) for task in client_tasks if isinstance(task, Mapping)]
		if not records:
			return
		self.store.store_tasks(state.session_id, normalize_tasks(records, state.domain))
		self.store.mark_tasks_generated(state.session_id)

	async def _analyze_website(self, state: SessionState) -> None:
		"""Analyze the first URL the user shared, once per session.

		A URL whose analysis failed is remembered and skipped on later turns.
		"""
		if state.domain != "website" or state.website_insight is not None:
			return
		urls: List[str] = [
			url
			for msg in state.user_messages
			for url in extract_urls(msg.content)
			if url not in state.failed_website_urls
		]
		if not urls:
			return
		focus = detect_analysis_focus([msg.content for msg in state.user_messages])
		try:
			insight = await self.insight_provider.analyze_for_tasks(urls[0], focus)
		except WebsiteInsightError as exc:
			LOGGER.error("Website analysis failed: %s", exc)
			self.store.record_website_failure(state.session_id, urls[0])
			return
		self.store.store_website_insight(state.session_id, insight)
		self.store.add_message(
			state.session_id,
			"system",
			f"I've analyzed the website {urls[0]}. Here's what I found:\n\n{summarize_analysis(insight.analysis_prompt)}",
		)

	async def _ask_question(self, state: SessionState) -> ChatResponse:
		messages = self.store.messages_for_model(state.session_id, self.settings.context_window)
		messages.append({"role": "system", "content": question_guidance(state.website_insight is not None)})
		try:
			reply = await self.gateway.complete(messages, tools=[FUNCTION_DEFINITION])
		except GatewayError as exc:
			LOGGER.error("Question generation failed: %s", exc)
			return self._say(state, QUESTION_ERROR_REPLY)

		if reply.tool_call is not None and reply.tool_call.name == FUNCTION_NAME:
			return await self._answer_with_search(state, reply)
		return self._say(state, reply.text or QUESTION_ERROR_REPLY)

	async def _answer_with_search(self, state: SessionState, reply: GatewayReply) -> ChatResponse:
		"""Run the single allowed tool round-trip and ask the model to follow up."""
		call = reply.tool_call
		try:
			arguments = json.loads(call.arguments or "{}")
		except json.JSONDecodeError:
			arguments = {}
		query = arguments.get("query") if isinstance(arguments, dict) else None
		query = (query or "").strip() or state.last_user_message
		LOGGER.info("Model requested web search: %r", query)

		result = await self.insight_provider.search(query)
		self.store.add_message(state.session_id, "assistant", reply.text, tool_calls=[call.to_openai()])
		self.store.add_message(state.session_id, "tool", result or NO_RESULTS, tool_call_id=call.id, name=call.name)

		messages = self.store.messages_for_model(state.session_id, self.settings.context_window)
		messages.append({"role": "system", "content": tool_followup_instruction()})
		try:
			followup = await self.gateway.complete(messages)
		except GatewayError as exc:
			LOGGER.error("Follow-up after web search failed: %s", exc)
			return self._say(state, SEARCH_ERROR_REPLY)
		return self._say(state, followup.text or SEARCH_ERROR_REPLY)

	async def _continue(self, state: SessionState) -> ChatResponse:
		messages = self.store.messages_for_model(state.session_id, self.settings.context_window)
		messages.append({"role": "system", "content": continuation_instruction(state.last_task_set)})
		try:
			reply = await self.gateway.complete(messages)
		except GatewayError as exc:
			LOGGER.error("Continuation failed: %s", exc)
			return self._say(state, CONTINUATION_ERROR_REPLY)
		return self._say(state, reply.text or CONTINUATION_ERROR_REPLY)

	def _say(self, state: SessionState, text: str) -> ChatResponse:
		self.store.add_message(state.session_id, "assistant", text)
		return ChatResponse(tasks=[], reply=text)
