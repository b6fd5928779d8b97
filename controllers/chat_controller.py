"""Chat turn and session clearing helpers for the HTTP layer."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from fastapi import HTTPException, Request

from services.chat.conversation_controller import ConversationController
from services.chat.session_store import SessionStore

LOGGER = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred processing your request. Please try again."


def _controller(request: Request) -> ConversationController:
	state = request.app.state
	return ConversationController(
		store=state.session_store,
		gateway=state.chat_gateway,
		insight_provider=state.insight_provider,
		settings=state.chat_settings,
	)


async def handle_chat(
	request: Request,
	message: Any,
	session_id: Optional[str] = None,
	tasks: Optional[List[Mapping[str, Any]]] = None,
) -> Dict[str, Any]:
	"""Run one chat turn and return ``{sessionId, tasks, reply}``."""
	if not isinstance(message, str) or not message.strip():
		raise HTTPException(status_code=400, detail="Message is required and must be a non-empty string.")
	if session_id is not None and (not isinstance(session_id, str) or not session_id.strip()):
		raise HTTPException(status_code=400, detail="sessionId must be a non-empty string when provided.")

	try:
		resolved_id, response = await _controller(request).handle_message(
			session_id.strip() if session_id else None,
			message.strip(),
			client_tasks=tasks,
		)
	except Exception as exc:  # pylint: disable=broad-exception-caught
		LOGGER.exception("Error processing chat request: %s", exc)
		raise HTTPException(status_code=500, detail=GENERIC_ERROR) from exc

	return {"sessionId": resolved_id, **response.to_dict()}


async def clear_chat(request: Request, session_id: str) -> Dict[str, Any]:
	"""Forget a session after any turn in flight; unknown ids succeed as well."""
	store: SessionStore = request.app.state.session_store
	await store.clear(session_id)
	return {"success": True}
