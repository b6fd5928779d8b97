"""FastAPI routes for the task-planning chat."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.chat_controller import GENERIC_ERROR, clear_chat, handle_chat

router = APIRouter(prefix="/chat")


class ChatPayload(BaseModel):
	message: Optional[Any] = None
	sessionId: Optional[Any] = None
	tasks: Optional[List[Dict[str, Any]]] = None


@router.post("")
async def chat_route(request: Request, payload: ChatPayload):
	return await handle_chat(request, payload.message, payload.sessionId, payload.tasks)


@router.delete("/{session_id}")
async def clear_chat_route(request: Request, session_id: str):
	try:
		return await clear_chat(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=GENERIC_ERROR) from exc
