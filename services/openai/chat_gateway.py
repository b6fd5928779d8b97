"""Language model gateway over the OpenAI Chat Completions API."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from services.openai.response_parser import ToolCall, extract_message_text, extract_tool_calls, extract_usage

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = "gpt-4o-mini"


class GatewayError(RuntimeError):
    """Raised when the language model cannot produce a usable completion."""


@dataclass
class GatewayReply:
    """Either assistant text or a list of requested tool calls."""

    text: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)

    @property
    def tool_call(self) -> Optional[ToolCall]:
        return self.tool_calls[0] if self.tool_calls else None


class ChatGateway:
    """Send role-tagged messages to the model and normalize what comes back."""

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_MODEL) -> None:
        if client is None:
            raise ValueError("OpenAI AsyncOpenAI client is required.")
        self.client = client
        self.model = model

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        *,
        tools: Optional[List[Dict[str, Any]]] = None,
        json_object: bool = False,
    ) -> GatewayReply:
        """Return the model's reply for a message list.

        Args:
            messages: Chat Completions messages; null content is sent as "".
            tools: Optional function tool declarations (tool_choice is "auto").
            json_object: Ask for a JSON-object-shaped reply.

        Returns:
            A GatewayReply carrying the text and any tool calls.

        Raises:
            GatewayError: If the API call fails or returns no choices.
        """
        request: Dict[str, Any] = {
            "model": self.model,
            "messages": [{**message, "content": message.get("content") or ""} for message in messages],
        }
        if tools:
            request["tools"] = tools
            request["tool_choice"] = "auto"
        if json_object:
            request["response_format"] = {"type": "json_object"}

        start = time.time()
        try:
            completion = await self.client.chat.completions.create(**request)
        except Exception as exc:
            LOGGER.error("OpenAI Chat Completions error: %s", exc)
            raise GatewayError(f"Chat completion failed: {exc}") from exc

        if not getattr(completion, "choices", None):
            raise GatewayError("Chat completion returned no choices.")

        usage = extract_usage(completion)
        LOGGER.info(
            "Chat completion latency: %.3fs (input_tokens=%s, output_tokens=%s)",
            time.time() - start,
            usage["input_tokens"],
            usage["output_tokens"],
        )
        return GatewayReply(text=extract_message_text(completion).strip(), tool_calls=extract_tool_calls(completion))
