"""Helpers to parse Chat Completions outputs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class ToolCall:
    """A function call requested by the model."""

    id: str
    name: str
    arguments: str

    def to_openai(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


def _first_message(completion: Any) -> Any:
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return None
    return getattr(choices[0], "message", None)


def extract_message_text(completion: Any) -> str:
    """Return the assistant text of the first choice, or an empty string."""
    message = _first_message(completion)
    if message is None:
        return ""
    return getattr(message, "content", None) or ""


def extract_tool_calls(completion: Any) -> List[ToolCall]:
    """Return the function tool calls of the first choice, in order."""
    message = _first_message(completion)
    calls: List[ToolCall] = []
    for item in getattr(message, "tool_calls", None) or []:
        function = getattr(item, "function", None)
        if function is None:
            continue
        calls.append(
            ToolCall(
                id=getattr(item, "id", "") or "",
                name=getattr(function, "name", "") or "",
                arguments=getattr(function, "arguments", "") or "{}",
            )
        )
    return calls


def extract_usage(completion: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the completion, if present."""
    usage = getattr(completion, "usage", None)
    return {
        "input_tokens": getattr(usage, "prompt_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "completion_tokens", None) if usage else None,
    }
