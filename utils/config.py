import os
from dataclasses import dataclass
from typing import Callable, TypeVar

T = TypeVar("T", int, float)


def _env_number(name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is not a valid {cast.__name__}.") from exc
    if value < 0:
        raise RuntimeError(f"{name}={raw!r} must not be negative.")
    return value


@dataclass(frozen=True)
class ChatSettings:
    """
    Tunable knobs for the task-planning conversation.

    - `model` is the Chat Completions model used for every call.
    - `generation_timeout` bounds the task generation call in seconds; a
      timeout is handled exactly like any other generation failure.
    - `min_user_turns` / `min_questions` are the dual readiness threshold.
    - `detailed_message_words` lets a long answer to a clarifying question
      count as enough context.
    - `context_window` is the number of recent non-system messages replayed.
    - `web_timeout` bounds page fetches and text searches in seconds.
    """

    model: str = "gpt-4o-mini"
    generation_timeout: float = 15.0
    min_user_turns: int = 2
    min_questions: int = 2
    detailed_message_words: int = 100
    context_window: int = 6
    web_timeout: float = 20.0

    @classmethod
    def from_env(cls) -> "ChatSettings":
        """Build settings from the process environment.

        Raises:
            RuntimeError: If a numeric variable is present but malformed.
        """
        return cls(
            model=(os.getenv("OPENAI_MODEL") or "").strip() or cls.model,
            generation_timeout=_env_number("TASK_GENERATION_TIMEOUT", cls.generation_timeout, float),
            min_user_turns=_env_number("READY_MIN_USER_TURNS", cls.min_user_turns, int),
            min_questions=_env_number("READY_MIN_QUESTIONS", cls.min_questions, int),
            detailed_message_words=_env_number("DETAILED_MESSAGE_WORDS", cls.detailed_message_words, int),
            context_window=_env_number("CONTEXT_WINDOW_MESSAGES", cls.context_window, int),
            web_timeout=_env_number("WEB_REQUEST_TIMEOUT", cls.web_timeout, float),
        )
