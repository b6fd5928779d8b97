"""Pure text heuristics behind the conversation's decisions."""

from __future__ import annotations

import re
from typing import Optional, Tuple

from models.session_models import EditRequest
from services.tasks.questionnaire import is_rendered_questionnaire

DOMAIN_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
	("website", ("website", "seo", "web", "url")),
	("business", ("business", "company", "startup", "product", "market", "customer")),
	("education", ("learn", "study", "education", "course")),
	("personal", ("personal", "life", "habit", "goal")),
)

EXPLICIT_TASK_TRIGGERS = (
	"generate task", "create task", "make task",
	"give me task", "generate new task", "create new task",
	"i need task", "generate a plan", "create a plan",
	"make a plan", "create steps", "generate steps",
)

QUESTION_LEAD_INS = (
	"could you", "can you", "would you", "do you", "are you",
	"what is", "what are", "tell me more", "let me know",
)

NEW_PROJECT_PHRASES = (
	"new project", "different tasks", "new topic",
	"start over", "restart", "another set", "different set",
	"try something else", "forget that", "different topic",
)

_URL = re.compile(r"https?://[^\s]+", re.IGNORECASE)
_EDIT_VERB = re.compile(r"\b(edit|chang|modif|updat|revis|adjust|fix)\w*", re.IGNORECASE)
_ORDINAL_WORDS = {"first": 0, "second": 1, "third": 2}
_TASK_NUMBER = re.compile(r"\btask\s*#?\s*([1-3])\b", re.IGNORECASE)
_NUMBERED_TASK = re.compile(r"\b([1-3])(?:st|nd|rd|th)\s+task\b", re.IGNORECASE)
_WORD_TASK = re.compile(r"\b(first|second|third)\s+task\b", re.IGNORECASE)
_BARE_NUMBER = re.compile(r"\b([1-3])\b")


def classify_domain(text: str) -> str:
	"""Return the task domain for a first user message; a URL forces "website"."""
	content = (text or "").lower()
	if _URL.search(content):
		return "website"
	for domain, keywords in DOMAIN_KEYWORDS:
		if any(keyword in content for keyword in keywords):
			return domain
	return "general"


def is_explicit_task_request(text: str) -> bool:
	content = (text or "").lower()
	return any(trigger in content for trigger in EXPLICIT_TASK_TRIGGERS)


def is_assistant_question(text: str) -> bool:
	"""Return True when an assistant message asks the user something."""
	content = (text or "").strip()
	if not content:
		return False
	if content.endswith("?") or is_rendered_questionnaire(content):
		return True
	lowered = content.lower()
	return any(lead_in in lowered for lead_in in QUESTION_LEAD_INS)


def is_ready_for_tasks(
	*,
	user_turns: int,
	questions_asked: int,
	latest_message: str,
	min_user_turns: int = 2,
	min_questions: int = 2,
	detailed_message_words: int = 100,
) -> bool:
	"""Decide whether enough context exists to generate tasks.

	An explicit request always wins. Otherwise both the user-turn and
	question thresholds must be met, or the latest message must be a
	detailed answer given after at least one clarifying question.
	"""
	if is_explicit_task_request(latest_message):
		return True
	if user_turns >= min_user_turns and questions_asked >= min_questions:
		return True
	word_count = len((latest_message or "").split())
	return questions_asked >= 1 and word_count >= detailed_message_words


def is_new_project_request(text: str) -> bool:
	content = (text or "").lower()
	return any(phrase in content for phrase in NEW_PROJECT_PHRASES)


def detect_task_ordinal(text: str) -> Optional[int]:
	"""Return the 0-based task index a message refers to, if any."""
	content = text or ""
	for pattern in (_TASK_NUMBER, _NUMBERED_TASK):
		match = pattern.search(content)
		if match:
			return int(match.group(1)) - 1
	match = _WORD_TASK.search(content)
	if match:
		return _ORDINAL_WORDS[match.group(1).lower()]
	match = _BARE_NUMBER.search(content)
	if match:
		return int(match.group(1)) - 1
	return None


def detect_edit_request(text: str) -> Optional[EditRequest]:
	"""Return an EditRequest when a message asks to change existing tasks.

	An edit verb or a task ordinal signals intent; the ordinal, when
	present, selects the single task to change.
	"""
	ordinal = detect_task_ordinal(text)
	if ordinal is None and not _EDIT_VERB.search(text or ""):
		return None
	return EditRequest(target_index=ordinal)
