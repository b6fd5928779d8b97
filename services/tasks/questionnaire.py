"""Detect task lists that are really clarifying questions, and render them as a reply.

The scoring is deliberately overlapping: thin task bodies are the strongest
signal that the model asked questions instead of producing work, so any
doubt resolves toward treating the list as questions.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, List, Sequence

from models.task_record import TaskRecord

QUESTIONNAIRE_LEAD = "Before I can provide specific tasks, I need to understand more about your situation:"
QUESTIONNAIRE_CLOSING = "Once you provide this information, I'll be able to suggest specific, tailored tasks for you."

_STRONG_QUESTION_PATTERNS = (
    re.compile(r"\?$"),
    re.compile(r"^(what|how|where|when|why|which|who|whom)\b", re.IGNORECASE),
    re.compile(r"\b(do|does|did|is|are|am|can|could|would|should|will|have|has|had)\s+(you|your|we|I)\b", re.IGNORECASE),
    re.compile(r"\btell me\b", re.IGNORECASE),
    re.compile(r"\blet me know\b", re.IGNORECASE),
)

_ACTION_PATTERNS = (
    re.compile(r"^(create|build|develop|implement|set up|configure|optimize|improve|fix|add|remove|update|modify)", re.IGNORECASE),
    re.compile(r"\bstep\s*\d+\b", re.IGNORECASE),
    re.compile(r"\b(hour|minute|day|week)\b", re.IGNORECASE),
    re.compile(r"\bby\s+(using|implementing|adding|following)", re.IGNORECASE),
)

_COMMAND_TITLE = re.compile(r"^(create|implement|build|develop|improve)", re.IGNORECASE)

_WEBSITE_KEYWORDS = (
    "website", "web page", "webpage", "web site", "site", "landing page",
    "homepage", "blog", "seo", "search engine", "domain", "url", "link",
    "html", "css", "javascript", "web design", "web development", "wordpress",
    "analytics", "google analytics", "sitemap", "hosting", "traffic",
    "browser", "online presence", "web content", "meta tag",
)


def _is_strong_question(title: str) -> bool:
    return any(pattern.search(title) for pattern in _STRONG_QUESTION_PATTERNS)


def _is_action(task: TaskRecord) -> bool:
    return any(
        pattern.search(task.title) or (task.description and pattern.search(task.description))
        for pattern in _ACTION_PATTERNS
    )


def _is_user_query(task: TaskRecord) -> bool:
    title = task.title.lower()
    return ("your" in title or "you " in title) and "should" not in title and len(task.description) < 20


def is_questionnaire(tasks: Sequence[TaskRecord]) -> bool:
    """Return True when a candidate task list reads as clarifying questions.

    Pure function of the task titles and descriptions.
    """
    if not tasks:
        return False

    question_count = sum(1 for task in tasks if _is_strong_question(task.title))
    task_count = sum(1 for task in tasks if _is_action(task))
    user_query_count = sum(1 for task in tasks if _is_user_query(task))
    indicators = question_count + user_query_count

    if indicators > task_count:
        return True
    if indicators >= math.ceil(len(tasks) / 2):
        return True
    return all(len(task.description) < 30 for task in tasks) and indicators > 0


def render_questions_as_reply(tasks: Iterable[TaskRecord]) -> str:
    """Render question-like tasks as a numbered conversational list."""
    items: List[str] = []
    for index, task in enumerate(tasks, start=1):
        title = task.title.strip()
        if not title.endswith(("?", ".", "!")) and not _COMMAND_TITLE.match(title):
            title += "?"
        lines = [f"{index}. {title}"]
        if task.description and task.description.strip():
            lines.append(f"   {task.description.strip()}")
        items.append("\n".join(lines))
    if not items:
        return ""
    return f"{QUESTIONNAIRE_LEAD}\n\n" + "\n\n".join(items) + f"\n\n{QUESTIONNAIRE_CLOSING}"


def is_rendered_questionnaire(reply: str | None) -> bool:
    """Return True for replies produced by `render_questions_as_reply`."""
    return bool(reply) and reply.startswith(QUESTIONNAIRE_LEAD)


def is_website_related_task(task: TaskRecord) -> bool:
    if not task.title or not task.description:
        return False
    combined = f"{task.title} {task.description}".lower()
    return any(keyword in combined for keyword in _WEBSITE_KEYWORDS)


def has_website_tasks(tasks: Iterable[TaskRecord]) -> bool:
    """Return True if any task is about website work and would benefit from the site URL."""
    return any(is_website_related_task(task) for task in tasks)
