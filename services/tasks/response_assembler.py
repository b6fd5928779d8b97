"""Final shape guarantees for a chat turn before it leaves the service.

Whatever the conversation controller produced, the assembled response has
either no tasks or exactly three well-formed ones, never surfaces clarifying
questions as tasks, and never repeats task content in the reply. Assembling
an already-assembled response returns an equal response.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from models.chat_response import ChatResponse
from models.task_record import TaskRecord
from services.tasks.questionnaire import (
    has_website_tasks,
    is_questionnaire,
    is_rendered_questionnaire,
    render_questions_as_reply,
)
from services.tasks.task_parser import parse_tasks_from_text
from services.tasks.task_validator import TASK_COUNT, normalize_tasks

LOGGER = logging.getLogger(__name__)

EXTRACTED_CONFIRMATION = (
    "I've generated the following tasks based on our conversation. "
    "Would you like me to explain any of them in more detail?"
)
TASKS_CONFIRMATION = "Here are the tasks I've prepared for you."
DEFAULT_TASKS_REPLY = "I've prepared these tasks based on your request."
WEBSITE_URL_HINT = (
    "Since these tasks relate to website work, it would be helpful if you could share the website URL "
    "you're working with (optional). This will allow me to provide more specific guidance."
)


def _looks_like_questions(candidates: List[TaskRecord], normalized: List[TaskRecord]) -> bool:
    return is_questionnaire(candidates[:TASK_COUNT]) or is_questionnaire(normalized)


def assemble_response(
    response: Optional[ChatResponse],
    domain: Optional[str] = None,
    *,
    website_known: bool = False,
    extract_from_reply: bool = True,
) -> ChatResponse:
    """Return a response that satisfies the outward shape invariants.

    Args:
        response: Raw controller output; None is treated as an empty response.
        domain: Session domain, used to pad short task lists from the fallback catalog.
        website_known: Skip the website URL hint when the site was already analyzed.
        extract_from_reply: Look for a task list in a reply that carries no tasks.
            Off for follow-up conversation about tasks already shown.
    """
    if response is None:
        return ChatResponse(tasks=[], reply=None)

    tasks = list(response.tasks or [])
    reply = response.reply

    if extract_from_reply and not tasks and reply and not is_rendered_questionnaire(reply):
        extracted = parse_tasks_from_text(reply)
        if extracted:
            LOGGER.info("Found %d task(s) in the reply text", len(extracted))
            normalized = normalize_tasks(extracted, domain)
            if _looks_like_questions(extracted, normalized):
                LOGGER.info("Extracted content looks like questions; keeping reply format")
                return ChatResponse(tasks=[], reply=reply)
            tasks = normalized
            reply = EXTRACTED_CONFIRMATION

    if not tasks:
        return ChatResponse(tasks=[], reply=reply)

    normalized = normalize_tasks(tasks, domain)
    if _looks_like_questions(tasks, normalized):
        LOGGER.info("Detected questions in tasks array; converting to reply")
        return ChatResponse(tasks=[], reply=render_questions_as_reply(tasks[:TASK_COUNT]))

    if reply and parse_tasks_from_text(reply):
        reply = TASKS_CONFIRMATION

    if not website_known and has_website_tasks(normalized) and WEBSITE_URL_HINT not in (reply or ""):
        reply = f"{reply or DEFAULT_TASKS_REPLY} {WEBSITE_URL_HINT}"

    return ChatResponse(tasks=normalized, reply=reply)
