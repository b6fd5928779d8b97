import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest

from models.website_insight import WebsiteInsight
from services.chat.conversation_controller import ConversationController
from services.chat.session_store import SessionStore
from services.openai.chat_gateway import GatewayError, GatewayReply
from services.web.insight_provider import WebsiteInsightError
from utils.config import ChatSettings

BUSINESS_TASKS = [
    {
        "title": "Draft a customer survey",
        "description": "Write ten questions about buying habits and send the survey to 50 existing customers by email.",
        "timeEstimate": "2 hours",
    },
    {
        "title": "Map the sales funnel",
        "description": "List each stage from first contact to purchase and record conversion numbers for the last quarter.",
        "timeEstimate": "3 hours",
    },
    {
        "title": "Set quarterly revenue goals",
        "description": "Review last year's revenue per month and set a realistic growth target for each of the next three months.",
        "timeEstimate": "1 hour",
    },
]

OTHER_TASKS = [
    {
        "title": "Plan a weekly study schedule",
        "description": "Block two evenings per week for practice sessions and write the plan into a calendar.",
        "timeEstimate": "1 hour",
    },
    {
        "title": "Collect practice material",
        "description": "Gather three workbooks and one set of flash cards that match the exam syllabus.",
        "timeEstimate": "2 hours",
    },
    {
        "title": "Book a mock exam",
        "description": "Register for a timed mock exam four weeks from now and note the date in the calendar.",
        "timeEstimate": "30 minutes",
    },
]


def tasks_json(tasks: List[Dict[str, str]]) -> str:
    return json.dumps({"tasks": tasks})


@dataclass
class Sleep:
    """Scripted reply that stalls before answering, long enough to trip a timeout."""

    seconds: float
    text: Optional[str] = None


class FakeGateway:
    """Return scripted replies in order and record every request."""

    def __init__(self, *replies: Any) -> None:
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, messages, *, tools=None, json_object=False) -> GatewayReply:
        self.calls.append({"messages": messages, "tools": tools, "json_object": json_object})
        await asyncio.sleep(0)
        if not self.replies:
            raise GatewayError("No scripted reply left.")
        reply = self.replies.pop(0)
        if isinstance(reply, Sleep):
            await asyncio.sleep(reply.seconds)
            return GatewayReply(text=reply.text if reply.text is not None else tasks_json(BUSINESS_TASKS))
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, str):
            return GatewayReply(text=reply)
        return reply


class FakeInsightProvider:
    """Canned website analysis and search results."""

    def __init__(self, insight: Optional[WebsiteInsight] = None, search_result: str = "Search results for test") -> None:
        self.insight = insight
        self.search_result = search_result
        self.analyzed: List[str] = []
        self.queries: List[str] = []

    async def analyze_for_tasks(self, url: str, focus: str = "general") -> WebsiteInsight:
        self.analyzed.append(url)
        if self.insight is None:
            raise WebsiteInsightError(f"Failed to load {url}")
        self.insight.focus = focus
        return self.insight

    async def search(self, query: str) -> str:
        self.queries.append(query)
        return self.search_result


@pytest.fixture
def settings() -> ChatSettings:
    return ChatSettings(generation_timeout=0.2)


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def make_controller(store, settings):
    def _make(gateway: FakeGateway, provider: Optional[FakeInsightProvider] = None) -> ConversationController:
        return ConversationController(store, gateway, provider or FakeInsightProvider(), settings)

    return _make


def run_turn(controller: ConversationController, session_id: Optional[str], message: str, **kwargs):
    return asyncio.run(controller.handle_message(session_id, message, **kwargs))
