import pytest

from models.task_record import TaskRecord
from services.chat.heuristics import (
    classify_domain,
    detect_edit_request,
    detect_task_ordinal,
    is_assistant_question,
    is_explicit_task_request,
    is_new_project_request,
    is_ready_for_tasks,
)
from services.chat.session_store import SessionStore
from utils.config import ChatSettings


@pytest.mark.parametrize(
    "text, domain",
    [
        ("Can you check https://shop.example.org for me", "website"),
        ("my SEO is terrible", "website"),
        ("I run a small company", "business"),
        ("I want to learn Spanish", "education"),
        ("help me build a better habit", "personal"),
        ("hello", "general"),
    ],
)
def test_classify_domain(text, domain) -> None:
    assert classify_domain(text) == domain


def test_explicit_request_phrases() -> None:
    assert is_explicit_task_request("Please GENERATE TASKS for me")
    assert is_explicit_task_request("can you make a plan")
    assert not is_explicit_task_request("I am thinking about tasks")


def test_assistant_question_detection() -> None:
    assert is_assistant_question("What is your budget?")
    assert is_assistant_question("Could you share more details.")
    assert not is_assistant_question("Great, noted.")
    assert not is_assistant_question("")


def test_readiness_rules() -> None:
    assert is_ready_for_tasks(user_turns=1, questions_asked=0, latest_message="create steps for me")
    assert is_ready_for_tasks(user_turns=2, questions_asked=2, latest_message="ok")
    assert not is_ready_for_tasks(user_turns=2, questions_asked=1, latest_message="ok")
    assert not is_ready_for_tasks(user_turns=5, questions_asked=1, latest_message="ok", min_questions=3)
    long_answer = " ".join(["word"] * 100)
    assert is_ready_for_tasks(user_turns=1, questions_asked=1, latest_message=long_answer)
    assert not is_ready_for_tasks(user_turns=1, questions_asked=0, latest_message=long_answer)


@pytest.mark.parametrize(
    "text, index",
    [
        ("edit task 2", 1),
        ("Task #3 is too long", 2),
        ("the 1st task needs work", 0),
        ("make the second task shorter", 1),
        ("3", 2),
        ("nothing here", None),
        ("task 7", None),
    ],
)
def test_detect_task_ordinal(text, index) -> None:
    assert detect_task_ordinal(text) == index


def test_detect_edit_request() -> None:
    assert detect_edit_request("change task 1").target_index == 0
    assert detect_edit_request("please update these").target_index is None
    assert detect_edit_request("thanks, that looks good") is None
    assert detect_edit_request("prefix") is None


def test_new_project_request() -> None:
    assert is_new_project_request("Let's try something else")
    assert is_new_project_request("I want a DIFFERENT SET")
    assert not is_new_project_request("keep going")


def test_store_creates_lazily_with_system_prompt() -> None:
    store = SessionStore()
    state = store.get_or_create("abc")

    assert store.get_or_create("abc") is state
    assert len(store) == 1
    assert [message.role for message in state.messages] == ["system"]
    with pytest.raises(KeyError):
        store.get("missing")


def test_store_generates_session_ids() -> None:
    store = SessionStore()
    first, second = store.get_or_create(), store.get_or_create()
    assert first.session_id != second.session_id


def test_add_message_updates_progress() -> None:
    store = SessionStore()
    state = store.get_or_create("abc")

    store.add_message("abc", "user", "  I need help with my startup  ")
    store.add_message("abc", "user", "my web shop too")
    store.add_message("abc", "assistant", "What does it sell?")
    store.add_message("abc", "assistant", "", tool_calls=[{"id": "call_1"}])
    store.add_message("abc", "assistant", None)

    assert state.domain == "business"
    assert state.messages[1].content == "I need help with my startup"
    assert state.messages[-1].content == ""
    assert state.progress.questions_asked == 1


def test_generation_resets_counters() -> None:
    store = SessionStore()
    state = store.get_or_create("abc")
    state.progress.questions_asked = 3
    store.mark_ready("abc")

    store.mark_tasks_generated("abc")

    assert state.progress.tasks_generated is True
    assert state.progress.ready_for_tasks is False
    assert state.progress.questions_asked == 0


def test_store_tasks_copies_records() -> None:
    store = SessionStore()
    state = store.get_or_create("abc")
    task = TaskRecord(title="A", description="B", time_estimate="1 hour", id=1)

    store.store_tasks("abc", [task])
    task.title = "changed"

    assert state.last_task_set[0].title == "A"


def test_edit_request_round_trip() -> None:
    store = SessionStore()
    state = store.get_or_create("abc")
    state.progress.tasks_generated = True

    store.set_edit_request("abc", 1)
    assert store.clear_edit_request("abc").target_index == 1
    assert store.clear_edit_request("abc") is None

    store.set_edit_request("abc", None)
    store.reset_for_regeneration("abc")
    assert state.edit_request is None
    assert state.progress.tasks_generated is False


def test_delete_is_idempotent() -> None:
    store = SessionStore()
    store.get_or_create("abc")
    lock = store.lock("abc")

    assert store.delete("abc") is True
    assert store.delete("abc") is False
    assert "abc" not in store
    assert store.lock("abc") is lock


def test_website_failures_are_recorded_once() -> None:
    store = SessionStore()
    store.get_or_create("abc")

    store.record_website_failure("abc", "https://example.com")
    state = store.record_website_failure("abc", "https://example.com")

    assert state.failed_website_urls == ["https://example.com"]


def test_messages_for_model_window() -> None:
    store = SessionStore()
    store.get_or_create("abc")
    store.add_message("abc", "user", "one")
    store.add_message("abc", "assistant", "", tool_calls=[{"id": "call_1", "type": "function"}])
    store.add_message("abc", "tool", "result", tool_call_id="call_1", name="search_web")
    store.add_message("abc", "assistant", "two")
    store.add_message("abc", "user", "three")

    messages = store.messages_for_model("abc", window=3)

    assert messages[0]["role"] == "system"
    assert [message["role"] for message in messages[1:]] == ["assistant", "user"]
    full = store.messages_for_model("abc", window=10)
    assert full[2]["tool_calls"] == [{"id": "call_1", "type": "function"}]
    assert full[3] == {"role": "tool", "content": "result", "tool_call_id": "call_1", "name": "search_web"}


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_MODEL", "gpt-test")
    monkeypatch.setenv("TASK_GENERATION_TIMEOUT", "2.5")
    monkeypatch.setenv("READY_MIN_QUESTIONS", "3")
    monkeypatch.delenv("CONTEXT_WINDOW_MESSAGES", raising=False)

    settings = ChatSettings.from_env()

    assert settings.model == "gpt-test"
    assert settings.generation_timeout == 2.5
    assert settings.min_questions == 3
    assert settings.context_window == 6


@pytest.mark.parametrize("value", ["soon", "-1"])
def test_settings_reject_bad_numbers(monkeypatch, value) -> None:
    monkeypatch.setenv("READY_MIN_USER_TURNS", value)
    with pytest.raises(RuntimeError, match="READY_MIN_USER_TURNS"):
        ChatSettings.from_env()
