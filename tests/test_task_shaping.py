from models.chat_response import ChatResponse
from models.task_record import TaskRecord
from services.tasks.fallback_catalog import get_fallback_task, get_fallback_tasks_by_type
from services.tasks.questionnaire import (
    QUESTIONNAIRE_LEAD,
    has_website_tasks,
    is_questionnaire,
    is_rendered_questionnaire,
    render_questions_as_reply,
)
from services.tasks.response_assembler import (
    EXTRACTED_CONFIRMATION,
    TASKS_CONFIRMATION,
    WEBSITE_URL_HINT,
    assemble_response,
)
from services.tasks.task_validator import (
    DEFAULT_DESCRIPTION,
    DEFAULT_TIME_ESTIMATE,
    DEFAULT_TITLE,
    coerce_task,
    normalize_tasks,
)

ACTION_TASKS = [
    TaskRecord(title="Draft a customer survey", description="Write ten questions and send them to 50 customers.", time_estimate="2 hours"),
    TaskRecord(title="Map the sales funnel", description="List every stage from first contact to purchase.", time_estimate="3 hours"),
    TaskRecord(title="Set revenue goals", description="Pick a monthly growth target for the next quarter.", time_estimate="1 hour"),
]

QUESTION_TASKS = [
    TaskRecord(title="What is your budget?", description="", time_estimate=""),
    TaskRecord(title="Who are your customers?", description="", time_estimate=""),
    TaskRecord(title="How much time do you have?", description="", time_estimate=""),
]


def test_fallback_catalog_returns_fresh_copies() -> None:
    first = get_fallback_tasks_by_type("education")
    first[0].title = "changed"

    again = get_fallback_tasks_by_type("education")
    assert again[0].title == "Create a Structured Learning Plan"
    assert [task.id for task in again] == [1, 2, 3]


def test_fallback_catalog_unknown_domain_is_general() -> None:
    assert get_fallback_tasks_by_type("gardening") == get_fallback_tasks_by_type("general")
    assert get_fallback_tasks_by_type(None) == get_fallback_tasks_by_type("general")
    assert get_fallback_task("business", 7) == get_fallback_tasks_by_type("business")[2]


def test_coerce_fills_defaults() -> None:
    task = coerce_task({"title": "  ", "timeEstimate": "somewhere between two and five working days"}, 1)

    assert task == TaskRecord(title=DEFAULT_TITLE, description=DEFAULT_DESCRIPTION, time_estimate=DEFAULT_TIME_ESTIMATE, id=2)


def test_normalize_pads_and_truncates() -> None:
    padded = normalize_tasks(ACTION_TASKS[:1], "personal")
    assert len(padded) == 3
    assert padded[1] == get_fallback_task("personal", 1)

    truncated = normalize_tasks(ACTION_TASKS + ACTION_TASKS, "business")
    assert [task.title for task in truncated] == [task.title for task in ACTION_TASKS]
    assert all(task.title and task.description and task.time_estimate for task in truncated)


def test_normalize_is_idempotent() -> None:
    once = normalize_tasks([{"Title": "Call the bank"}], "business")
    assert normalize_tasks(once, "business") == once


def test_questionnaire_detection() -> None:
    assert is_questionnaire(QUESTION_TASKS)
    assert not is_questionnaire(ACTION_TASKS)
    assert not is_questionnaire([])


def test_render_questions_as_reply() -> None:
    reply = render_questions_as_reply([TaskRecord(title="Tell me about your audience", description="", time_estimate="")])

    assert reply.startswith(QUESTIONNAIRE_LEAD)
    assert "1. Tell me about your audience?" in reply
    assert is_rendered_questionnaire(reply)


def test_website_task_detection() -> None:
    website = TaskRecord(title="Fix broken links", description="Check every page of the website.", time_estimate="1 hour")
    assert has_website_tasks([website])
    assert not has_website_tasks(ACTION_TASKS)


def test_assembler_extracts_tasks_from_reply() -> None:
    reply = "1. Draft a customer survey\nSend it to 50 customers.\n2. Map the sales funnel\n3. Set revenue goals"
    response = assemble_response(ChatResponse(reply=reply), "business")

    assert [task.title for task in response.tasks] == ["Draft a customer survey", "Map the sales funnel", "Set revenue goals"]
    assert response.reply == EXTRACTED_CONFIRMATION

    untouched = assemble_response(ChatResponse(reply=reply), "business", extract_from_reply=False)
    assert untouched == ChatResponse(tasks=[], reply=reply)


def test_assembler_turns_question_tasks_into_reply() -> None:
    response = assemble_response(ChatResponse(tasks=list(QUESTION_TASKS), reply="Here you go"), "general")

    assert response.tasks == []
    assert response.reply.startswith(QUESTIONNAIRE_LEAD)


def test_assembler_replaces_reply_that_repeats_tasks() -> None:
    response = assemble_response(ChatResponse(tasks=list(ACTION_TASKS), reply="Task 1: Draft a customer survey"), "business")

    assert response.reply == TASKS_CONFIRMATION
    assert response.tasks == normalize_tasks(ACTION_TASKS, "business")


def test_assembler_website_hint_once() -> None:
    tasks = get_fallback_tasks_by_type("website")

    hinted = assemble_response(ChatResponse(tasks=tasks, reply="Done."), "website")
    assert hinted.reply.endswith(WEBSITE_URL_HINT)
    assert assemble_response(hinted, "website").reply.count(WEBSITE_URL_HINT) == 1

    known = assemble_response(ChatResponse(tasks=tasks, reply="Done."), "website", website_known=True)
    assert known.reply == "Done."


def test_assembler_is_idempotent() -> None:
    responses = [
        ChatResponse(reply="1. Draft a customer survey\n2. Map the sales funnel"),
        ChatResponse(tasks=list(QUESTION_TASKS)),
        ChatResponse(tasks=get_fallback_tasks_by_type("website"), reply=None),
        ChatResponse(tasks=list(ACTION_TASKS[:2]), reply="Here they are."),
        ChatResponse(reply="What would you like to focus on?"),
    ]
    for response in responses:
        once = assemble_response(response, "website")
        assert assemble_response(once, "website") == once


def test_assembler_handles_empty() -> None:
    assert assemble_response(None) == ChatResponse(tasks=[], reply=None)
    assert assemble_response(ChatResponse()) == ChatResponse(tasks=[], reply=None)
