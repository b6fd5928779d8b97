import json

import pytest

from models.task_record import TaskRecord
from services.tasks.task_parser import has_task_indicators, parse_tasks_from_text
from services.tasks.task_payload import load_json_payload, resolve_task_payload, tasks_from_json


def test_task_headers_split_into_sections() -> None:
    text = (
        "Task 1: Draft a survey\nWrite ten questions for customers.\nTime Estimate: 2 hours\n\n"
        "Task 2: Map the funnel\nList every stage.\nEstimated Time: 3 hours"
    )
    tasks = parse_tasks_from_text(text)

    assert [task.title for task in tasks] == ["Draft a survey", "Map the funnel"]
    assert tasks[0].description == "Write ten questions for customers."
    assert [task.time_estimate for task in tasks] == ["2 hours", "3 hours"]


def test_bold_labels_are_cleaned() -> None:
    text = "### Task 1: **Fix the checkout**\n**Description:** Remove the extra form step.\n**Time Estimate:** 1 hour."
    tasks = parse_tasks_from_text(text)

    assert tasks[0].title == "Fix the checkout"
    assert tasks[0].time_estimate == "1 hour"
    assert "**" not in tasks[0].description
    assert tasks[0].description.startswith("Remove the extra form step")


def test_labelled_pair() -> None:
    text = "**Title:** Launch newsletter\n**Description:** Write the first issue and send it.\n**Time Estimate:** 2 hours"
    tasks = parse_tasks_from_text(text)

    assert tasks == [TaskRecord(title="Launch newsletter", description="Write the first issue and send it.", time_estimate="2 hours")]


def test_numbered_list_with_bare_estimate() -> None:
    text = "1. Draft a customer survey\nSend it to 50 customers.\nTime: 2 hours\n2. Map the funnel\nList every stage."
    tasks = parse_tasks_from_text(text)

    assert [task.title for task in tasks] == ["Draft a customer survey", "Map the funnel"]
    assert tasks[0].description == "Send it to 50 customers."
    assert tasks[0].time_estimate == "2 hours"
    assert tasks[1].time_estimate == ""


def test_long_title_moves_into_description() -> None:
    long_title = "Rewrite every product description so it speaks to first-time buyers directly"
    tasks = parse_tasks_from_text(f"1. {long_title}\nKeep each under 80 words.")

    assert tasks[0].title == "Task 1"
    assert tasks[0].description.startswith(long_title)


def test_plain_prose_has_no_tasks() -> None:
    assert not has_task_indicators("what would you like to focus on first?")
    assert parse_tasks_from_text("what would you like to focus on first?") is None
    assert parse_tasks_from_text("") is None
    assert parse_tasks_from_text(None) is None


def test_json_payload_tolerates_code_fence() -> None:
    assert load_json_payload('```json\n{"tasks": []}\n```') == {"tasks": []}
    with pytest.raises(json.JSONDecodeError):
        load_json_payload("not json")


@pytest.mark.parametrize(
    "payload",
    [
        [{"title": "A", "description": "B", "timeEstimate": "1 hour"}],
        {"tasks": [{"Title": "A", "Description": "B", "Time Estimate": "1 hour"}]},
        {"tasks": {"first": {"title": "A", "description": "B", "time_estimate": "1 hour"}}},
        {"title": "A", "description": "B", "TimeEstimate": "1 hour"},
    ],
)
def test_tasks_from_json_shapes(payload) -> None:
    assert tasks_from_json(payload) == [TaskRecord(title="A", description="B", time_estimate="1 hour")]


def test_tasks_from_json_without_tasks() -> None:
    assert tasks_from_json({"reply": "hello"}) is None
    assert tasks_from_json("just a string") is None


def test_resolve_reads_tasks_from_reply_field() -> None:
    raw = json.dumps({"reply": "Task 1: Call the bank\nAsk about loan options.\nTakes about 30 minutes"})
    tasks = resolve_task_payload(raw)

    assert tasks[0].title == "Call the bank"
    assert tasks[0].time_estimate == "30 minutes"


def test_resolve_falls_back_to_prose() -> None:
    tasks = resolve_task_payload("1. Call the bank\n2. Visit the branch")
    assert [task.title for task in tasks] == ["Call the bank", "Visit the branch"]
    assert resolve_task_payload('{"reply": "Sure, what is your budget?"}') is None
    assert resolve_task_payload("   ") is None
