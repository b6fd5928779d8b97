"""Recover task records from free-form model prose.

Three pattern families are tried in order, first match wins:

1. "Task N:" / "### Task" section headers. Each section yields one task
   whose title is a labelled, bold or leading fragment and whose time
   estimate comes from one of the estimate labels.
2. A single ``**Title:** ... **Description:** ...`` block.
3. A generic numbered list where each "1." / "2:" line starts a task and
   following lines accumulate into its description.
"""

from __future__ import annotations

import re
from typing import List, Optional

from models.task_record import TaskRecord

MAX_TITLE_LENGTH = 50

_INDICATOR_PATTERNS = (
    re.compile(r"(?:#{1,3}\s*)?Task\s*\d+[:)]", re.IGNORECASE),
    re.compile(r"(?:#{1,3}\s*)?\d+[:.]\s*[A-Z][^.]*(?:\.|$)"),
    re.compile(r"###\s*Task:?\s*.*?(?=###|$)", re.IGNORECASE | re.DOTALL),
    re.compile(r"\*\*Title:\*\*\s*.*?(?=\*\*|\n|$)", re.IGNORECASE),
)

_SECTION_HEADERS = (
    re.compile(r"(?:#{1,3}\s*)?Task\s*\d+[:)]", re.IGNORECASE),
    re.compile(r"###\s*Task:?\s*", re.IGNORECASE),
)

_LABELLED_TITLE = re.compile(r"(?:\*\*)?(?:Title:|Task:)(?:\*\*)?\s*([^*\n]+)", re.IGNORECASE)
_LEADING_TITLE = re.compile(r"\*\*([^*]+)\*\*|([^.:\n]+)")

_TIME_LABELS = (
    re.compile(r"(?:\*\*)?Time\s*Estimate(?:\*\*)?\s*(?::|is)?\s*(?:\*\*)?\s*([^\n]+)", re.IGNORECASE),
    re.compile(r"(?:\*\*)?Estimated\s*Time(?:\*\*)?\s*(?::|is)?\s*(?:\*\*)?\s*([^\n]+)", re.IGNORECASE),
    re.compile(r"(?:\*\*)?Duration(?:\*\*)?\s*(?::|is)\s*(?:\*\*)?\s*([^\n]+)", re.IGNORECASE),
    re.compile(r"Takes\s*about\s*([^\n]+)", re.IGNORECASE),
)

_DESCRIPTION_LABEL = re.compile(r"^\s*(?:\*\*)?Description:(?:\*\*)?\s*", re.IGNORECASE | re.MULTILINE)

_PAIR_DESCRIPTION = re.compile(r"\*\*Description:\*\*\s*([\s\S]*?)(?=\*\*Time|\*\*Estimated|$)", re.IGNORECASE)
_PAIR_TITLE = re.compile(r"\*\*Title:\*\*\s*([^*\n]+)", re.IGNORECASE)
_PAIR_TIME = (
    re.compile(r"\*\*Time\s*Estimate:\*\*\s*([^*\n]+)", re.IGNORECASE),
    re.compile(r"\*\*Estimated\s*Time:\*\*\s*([^*\n]+)", re.IGNORECASE),
)

_NUMBERED_LINE = re.compile(r"^(\d+)[:.]\s*(.+)$")
_BARE_ESTIMATE = re.compile(
    r"(?:time|duration|estimate)s?:?\s*(\d+\s*(?:hour|hr|minute|min|day)s?)", re.IGNORECASE
)


def has_task_indicators(text: str) -> bool:
    """Return True when the text contains any recognisable task marker."""
    return any(pattern.search(text) for pattern in _INDICATOR_PATTERNS)


def parse_tasks_from_text(text: Optional[str]) -> Optional[List[TaskRecord]]:
    """Return the tasks embedded in prose, or None when nothing task-like is found."""
    if not text or not isinstance(text, str):
        return None
    if not has_task_indicators(text):
        return None

    sections = _split_sections(text)
    if sections:
        tasks = [_task_from_section(section, index) for index, section in enumerate(sections)]
        return tasks or None

    paired = _task_from_labelled_pair(text)
    if paired is not None:
        return [paired]

    return _tasks_from_numbered_list(text)


def _split_sections(text: str) -> List[str]:
    for header in _SECTION_HEADERS:
        if header.search(text):
            sections = header.split(text)[1:]
            if sections:
                return sections
    return []


def _task_from_section(raw_section: str, index: int) -> TaskRecord:
    section = raw_section.strip()
    title = ""
    description = section
    estimate = ""

    for pattern in (_LABELLED_TITLE, _LEADING_TITLE):
        match = pattern.search(section)
        if match:
            title = next((group for group in match.groups() if group), "").strip()
            description = description.replace(match.group(0), "", 1).strip()
            break

    for pattern in _TIME_LABELS:
        match = pattern.search(section)
        if match:
            estimate = _clean_estimate(match.group(1))
            description = description.replace(match.group(0), "", 1).strip()
            break

    description = _DESCRIPTION_LABEL.sub("", description)
    description = re.sub(r"\n{3,}", "\n\n", description.replace("**", "")).strip()
    title, description = _checked_title(title, description, index)
    return TaskRecord(title=title, description=description, time_estimate=estimate)


def _task_from_labelled_pair(text: str) -> Optional[TaskRecord]:
    description_match = _PAIR_DESCRIPTION.search(text)
    if not description_match:
        return None
    title_match = _PAIR_TITLE.search(text)
    if not title_match:
        return None
    estimate = ""
    for pattern in _PAIR_TIME:
        time_match = pattern.search(text)
        if time_match:
            estimate = _clean_estimate(time_match.group(1))
            break
    title, description = _checked_title(title_match.group(1).strip(), description_match.group(1).strip(), 0)
    return TaskRecord(title=title, description=description, time_estimate=estimate)


def _tasks_from_numbered_list(text: str) -> Optional[List[TaskRecord]]:
    tasks: List[TaskRecord] = []
    current: Optional[TaskRecord] = None

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        numbered = _NUMBERED_LINE.match(line)
        if numbered:
            if current is not None:
                tasks.append(current)
            current = TaskRecord(title=numbered.group(2).replace("**", "").strip(), description="", time_estimate="")
            continue
        if current is None or not line:
            continue
        estimate = _BARE_ESTIMATE.search(line)
        if estimate:
            current.time_estimate = estimate.group(1)
        else:
            current.description += line + "\n"

    if current is not None:
        tasks.append(current)

    for index, task in enumerate(tasks):
        task.title, task.description = _checked_title(task.title, task.description.strip(), index)
    return tasks or None


def _checked_title(title: str, description: str, index: int) -> tuple[str, str]:
    """Replace empty or overlong titles with "Task N"; overlong text moves into the description."""
    if title and len(title) <= MAX_TITLE_LENGTH:
        return title, description
    if title and title not in description:
        description = f"{title}\n{description}".strip()
    return f"Task {index + 1}", description


def _clean_estimate(raw: str) -> str:
    estimate = raw.replace("*", "").strip()
    estimate = re.split(r"\.(?:\s|$)", estimate, maxsplit=1)[0]
    return estimate.strip(" .:-")
