"""Prompt helpers for questioning, task generation, editing and follow-up chat."""

from __future__ import annotations

from typing import Iterable, Optional

from models.task_record import TaskRecord
from models.website_insight import WebsiteInsight


def base_system_prompt() -> str:
	"""Return the system prompt every session starts with."""
	return (
		"You are an AI assistant specializing in task creation for any domain. "
		"Your goal is to help users break down complex goals into actionable tasks. Follow this process:\n\n"
		"1) Ask targeted clarifying questions to understand the user's specific needs. "
		"Focus on their goals and challenges. Keep questions brief and direct.\n\n"
		"2) After gathering basic information, generate EXACTLY 3 specific, actionable tasks "
		"that directly address the user's goal.\n\n"
		"3) Each task must include: (a) A clear, specific title describing what needs to be done "
		"(b) A detailed description with step-by-step instructions (c) A realistic time estimate.\n\n"
		"Make all tasks immediately actionable, specific to the user's situation, and provide clear value."
	)


def question_guidance(has_website_insight: bool) -> str:
	"""Return the instruction used while still gathering context."""
	text = (
		"The user is seeking help with task creation. Ask 1-2 specific, focused questions to understand "
		"their needs better. Keep your questions concise. Focus on: 1) Their specific goals and challenges, "
		"2) Their current resources or constraints. Use the search_web tool if a website or topic needs "
		"to be looked up first."
	)
	if has_website_insight:
		text += (
			"\n\nYou have access to website analysis data. "
			"Ask about specific areas you can help with based on this analysis."
		)
	return text


def tool_followup_instruction() -> str:
	return (
		"Ask one concise question to understand user needs, "
		"or say you are ready to create tasks if you have enough information."
	)


def generation_prompt(insight: Optional[WebsiteInsight]) -> str:
	"""Return the task generation instruction, grounded in website analysis when cached."""
	if insight is not None and insight.analysis_prompt:
		return (
			f"{insight.analysis_prompt}\n\n"
			"Generate EXACTLY 3 specific, actionable tasks to address the issues identified in the analysis. "
			"Each task must have a clear title, detailed step-by-step description, and realistic time estimate. "
			'Return a JSON object of the form {"tasks": [{"title": "...", "description": "...", '
			'"timeEstimate": "..."}]}.'
		)
	return (
		"Generate EXACTLY 3 specific, actionable tasks based on the user's request. Each task must:\n\n"
		"1. Have a clear title that describes a specific action\n"
		"2. Include a detailed, step-by-step description\n"
		"3. Include a realistic time estimate\n\n"
		'Return ONLY a JSON object of the form {"tasks": [{"title": "...", "description": "...", '
		'"timeEstimate": "..."}]} containing EXACTLY 3 tasks. The response should be valid JSON.'
	)


def edit_prompt(task: TaskRecord, index: int, instruction: str) -> str:
	"""Return the focused edit instruction for a single task."""
	return (
		"You are an AI specialized in generating detailed, actionable tasks with step-by-step instructions.\n"
		"You will receive an existing task and the user's request for how to modify it.\n\n"
		"Return ONLY the edited task with the same structure, updated according to the user's request.\n\n"
		"EXISTING TASK TO EDIT:\n"
		f"Task ID: {index + 1}\n"
		f"Title: {task.title}\n"
		f"Description: {task.description}\n"
		f"Time Estimate: {task.time_estimate}\n\n"
		"USER'S EDIT REQUEST:\n"
		f"{instruction}\n\n"
		"Make actual changes to the task based on the request. If the user doesn't specify what to change, "
		"improve the title or description.\n\n"
		'Respond with a JSON object using the lowercase keys "title", "description" and "timeEstimate".'
	)


def render_task_summary(tasks: Iterable[TaskRecord]) -> str:
	"""Return a compact numbered rendering of tasks for the transcript."""
	return "\n".join(
		f"{index}. {task.title} ({task.time_estimate}): {task.description}"
		for index, task in enumerate(tasks, start=1)
	)


def continuation_instruction(tasks: Iterable[TaskRecord]) -> str:
	summary = render_task_summary(tasks)
	return (
		"The user has already received tasks from you. Continue the conversation by helping them implement "
		"the tasks or addressing any questions they have. Only generate new tasks if explicitly requested."
		+ (f"\n\nCurrent tasks:\n{summary}" if summary else "")
	)
