"""Static, domain-keyed task sets used whenever generation or parsing fails."""

from __future__ import annotations

from typing import Dict, List, Tuple

from models.task_record import TaskRecord

_CATALOG: Dict[str, Tuple[Tuple[str, str, str], ...]] = {
    "website": (
        (
            "Audit Website Content and Structure",
            "Conduct a complete inventory of all website pages and content. Identify outdated information, "
            "broken links, and opportunities for improvement. Create a spreadsheet to track each page, its "
            "purpose, and status.",
            "3 hours",
        ),
        (
            "Improve Website User Experience",
            "Test your website's navigation flow and identify points of friction. Simplify menus, improve page "
            "loading speed, and ensure mobile responsiveness. Consider implementing user feedback mechanisms.",
            "4 hours",
        ),
        (
            "Create a Content Update Schedule",
            "Develop a calendar for regular content updates and new publications. Plan topics that align with "
            "user interests and business goals. Establish a workflow for content creation, review, and publication.",
            "2 hours",
        ),
    ),
    "business": (
        (
            "Define Key Performance Indicators",
            "Identify 3-5 critical metrics that directly reflect business success. Create a tracking system to "
            "monitor these metrics regularly. Define baseline values and set realistic improvement targets.",
            "2 hours",
        ),
        (
            "Streamline Business Processes",
            "Map out current workflows and identify bottlenecks. Remove unnecessary steps and automate repetitive "
            "tasks where possible. Document improved processes and train team members on changes.",
            "4 hours",
        ),
        (
            "Develop Customer Feedback System",
            "Create a mechanism to regularly collect customer insights. Design short, focused surveys or implement "
            "review requests. Establish a process to analyze feedback and take action on common themes.",
            "3 hours",
        ),
    ),
    "education": (
        (
            "Create a Structured Learning Plan",
            "Develop a comprehensive learning schedule with clear milestones. Break down complex topics into "
            "manageable units. Set specific goals for each study session and track progress regularly.",
            "2 hours",
        ),
        (
            "Implement Active Learning Techniques",
            "Convert passive study materials into active learning activities. Create practice questions, "
            "flashcards, or teaching materials. Schedule regular self-assessment to test understanding.",
            "3 hours",
        ),
        (
            "Build a Comprehensive Resource Library",
            "Gather and organize all learning materials in one accessible location. Categorize resources by topic "
            "and format. Create a system to track which resources have been completed.",
            "2 hours",
        ),
    ),
    "personal": (
        (
            "Create a Productivity System",
            "Select and set up a task management tool that fits your workflow. Define categories for different "
            "areas of your life and establish a regular review process. Implement time blocking for important "
            "activities.",
            "2 hours",
        ),
        (
            "Establish Daily Routines",
            "Design morning and evening routines that support your goals. Start with 2-3 keystone habits and "
            "gradually expand. Track adherence to routines for at least 30 days to build consistency.",
            "1 hour",
        ),
        (
            "Set Up Progress Tracking",
            "Choose and implement a system to track your progress towards goals. Set up regular review periods to "
            "assess progress and make adjustments. Create visual representations of your progress to stay motivated.",
            "2 hours",
        ),
    ),
    "general": (
        (
            "Define Clear Objectives",
            "Identify specific, measurable goals related to your project or area of focus. Break larger goals into "
            "smaller milestones with deadlines. Document success criteria for each objective.",
            "2 hours",
        ),
        (
            "Create an Action Plan",
            "List all required steps to achieve your objectives in sequential order. Identify resources, tools, "
            "and information needed for each step. Assign priorities and estimate completion times.",
            "3 hours",
        ),
        (
            "Implement a Tracking System",
            "Set up a method to monitor progress on your action items. Choose a tool (digital or physical) that "
            "fits your workflow. Establish a regular review schedule to assess progress and make adjustments.",
            "2 hours",
        ),
    ),
}


def get_fallback_tasks_by_type(domain: str | None) -> List[TaskRecord]:
    """Return three fresh fallback tasks for a domain; unknown domains map to "general"."""
    entries = _CATALOG.get((domain or "").lower(), _CATALOG["general"])
    return [
        TaskRecord(title=title, description=description, time_estimate=estimate, id=index)
        for index, (title, description, estimate) in enumerate(entries, start=1)
    ]


def get_fallback_task(domain: str | None, index: int) -> TaskRecord:
    """Return the fallback task at a 0-based position (clamped to the catalog size)."""
    tasks = get_fallback_tasks_by_type(domain)
    return tasks[max(0, min(index, len(tasks) - 1))]
