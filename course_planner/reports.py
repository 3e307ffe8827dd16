"""Markdown and JSON renderings of study plans and stored courses."""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import List, Union

from .course_summary import format_duration, generate_course_summary
from .daily_allocator import format_study_date
from .models import CourseDocument, StudyPlan, UnitPlan

logger = logging.getLogger(__name__)

EMPTY_SCHEDULE_TEXT = "No study days available."


def _kind_counts(unit: UnitPlan) -> str:
    counts = Counter(
        item.content_kind for topic in unit.topic_details for item in topic.contents
    )
    if not counts:
        return "no content"
    return ", ".join(f"{count} {kind}" for kind, count in sorted(counts.items()))


def _curriculum_section(plan: StudyPlan) -> List[str]:
    lines = ["## Curriculum", ""]
    if not plan.unit_planning:
        lines.append("No units in this course.")
        return lines
    lines.append("| Unit | Title | Hours | Topics | Content |")
    lines.append("| --- | --- | --- | --- | --- |")
    for unit in plan.unit_planning:
        lines.append(
            f"| {unit.unit_number} | {unit.unit_title} | {unit.estimated_hours:.1f} "
            f"| {len(unit.topic_details)} | {_kind_counts(unit)} |"
        )
    return lines


def _weekly_section(plan: StudyPlan) -> List[str]:
    lines = ["## Weekly goals", ""]
    for week in plan.weekly_schedule:
        lines.append(
            f"### Week {week.week_number}: {format_study_date(week.week_start)}"
            f" - {format_study_date(week.week_end)}"
        )
        lines.append("")
        lines.append(f"- Target: {week.target_unit}")
        lines.append(f"- Goal: {week.weekly_goal}")
        lines.append(f"- Study days: {week.available_days} ({week.total_weekly_hours:.1f} hours)")
        if week.topics_to_complete:
            lines.append(f"- Topics: {', '.join(week.topics_to_complete)}")
        for note in week.notes:
            lines.append(f"- Note: {note}")
        lines.append("")
    return lines


def _milestone_section(plan: StudyPlan) -> List[str]:
    lines = ["## Milestones", ""]
    for milestone in plan.milestones:
        lines.append(
            f"- {format_study_date(milestone.date)}: {milestone.description}"
            f" ({milestone.hours_completed:.1f} hours, {milestone.percent_complete}%)"
        )
    return lines


def _daily_section(plan: StudyPlan) -> List[str]:
    lines = ["## Daily schedule", ""]
    lines.append("| Date | Day | Week | Goal | Schedule |")
    lines.append("| --- | --- | --- | --- | --- |")
    for day in plan.daily_breakdown:
        lines.append(
            f"| {day.date} | {day.day} | {day.week_number} | {day.topic_breakdown} "
            f"| {day.daily_schedule} |"
        )
    return lines


def render_plan_markdown(plan: StudyPlan) -> str:
    title = plan.course_title or "Course"
    lines = [
        f"# Study plan: {title}",
        "",
        f"- Study days: {plan.total_study_days}",
        f"- Hours per day: {plan.study_hours_per_day:g}",
        f"- Estimated hours: {plan.total_hours_needed:.1f}",
        f"- Pacing: {plan.pacing_strategy}",
        "",
    ]
    lines.extend(_curriculum_section(plan))
    lines.append("")

    if not plan.daily_breakdown:
        lines.append(EMPTY_SCHEDULE_TEXT)
    else:
        lines.extend(_weekly_section(plan))
        lines.extend(_milestone_section(plan))
        lines.append("")
        lines.extend(_daily_section(plan))

    if plan.backlog:
        lines.append("")
        lines.append(
            f"> Warning: {len(plan.backlog)} items ({format_duration(plan.backlog_minutes)})"
            " do not fit in the available study days."
        )
    return "\n".join(lines) + "\n"


def render_curriculum_overview(document: CourseDocument) -> str:
    summary = document.summary or generate_course_summary(document)
    course = document.course
    lines = [course.title or "Untitled course"]
    if course.description:
        lines.append(course.description)
    lines += [
        f"Total time: {summary.time_estimate.total_formatted}",
        (
            f"Structure: {summary.course.total_units} units, {summary.course.total_topics} topics,"
            f" {summary.course.total_content_items} items"
        ),
        "",
        "Units:",
    ]
    for index, unit in enumerate(summary.unit_summaries, start=1):
        lines.append(f"  {index}. {unit.title}")
        lines.append(f"     {unit.topic_count} topics, {unit.content_count} items")
        lines.append(f"     ~{round(unit.estimated_minutes / 60, 1)} hours")
    return "\n".join(lines) + "\n"


def write_plan_json(plan: StudyPlan, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(plan.model_dump(mode="json"), handle, indent=2)
    logger.info("Wrote study plan JSON to %s", path)
    return path


def write_plan_markdown(plan: StudyPlan, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_plan_markdown(plan), encoding="utf-8")
    logger.info("Wrote study plan Markdown to %s", path)
    return path


__all__ = [
    "EMPTY_SCHEDULE_TEXT",
    "render_curriculum_overview",
    "render_plan_markdown",
    "write_plan_json",
    "write_plan_markdown",
]
