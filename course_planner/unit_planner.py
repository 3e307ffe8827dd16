"""Converts a normalized course tree into ordered unit plans."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Union

from pydantic import ValidationError

from .content_estimator import ASSESSMENT_KINDS, synthesize_assessment, to_content_item
from .models import (
    ContentItem,
    CourseTopic,
    CourseTree,
    CourseUnit,
    InvalidCourseTreeError,
    TopicDetail,
    UnitPlan,
)
from .time_estimates import round_tenth

logger = logging.getLogger(__name__)

MIN_TOPIC_HOURS = 1.0
MAX_TOPIC_HOURS = 4.0
MIN_ASSESSMENT_TOPIC_HOURS = 0.5


def coerce_course_tree(course_tree: Union[CourseTree, Mapping[str, Any]]) -> CourseTree:
    """Validate planner input, raising ``InvalidCourseTreeError`` on structural faults."""
    if isinstance(course_tree, CourseTree):
        return course_tree
    if not isinstance(course_tree, Mapping):
        raise InvalidCourseTreeError(
            f"Course tree must be a mapping or CourseTree, got {type(course_tree).__name__}."
        )
    if "units" not in course_tree:
        raise InvalidCourseTreeError("Course tree is missing the required 'units' field.")
    try:
        return CourseTree.model_validate(course_tree)
    except ValidationError as exc:
        raise InvalidCourseTreeError(f"Course tree failed validation: {exc}") from exc


def topic_hours(topic: CourseTopic, contents: List[ContentItem]) -> float:
    """Hours for a topic: topic estimate first, then clamped sum of its contents."""
    estimate = topic.total_time_estimate
    if estimate is not None and estimate.total_minutes and estimate.total_minutes > 0:
        return estimate.total_minutes / 60
    if estimate is not None and estimate.average_minutes and estimate.average_minutes > 0:
        return estimate.average_minutes / 60

    hours = sum(item.estimated_minutes for item in contents) / 60
    if len(contents) == 1 and contents[0].content_kind in ASSESSMENT_KINDS:
        return contents[0].estimated_minutes / 60

    video_count = sum(1 for content in topic.contents if content.content_kind == "Video")
    exercise_count = sum(1 for content in topic.contents if content.content_kind == "Exercise")
    if video_count == 0 and exercise_count == 0 and contents:
        return max(MIN_ASSESSMENT_TOPIC_HOURS, hours)
    if contents:
        return max(MIN_TOPIC_HOURS, min(MAX_TOPIC_HOURS, hours))
    return 0.0


def build_topic_detail(topic: CourseTopic) -> TopicDetail:
    contents = [to_content_item(content) for content in topic.contents]
    synthesized = synthesize_assessment(topic)
    if synthesized is not None:
        contents.append(synthesized)
    elif not contents:
        logger.debug("Topic %s has no schedulable content; treating as zero hours.", topic.title)

    videos = [content for content in topic.contents if content.content_kind == "Video"]
    video_duration = sum(
        (content.video_metadata.duration_minutes or 0) if content.video_metadata else 0
        for content in videos
    )
    return TopicDetail(
        title=topic.title,
        estimated_hours=round_tenth(topic_hours(topic, contents)),
        content_count=len(contents),
        video_count=len(videos),
        video_duration_minutes=round_tenth(video_duration),
        contents=contents,
    )


def build_unit_plan(unit: CourseUnit, index: int) -> UnitPlan:
    details = [build_topic_detail(topic) for topic in unit.topics]
    total_hours = sum(detail.estimated_hours for detail in details)
    return UnitPlan(
        unit_number=index + 1,
        unit_title=unit.title,
        topics=[topic.title for topic in unit.topics],
        estimated_hours=round_tenth(total_hours),
        week_target=index + 1,
        topic_details=details,
    )


def build_plan(course_tree: Union[CourseTree, Mapping[str, Any]]) -> List[UnitPlan]:
    """Build the ordered unit plans for ``course_tree``.

    Missing time data never raises; it falls back to content heuristics. A tree
    without ``units`` raises ``InvalidCourseTreeError``.
    """
    tree = coerce_course_tree(course_tree)
    plans = [build_unit_plan(unit, index) for index, unit in enumerate(tree.units)]
    logger.info(
        "Planned %d units (%d topics, %.1f hours) for %s",
        len(plans),
        sum(len(plan.topic_details) for plan in plans),
        sum(plan.estimated_hours for plan in plans),
        tree.title or "untitled course",
    )
    return plans


__all__ = [
    "build_plan",
    "build_topic_detail",
    "build_unit_plan",
    "coerce_course_tree",
    "topic_hours",
]
