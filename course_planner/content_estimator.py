"""Per-content time estimation with authoritative data preferred over heuristics."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .models import ContentItem, CourseContent, CourseTopic
from .time_estimates import round_tenth

logger = logging.getLogger(__name__)

VIDEO_NOTE_TAKING_FACTOR = 1.5
DEFAULT_VIDEO_MINUTES = 5.0
DEFAULT_CONTENT_MINUTES = 15.0
TOPIC_QUIZ_MINUTES = 25.0
TOPIC_UNIT_TEST_MINUTES = 45.0

# Heuristic minutes per content kind, used when the course data carries no estimate.
HEURISTIC_MINUTES: Dict[str, float] = {
    "Exercise": 18.0,
    "Article": 10.0,
    "Topic quiz": TOPIC_QUIZ_MINUTES,
    "Topic unit test": TOPIC_UNIT_TEST_MINUTES,
    "Quiz": 20.0,
    "Test": 40.0,
    "Assessment": 30.0,
    "Practice": 15.0,
}

ASSESSMENT_KINDS = frozenset({"Topic quiz", "Topic unit test"})


def _authoritative_minutes(content: CourseContent) -> Optional[float]:
    estimate = content.time_estimate
    if estimate is None:
        return None
    if estimate.total_minutes and estimate.total_minutes > 0:
        return float(estimate.total_minutes)
    if estimate.average_minutes and estimate.average_minutes > 0:
        return float(estimate.average_minutes)
    return None


def heuristic_minutes(content: CourseContent) -> float:
    if content.content_kind == "Video":
        duration = None
        if content.video_metadata is not None:
            duration = content.video_metadata.duration_minutes
        return (duration or DEFAULT_VIDEO_MINUTES) * VIDEO_NOTE_TAKING_FACTOR
    return HEURISTIC_MINUTES.get(content.content_kind, DEFAULT_CONTENT_MINUTES)


def estimate_minutes(content: CourseContent) -> float:
    """Resolve the study minutes for one content item, rounded to 0.1."""
    minutes = _authoritative_minutes(content)
    if minutes is None:
        minutes = heuristic_minutes(content)
    return round_tenth(minutes)


def to_content_item(content: CourseContent) -> ContentItem:
    return ContentItem(
        id=content.id,
        title=content.title,
        content_kind=content.content_kind,
        estimated_minutes=estimate_minutes(content),
        url=content.url or None,
    )


def synthesize_assessment(topic: CourseTopic) -> Optional[ContentItem]:
    """Stand-in item for an empty quiz or unit-test topic.

    The content API lists topic quizzes and unit tests as topics without
    children; without a synthesized item they would never be scheduled.
    """
    if topic.contents:
        return None
    if "Unit test" in topic.title:
        kind, minutes = "Topic unit test", TOPIC_UNIT_TEST_MINUTES
    elif "Quiz" in topic.title or "quiz" in topic.title:
        kind, minutes = "Topic quiz", TOPIC_QUIZ_MINUTES
    else:
        return None
    logger.debug("Synthesized %s item for empty topic %s", kind, topic.title)
    return ContentItem(
        id=topic.id,
        title=topic.title,
        content_kind=kind,
        estimated_minutes=minutes,
        url=topic.url or None,
    )


__all__ = [
    "ASSESSMENT_KINDS",
    "HEURISTIC_MINUTES",
    "estimate_minutes",
    "heuristic_minutes",
    "synthesize_assessment",
    "to_content_item",
]
