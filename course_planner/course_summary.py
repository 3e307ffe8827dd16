"""Course-level statistics attached to stored course documents."""

from __future__ import annotations

from typing import List, Optional

from .models import (
    ChallengeTime,
    ContentStats,
    CourseChallenge,
    CourseContent,
    CourseDocument,
    CourseOverview,
    CourseSummary,
    TimeBreakdown,
    UnitSummary,
    VideoStats,
)
from .time_estimates import round_half_up

SUMMARY_KINDS = ("Video", "Exercise", "Article", "Topic quiz", "Topic unit test")


def _round_hundredth(value: float) -> float:
    return round_half_up(value * 100) / 100


def format_duration(minutes: float) -> str:
    """Human-readable duration, e.g. ``"2 hours 5 minutes"``."""
    if minutes < 1:
        return "< 1 minute"
    if minutes < 60:
        return f"{round_half_up(minutes)} minutes"

    hours = int(minutes // 60)
    remaining = round_half_up(minutes % 60)
    if hours == 1:
        return f"1 hour {remaining} minutes" if remaining > 0 else "1 hour"
    return f"{hours} hours {remaining} minutes" if remaining > 0 else f"{hours} hours"


def _duration(content: CourseContent) -> float:
    if content.video_metadata is None:
        return 0.0
    return content.video_metadata.duration_minutes or 0.0


def _challenge_time(challenge: Optional[CourseChallenge]) -> Optional[ChallengeTime]:
    if challenge is None:
        return None
    minutes = challenge.time_estimate.average_minutes
    return ChallengeTime(minutes=minutes, formatted=format_duration(minutes))


def _video_stats(contents: List[CourseContent]) -> VideoStats:
    videos = [content for content in contents if content.content_kind == "Video"]
    with_metadata = [video for video in videos if video.video_metadata is not None]
    total_minutes = sum(_duration(video) for video in with_metadata)
    return VideoStats(
        total=len(videos),
        with_metadata=len(with_metadata),
        with_key_moments=sum(1 for video in with_metadata if video.video_metadata.key_moments),
        with_subtitles=sum(1 for video in with_metadata if video.video_metadata.subtitles),
        total_duration_minutes=_round_hundredth(total_minutes),
        total_duration_formatted=format_duration(total_minutes),
    )


def generate_course_summary(document: CourseDocument) -> CourseSummary:
    course = document.course
    contents = [
        content for unit in course.units for topic in unit.topics for content in topic.contents
    ]

    def count(kind: str) -> int:
        return sum(1 for content in contents if content.content_kind == kind)

    video_stats = _video_stats(contents)
    estimate = course.total_time_estimate
    video_minutes = (estimate.video_minutes if estimate else 0) or video_stats.total_duration_minutes
    exercise_minutes = (estimate.average_minutes if estimate else 0) - video_minutes
    total_minutes = (estimate.total_minutes if estimate else 0) or video_minutes

    unit_summaries: List[UnitSummary] = []
    for unit in course.units:
        unit_contents = [content for topic in unit.topics for content in topic.contents]
        video_duration = sum(_duration(content) for content in unit_contents)
        unit_estimate = unit.total_time_estimate
        unit_summaries.append(
            UnitSummary(
                title=unit.title,
                topic_count=len(unit.topics),
                content_count=len(unit_contents),
                video_count=sum(1 for content in unit_contents if content.content_kind == "Video"),
                video_duration_minutes=video_duration,
                estimated_minutes=(unit_estimate.total_minutes if unit_estimate else 0) or video_duration,
            )
        )

    return CourseSummary(
        course=CourseOverview(
            title=course.title,
            description=course.description,
            slug=course.slug,
            total_units=len(course.units),
            total_topics=sum(len(unit.topics) for unit in course.units),
            total_content_items=len(contents),
            mastery_enabled=course.mastery_enabled,
        ),
        content=ContentStats(
            videos=video_stats,
            exercises=count("Exercise"),
            articles=count("Article"),
            quizzes=count("Topic quiz"),
            unit_tests=count("Topic unit test"),
            other=sum(1 for content in contents if content.content_kind not in SUMMARY_KINDS),
        ),
        time_estimate=TimeBreakdown(
            video_minutes=_round_hundredth(video_minutes),
            video_formatted=format_duration(video_minutes),
            exercise_minutes=max(0.0, _round_hundredth(exercise_minutes)),
            total_minutes=_round_hundredth(total_minutes),
            total_formatted=format_duration(total_minutes),
            course_challenge=_challenge_time(course.course_challenge),
            mastery_challenge=_challenge_time(course.mastery_challenge),
        ),
        unit_summaries=unit_summaries,
        metadata=document.metadata,
    )


__all__ = ["format_duration", "generate_course_summary"]
