from __future__ import annotations

from typing import Any, Dict, List

import pytest

from course_planner.course_formatter import format_course_data, process_video_metadata, video_path
from course_planner.models import CourseFetchError, InvalidCourseTreeError


def test_reshapes_units_topics_and_contents(course_payload: Dict[str, Any]) -> None:
    document = format_course_data(course_payload, "math/calculus-2", "US", delay_seconds=0)

    course = document.course
    assert course.title == "Calculus 2"
    assert course.mastery_enabled is True
    assert [unit.title for unit in course.units] == ["Integrals review", "Series"]
    topic = course.units[0].topics[0]
    assert [content.content_kind for content in topic.contents] == ["Video", "Exercise", "Video"]
    assert topic.contents[0].url == "https://www.khanacademy.org/math/calculus-2/video-1"
    assert course.units[0].topics[1].contents == []
    assert document.metadata.commit_sha == "abc123"
    assert document.metadata.path == "math/calculus-2"
    assert document.metadata.country_code == "US"


def test_course_estimate_includes_challenges(course_payload: Dict[str, Any]) -> None:
    document = format_course_data(course_payload, "math/calculus-2", "US", delay_seconds=0)

    course = document.course
    assert course.course_challenge is not None
    assert course.course_challenge.time_estimate.average_minutes == 25
    assert course.mastery_challenge is None
    # No video metadata was fetched, so units carry no estimate.
    assert course.units[0].total_time_estimate is None
    assert course.total_time_estimate is not None
    assert course.total_time_estimate.total_minutes == 25


def test_video_metadata_is_fetched_up_to_the_limit(
    course_payload: Dict[str, Any],
    video_payload: Dict[str, Any],
) -> None:
    requested: List[str] = []

    def fetch(path: str) -> Dict[str, Any]:
        requested.append(path)
        return video_payload

    document = format_course_data(
        course_payload,
        "math/calculus-2",
        "US",
        fetch_content=fetch,
        max_videos=1,
        delay_seconds=0,
    )

    assert requested == ["math/calculus-2/video-1"]
    topic = document.course.units[0].topics[0]
    assert topic.contents[0].video_metadata is not None
    assert topic.contents[0].video_metadata.duration_minutes == 10
    assert topic.contents[2].video_metadata is None
    assert topic.total_time_estimate is not None
    assert topic.total_time_estimate.video_minutes == 10
    unit_estimate = document.course.units[0].total_time_estimate
    assert unit_estimate is not None
    assert unit_estimate.video_minutes == 10
    assert unit_estimate.total_minutes == 10
    assert document.course.total_time_estimate is not None
    assert document.course.total_time_estimate.total_minutes == 35


def test_failed_video_fetch_is_skipped(course_payload: Dict[str, Any]) -> None:
    def fetch(path: str) -> Dict[str, Any]:
        raise CourseFetchError(f"boom for {path}")

    document = format_course_data(
        course_payload,
        "math/calculus-2",
        "US",
        fetch_content=fetch,
        max_videos=5,
        delay_seconds=0,
    )

    videos = [
        content
        for topic in document.course.units[0].topics
        for content in topic.contents
        if content.content_kind == "Video"
    ]
    assert len(videos) == 2
    assert all(video.video_metadata is None for video in videos)


def test_payload_without_course_is_invalid() -> None:
    with pytest.raises(InvalidCourseTreeError):
        format_course_data({"data": {"contentRoute": {"listedPathData": {"course": None}}}}, "x", "US")
    with pytest.raises(InvalidCourseTreeError):
        format_course_data({"errors": ["nope"]}, "x", "US")


def test_process_video_metadata_normalizes_fields(video_payload: Dict[str, Any]) -> None:
    raw = video_payload["data"]["contentRoute"]["listedPathData"]["content"]

    metadata = process_video_metadata(raw)

    assert metadata.duration == 600
    assert metadata.duration_minutes == 10
    assert metadata.download_urls == {
        "mp4": "https://cdn.example.org/v.mp4",
        "m3u8": "https://cdn.example.org/v.m3u8",
    }
    assert metadata.key_moments[0].label == "Setup"
    assert metadata.subtitles[0].is_valid is True
    assert metadata.thumbnail_urls[0].category == "default"
    assert metadata.youtube_id == "yt123"
    assert metadata.keywords == ["integrals", "riemann sums", "calculus"]
    assert metadata.educational_level == "college"


def test_duration_minutes_round_to_two_places() -> None:
    metadata = process_video_metadata({"duration": 125})

    assert metadata.duration_minutes == 2.08


def test_unparsable_download_urls_are_ignored() -> None:
    metadata = process_video_metadata({"duration": 60, "downloadUrls": "not json"})

    assert metadata.download_urls == {}
    assert metadata.duration_minutes == 1


def test_video_path_strips_site_prefix() -> None:
    assert video_path("https://www.khanacademy.org/math/x/v/abc") == "math/x/v/abc"
    assert video_path("/math/x/v/abc") == "math/x/v/abc"
