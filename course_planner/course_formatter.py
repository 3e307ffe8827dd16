"""Reshape raw content-for-path payloads into ``CourseDocument`` trees."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from .models import (
    CourseChallenge,
    CourseContent,
    CourseDocument,
    CourseFetchError,
    CourseTopic,
    CourseTree,
    CourseUnit,
    ExtractionMetadata,
    InvalidCourseTreeError,
    KeyMoment,
    Subtitle,
    TimeEstimate,
    Thumbnail,
    VideoMetadata,
)
from .time_estimates import combine, from_bounds, round_half_up, video_minutes

logger = logging.getLogger(__name__)

DEFAULT_SITE_URL = "https://www.khanacademy.org/"

ContentFetcher = Callable[[str], Dict[str, Any]]


def _listed_path_data(raw: Mapping[str, Any]) -> Mapping[str, Any]:
    try:
        listed = raw["data"]["contentRoute"]["listedPathData"]
    except (KeyError, TypeError) as exc:
        raise InvalidCourseTreeError(f"Payload has no listed path data: missing {exc}.") from exc
    if not isinstance(listed, Mapping):
        raise InvalidCourseTreeError("Payload listed path data is not an object.")
    return listed


def _commit_sha(raw: Mapping[str, Any]) -> str:
    content = (raw.get("data") or {}).get("content") or {}
    return (content.get("metadata") or {}).get("commitSha") or ""


def video_path(canonical_url: str, site_url: str = DEFAULT_SITE_URL) -> str:
    """Content path for a video's canonical URL."""
    if canonical_url.startswith(site_url):
        return canonical_url[len(site_url):]
    return canonical_url.lstrip("/")


def process_video_metadata(content: Mapping[str, Any]) -> VideoMetadata:
    """Normalize the video fields of a content payload; absent fields stay empty."""
    fields: Dict[str, Any] = {}

    duration = content.get("duration")
    if duration:
        fields["duration"] = duration
        fields["duration_minutes"] = round_half_up(duration / 60 * 100) / 100

    raw_urls = content.get("downloadUrls")
    if raw_urls:
        try:
            urls = json.loads(raw_urls)
            fields["download_urls"] = {
                key: value for key, value in urls.items() if key in ("m3u8", "mp4") and value
            }
        except (ValueError, AttributeError) as exc:
            logger.warning("Failed to parse download URLs for %s: %s", content.get("id"), exc)

    fields["key_moments"] = [
        KeyMoment(start_offset=item["startOffset"], end_offset=item["endOffset"], label=item["label"])
        for item in content.get("keyMoments") or []
    ]
    fields["subtitles"] = [
        Subtitle(
            text=item["text"],
            start_time=item["startTime"],
            end_time=item["endTime"],
            is_valid=item.get("kaIsValid", True),
        )
        for item in content.get("subtitles") or []
    ]
    fields["thumbnail_urls"] = [
        Thumbnail(url=item["url"], category=item.get("category") or "")
        for item in content.get("thumbnailUrls") or []
    ]
    fields["author_names"] = list(content.get("authorNames") or [])

    for source, target in (
        ("youtubeId", "youtube_id"),
        ("dateAdded", "date_added"),
        ("educationalLevel", "educational_level"),
    ):
        if content.get(source):
            fields[target] = content[source]

    keywords = content.get("keywords")
    if keywords:
        fields["keywords"] = [word.strip() for word in keywords.split(",") if word.strip()]

    return VideoMetadata(**fields)


class _VideoBudget:
    """Fetches video metadata until ``max_videos`` requests have been spent."""

    def __init__(
        self,
        fetch_content: Optional[ContentFetcher],
        max_videos: int,
        delay_seconds: float,
        site_url: str,
    ) -> None:
        self._fetch = fetch_content
        self._max_videos = max_videos
        self._delay = delay_seconds
        self._site_url = site_url
        self.processed = 0

    def metadata_for(self, content: CourseContent) -> Optional[VideoMetadata]:
        if self._fetch is None:
            return None
        if self.processed >= self._max_videos:
            logger.debug("Skipping video metadata (limit reached): %s", content.title)
            return None

        self.processed += 1
        logger.info("Fetching video %d/%d: %s", self.processed, self._max_videos, content.title)
        try:
            payload = self._fetch(video_path(content.url, self._site_url))
            video = _listed_path_data(payload).get("content")
            metadata = process_video_metadata(video) if video else None
        except (CourseFetchError, InvalidCourseTreeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Failed to fetch video metadata for %s: %s", content.title, exc)
            metadata = None
        if self._delay > 0:
            time.sleep(self._delay)
        return metadata


def _format_content(raw: Mapping[str, Any], videos: _VideoBudget) -> CourseContent:
    content = CourseContent(
        id=raw["id"],
        title=raw.get("translatedTitle") or "",
        description=raw.get("translatedDescription") or "",
        content_kind=raw.get("contentKind") or "Other",
        slug=raw.get("slug") or "",
        url=raw.get("canonicalUrl") or "",
    )
    if content.content_kind == "Video":
        content.video_metadata = videos.metadata_for(content)
    return content


def _format_topic(raw: Mapping[str, Any], videos: _VideoBudget) -> CourseTopic:
    contents = [_format_content(child, videos) for child in raw.get("curatedChildren") or []]
    topic_video_minutes = video_minutes(contents)
    return CourseTopic(
        id=raw["id"],
        title=raw.get("translatedTitle") or "",
        description=raw.get("translatedDescription") or "",
        slug=raw.get("slug") or "",
        url=raw.get("relativeUrl") or "",
        contents=contents,
        total_time_estimate=combine([], topic_video_minutes) if topic_video_minutes > 0 else None,
    )


def _format_unit(raw: Mapping[str, Any], index: int, total: int, videos: _VideoBudget) -> CourseUnit:
    logger.info("Processing unit %d/%d: %s", index + 1, total, raw.get("translatedTitle"))
    topics = [_format_topic(child, videos) for child in raw.get("allOrderedChildren") or []]
    unit_video_minutes = sum(video_minutes(topic.contents) for topic in topics)
    return CourseUnit(
        id=raw["id"],
        title=raw.get("translatedTitle") or "",
        description=raw.get("translatedDescription") or "",
        slug=raw.get("slug") or "",
        url=raw.get("relativeUrl") or "",
        topics=topics,
        # Topic estimates are pure video time, so the unit takes video minutes once.
        total_time_estimate=combine([], unit_video_minutes),
    )


def _format_challenge(raw: Optional[Mapping[str, Any]]) -> Optional[CourseChallenge]:
    if not raw or not raw.get("timeEstimate"):
        return None
    bounds = raw["timeEstimate"]
    return CourseChallenge(
        id=raw.get("id") or "",
        time_estimate=from_bounds(bounds.get("lowerBound") or 0, bounds.get("upperBound") or 0),
    )


def format_course_data(
    raw: Mapping[str, Any],
    path: str,
    country_code: str,
    *,
    fetch_content: Optional[ContentFetcher] = None,
    max_videos: int = 50,
    delay_seconds: float = 0.2,
    site_url: str = DEFAULT_SITE_URL,
) -> CourseDocument:
    """Build a ``CourseDocument`` from a raw course payload.

    ``fetch_content`` resolves a content path to its raw payload and is used
    for video metadata only; without it videos carry no metadata.
    """
    course = _listed_path_data(raw).get("course")
    if not isinstance(course, Mapping):
        raise InvalidCourseTreeError(f"Payload for '{path}' contains no course.")

    videos = _VideoBudget(fetch_content, max_videos, delay_seconds, site_url)
    unit_children = course.get("unitChildren") or []
    try:
        units = [
            _format_unit(child, index, len(unit_children), videos)
            for index, child in enumerate(unit_children)
        ]
    except (KeyError, TypeError) as exc:
        raise InvalidCourseTreeError(f"Course payload for '{path}' is malformed: {exc}") from exc

    course_challenge = _format_challenge(course.get("courseChallenge"))
    mastery_challenge = _format_challenge(course.get("masteryChallenge"))
    estimates: List[TimeEstimate] = [
        challenge.time_estimate
        for challenge in (course_challenge, mastery_challenge)
        if challenge is not None
    ]
    estimates.extend(unit.total_time_estimate for unit in units if unit.total_time_estimate is not None)

    tree = CourseTree(
        id=course.get("id") or "",
        title=course.get("translatedTitle") or "",
        description=course.get("translatedDescription") or "",
        slug=course.get("slug") or "",
        url=course.get("relativeUrl") or "",
        icon_path=course.get("iconPath") or "",
        mastery_enabled=bool(course.get("masteryEnabled")),
        units=units,
        course_challenge=course_challenge,
        mastery_challenge=mastery_challenge,
        total_time_estimate=combine(estimates),
    )
    logger.info(
        "Formatted %s: %d units, %d videos with metadata requests",
        tree.title or path,
        len(units),
        videos.processed,
    )
    return CourseDocument(
        course=tree,
        metadata=ExtractionMetadata(
            commit_sha=_commit_sha(raw),
            path=path,
            country_code=country_code,
        ),
    )


__all__ = ["ContentFetcher", "format_course_data", "process_video_metadata", "video_path"]
