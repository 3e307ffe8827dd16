"""Client for the content-for-path course API."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from .config import Settings, get_settings
from .course_formatter import format_course_data
from .models import CourseDocument, CourseFetchError
from .telemetry import elapsed_ms, emit_event

logger = logging.getLogger(__name__)


def _request_params(path: str, country_code: str, settings: Settings) -> Dict[str, str]:
    return {
        "fastly_cacheable": "persist_until_publish",
        "pcv": settings.course_api_pcv,
        "hash": settings.course_api_hash,
        "variables": json.dumps({"path": path, "countryCode": country_code}, separators=(",", ":")),
        "lang": "en",
        "app": "khanacademy",
    }


def get_content_for_path(
    path: str,
    country_code: str,
    *,
    client: Optional[httpx.Client] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """Raw API payload for a course or content path."""
    settings = settings or get_settings()
    local_client = client or httpx.Client(timeout=settings.request_timeout_seconds)
    close_client = client is None
    logger.debug("Fetching content for path %s (%s)", path, country_code)
    try:
        response = local_client.get(
            settings.course_api_url,
            params=_request_params(path, country_code, settings),
        )
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        raise CourseFetchError(f"Course API call for '{path}' failed: {exc}") from exc
    except ValueError as exc:
        raise CourseFetchError(f"Course API returned invalid JSON for '{path}': {exc}") from exc
    finally:
        if close_client:
            local_client.close()

    if not isinstance(data, dict):
        raise CourseFetchError(f"Course API returned a {type(data).__name__} for '{path}'.")
    return data


def fetch_course_tree(
    path: str,
    region: str,
    *,
    client: Optional[httpx.Client] = None,
    settings: Optional[Settings] = None,
    max_videos: Optional[int] = None,
    delay_seconds: Optional[float] = None,
) -> CourseDocument:
    """Fetch a course and reshape it, pulling video metadata along the way.

    One client serves the course request and every video request.
    """
    settings = settings or get_settings()
    limit = settings.max_videos if max_videos is None else max_videos
    delay = settings.request_delay_seconds if delay_seconds is None else delay_seconds

    local_client = client or httpx.Client(timeout=settings.request_timeout_seconds)
    close_client = client is None
    started = time.perf_counter()
    videos_fetched = 0

    def fetch_content(content_path: str) -> Dict[str, Any]:
        nonlocal videos_fetched
        videos_fetched += 1
        return get_content_for_path(content_path, region, client=local_client, settings=settings)

    try:
        raw = get_content_for_path(path, region, client=local_client, settings=settings)
        document = format_course_data(
            raw,
            path,
            region,
            fetch_content=fetch_content,
            max_videos=limit,
            delay_seconds=delay,
            site_url=settings.course_site_url,
        )
    except Exception as exc:
        emit_event(
            "course_fetch",
            path=path,
            region=region,
            status="error",
            duration_ms=elapsed_ms(started),
            videos_fetched=videos_fetched,
            error=str(exc),
        )
        raise
    finally:
        if close_client:
            local_client.close()

    emit_event(
        "course_fetch",
        path=path,
        region=region,
        status="success",
        duration_ms=elapsed_ms(started),
        videos_fetched=videos_fetched,
        unit_count=len(document.course.units),
    )
    return document


__all__ = ["CourseFetchError", "fetch_course_tree", "get_content_for_path"]
