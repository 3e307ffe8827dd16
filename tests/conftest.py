from __future__ import annotations

import json
from typing import Any, Dict, Iterator

import pytest

from course_planner.config import get_settings
from course_planner.telemetry import clear_listeners


@pytest.fixture(autouse=True)
def _reset_process_state() -> Iterator[None]:
    clear_listeners()
    get_settings.cache_clear()
    yield
    clear_listeners()
    get_settings.cache_clear()


def _child(content_id: str, kind: str, title: str) -> Dict[str, Any]:
    return {
        "id": content_id,
        "contentKind": kind,
        "translatedTitle": title,
        "translatedDescription": f"{title} description",
        "slug": content_id,
        "canonicalUrl": f"https://www.khanacademy.org/math/calculus-2/{content_id}",
    }


@pytest.fixture
def course_payload() -> Dict[str, Any]:
    """Content-for-path response for a two-unit course."""
    return {
        "data": {
            "content": {"metadata": {"commitSha": "abc123"}},
            "contentRoute": {
                "listedPathData": {
                    "content": None,
                    "course": {
                        "id": "course-1",
                        "translatedTitle": "Calculus 2",
                        "translatedDescription": "Integrals and series",
                        "slug": "calculus-2",
                        "relativeUrl": "/math/calculus-2",
                        "iconPath": "/icons/calc.svg",
                        "masteryEnabled": True,
                        "courseChallenge": {
                            "id": "challenge-1",
                            "timeEstimate": {"lowerBound": 20, "upperBound": 30},
                        },
                        "masteryChallenge": None,
                        "unitChildren": [
                            {
                                "id": "unit-1",
                                "translatedTitle": "Integrals review",
                                "translatedDescription": "",
                                "slug": "integrals-review",
                                "relativeUrl": "/math/calculus-2/integrals-review",
                                "allOrderedChildren": [
                                    {
                                        "id": "topic-1",
                                        "translatedTitle": "Riemann sums",
                                        "translatedDescription": "",
                                        "slug": "riemann-sums",
                                        "relativeUrl": "/math/calculus-2/riemann-sums",
                                        "curatedChildren": [
                                            _child("video-1", "Video", "Left sums"),
                                            _child("exercise-1", "Exercise", "Practice sums"),
                                            _child("video-2", "Video", "Right sums"),
                                        ],
                                    },
                                    {
                                        "id": "topic-2",
                                        "translatedTitle": "Quiz 1",
                                        "translatedDescription": "",
                                        "slug": "quiz-1",
                                        "relativeUrl": "/math/calculus-2/quiz-1",
                                    },
                                ],
                            },
                            {
                                "id": "unit-2",
                                "translatedTitle": "Series",
                                "translatedDescription": "",
                                "slug": "series",
                                "relativeUrl": "/math/calculus-2/series",
                                "allOrderedChildren": [
                                    {
                                        "id": "topic-3",
                                        "translatedTitle": "Geometric series",
                                        "translatedDescription": "",
                                        "slug": "geometric",
                                        "relativeUrl": "/math/calculus-2/geometric",
                                        "curatedChildren": [
                                            _child("article-1", "Article", "Series notes"),
                                        ],
                                    }
                                ],
                            },
                        ],
                    },
                }
            },
        }
    }


@pytest.fixture
def video_payload() -> Dict[str, Any]:
    """Content-for-path response for a single 10 minute video."""
    return {
        "data": {
            "content": {"metadata": {"commitSha": "abc123"}},
            "contentRoute": {
                "listedPathData": {
                    "course": None,
                    "content": {
                        "id": "video-1",
                        "duration": 600,
                        "downloadUrls": json.dumps(
                            {"mp4": "https://cdn.example.org/v.mp4", "m3u8": "https://cdn.example.org/v.m3u8"}
                        ),
                        "keyMoments": [{"startOffset": 0, "endOffset": 60, "label": "Setup"}],
                        "subtitles": [
                            {"text": "Hello", "startTime": 0, "endTime": 2, "kaIsValid": True}
                        ],
                        "thumbnailUrls": [{"url": "https://cdn.example.org/t.png", "category": "default"}],
                        "youtubeId": "yt123",
                        "authorNames": ["Sal"],
                        "dateAdded": "2020-01-01",
                        "keywords": "integrals, riemann sums, ,calculus",
                        "educationalLevel": "college",
                    },
                }
            },
        }
    }
