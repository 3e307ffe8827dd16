"""Composable time estimates for content, topics, units and courses."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .models import CourseContent, TimeEstimate


def round_half_up(value: float) -> int:
    # round() uses banker's rounding; estimates are reported with half-up rounding.
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def round_tenth(value: float) -> float:
    return round_half_up(value * 10) / 10


def from_bounds(lower_bound: float, upper_bound: float) -> TimeEstimate:
    """Wrap a raw lower/upper bound pair with no video component."""
    average = round_half_up((lower_bound + upper_bound) / 2)
    return TimeEstimate(
        lower_bound=lower_bound,
        upper_bound=upper_bound,
        average_minutes=average,
        video_minutes=0,
        total_minutes=average,
    )


def combine(
    estimates: Sequence[TimeEstimate],
    extra_video_minutes: float = 0,
) -> Optional[TimeEstimate]:
    """Sum estimates and extra video time into one composite estimate.

    Returns ``None`` when there is nothing to combine so callers can omit the
    estimate instead of reporting zero minutes.
    """
    if not estimates and extra_video_minutes == 0:
        return None

    lower = sum(estimate.lower_bound for estimate in estimates)
    upper = sum(estimate.upper_bound for estimate in estimates)
    video = sum(estimate.video_minutes or 0 for estimate in estimates) + extra_video_minutes

    return TimeEstimate(
        lower_bound=lower,
        upper_bound=upper,
        average_minutes=round_half_up((lower + upper) / 2),
        video_minutes=video,
        total_minutes=round_half_up(video + (lower + upper) / 2),
    )


def video_minutes(contents: Iterable[CourseContent]) -> float:
    """Total known video duration in minutes across ``contents``."""
    total = 0.0
    for content in contents:
        metadata = content.video_metadata
        if metadata is not None and metadata.duration_minutes:
            total += metadata.duration_minutes
    return total


__all__ = ["combine", "from_bounds", "round_half_up", "round_tenth", "video_minutes"]
