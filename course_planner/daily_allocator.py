"""Greedy day-by-day allocation of course content with partial carryover."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence, Tuple

from .models import (
    BacklogEntry,
    ContentItem,
    DailyBreakdown,
    DayStatus,
    PacingStrategy,
    ScheduledSlice,
    UnitPlan,
)

logger = logging.getLogger(__name__)

MIN_ADAPTIVE_DAY_MINUTES = 60
MIN_SLICE_MINUTES = 5
CONSUMED_THRESHOLD_MINUTES = 1
PART_CHUNK_MINUTES = 30
DAYS_PER_WEEK = 7
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
REVIEW_LABEL = "Review"


@dataclass
class _QueueEntry:
    unit_title: str
    topic_title: str
    item: ContentItem
    remaining_minutes: float


@dataclass
class AllocationResult:
    """Allocated days plus whatever the calendar could not absorb."""

    days: List[DailyBreakdown] = field(default_factory=list)
    backlog: List[BacklogEntry] = field(default_factory=list)

    @property
    def backlog_minutes(self) -> float:
        return round(sum(entry.remaining_minutes for entry in self.backlog), 1)

    @property
    def has_backlog(self) -> bool:
        return bool(self.backlog)


def format_study_date(day: date) -> str:
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.day}, {day.year}"


def part_numbers(estimated_minutes: float, remaining_before: float, taken: float) -> Tuple[int, int]:
    """Nominal ``(part, total_parts)`` label in 30-minute chunks for a partial slice."""
    total_parts = max(1, math.ceil(estimated_minutes / PART_CHUNK_MINUTES))
    consumed = estimated_minutes - remaining_before + taken
    current_part = max(1, math.ceil(consumed / PART_CHUNK_MINUTES))
    return min(current_part, total_parts), total_parts


def day_status(slices: Sequence[ScheduledSlice]) -> DayStatus:
    if not slices:
        return "review"
    if any(entry.is_partial for entry in slices):
        return "partial"
    return "completed"


def describe_day(slices: Sequence[ScheduledSlice]) -> str:
    """One-line goal for a day's slices."""
    if not slices:
        return "Review previous topics"
    if len(slices) == 1:
        entry = slices[0]
        if entry.is_partial:
            return (
                f"Work on: {entry.topic_title} Part {entry.part_number}/{entry.total_parts}"
                f" - {entry.title}"
            )
        return f"Complete: {entry.title} ({entry.content_kind})"

    main_topic = slices[0].topic_title
    if all(entry.topic_title == main_topic for entry in slices):
        return f"Work on: {main_topic} ({len(slices)} items)"
    topics = list(dict.fromkeys(entry.topic_title for entry in slices))
    if len(topics) <= 2:
        return f"Work on: {' + '.join(topics)}"
    return f"Work on: {topics[0]} + {len(topics) - 1} more topics"


def render_daily_schedule(slices: Sequence[ScheduledSlice]) -> str:
    if not slices:
        return "Review previous material"
    parts: List[str] = []
    for entry in slices:
        part_info = f" (Part {entry.part_number}/{entry.total_parts})" if entry.is_partial else ""
        parts.append(f"{entry.content_kind}: {entry.title}{part_info} [{round(entry.minutes)}min]")
    return " | ".join(parts)


class DailyAllocator:
    """Distributes the ordered content queue across study days.

    ``adaptive`` re-targets each day's budget against the work and days that
    remain, bounded by ``[min_day_minutes, hours_per_day * 60]``. ``fixed``
    always spends the full daily budget and lets the tail of the calendar run
    dry.
    """

    def __init__(
        self,
        *,
        strategy: PacingStrategy = "adaptive",
        min_day_minutes: float = MIN_ADAPTIVE_DAY_MINUTES,
    ) -> None:
        if strategy not in ("adaptive", "fixed"):
            raise ValueError(f"Unknown pacing strategy '{strategy}'.")
        self._strategy: PacingStrategy = strategy
        self._min_day_minutes = max(float(min_day_minutes), 0.0)

    @property
    def strategy(self) -> PacingStrategy:
        return self._strategy

    def run(
        self,
        unit_plans: Sequence[UnitPlan],
        study_days: Sequence[date],
        hours_per_day: float,
    ) -> AllocationResult:
        queue = self._build_queue(unit_plans)
        if not study_days:
            logger.info("No study days available; %d content items left unscheduled.", len(queue))
            return AllocationResult(days=[], backlog=self._backlog(queue, 0))

        minutes_per_day = max(float(hours_per_day), 0.0) * 60
        total_content_minutes = sum(entry.item.estimated_minutes for entry in queue)
        logger.info(
            "Content distribution: %.0f minutes of content across %d days (%.0f minutes available, %s pacing)",
            total_content_minutes,
            len(study_days),
            minutes_per_day * len(study_days),
            self._strategy,
        )

        days: List[DailyBreakdown] = []
        cursor = 0
        total_days = len(study_days)
        for index, day in enumerate(study_days):
            remaining_days = total_days - index
            remaining_content = sum(entry.remaining_minutes for entry in queue[cursor:])
            budget = self._day_budget(minutes_per_day, remaining_content, remaining_days)
            slices, cursor = self._fill_day(queue, cursor, budget)
            days.append(self._breakdown(day, index, slices, hours_per_day))

        backlog = self._backlog(queue, cursor)
        if backlog:
            logger.warning(
                "Schedule leaves %d items (%.1f minutes) unconsumed after %d study days.",
                len(backlog),
                sum(entry.remaining_minutes for entry in backlog),
                total_days,
            )
        return AllocationResult(days=days, backlog=backlog)

    def _build_queue(self, unit_plans: Sequence[UnitPlan]) -> List[_QueueEntry]:
        # Fresh entries per run; the unit plans' content items are never mutated.
        queue: List[_QueueEntry] = []
        for unit in unit_plans:
            for topic in unit.topic_details:
                for item in topic.contents:
                    queue.append(
                        _QueueEntry(
                            unit_title=unit.unit_title,
                            topic_title=topic.title,
                            item=item,
                            remaining_minutes=max(float(item.estimated_minutes), 0.0),
                        )
                    )
        return queue

    def _day_budget(self, minutes_per_day: float, remaining_content: float, remaining_days: int) -> float:
        if self._strategy == "fixed" or remaining_days <= 0:
            return minutes_per_day
        paced = remaining_content / remaining_days
        return min(minutes_per_day, max(self._min_day_minutes, paced))

    def _fill_day(
        self,
        queue: List[_QueueEntry],
        cursor: int,
        budget: float,
    ) -> Tuple[List[ScheduledSlice], int]:
        slices: List[ScheduledSlice] = []
        remaining_budget = budget
        while remaining_budget > MIN_SLICE_MINUTES and cursor < len(queue):
            entry = queue[cursor]
            remaining_before = entry.remaining_minutes
            minutes = min(remaining_budget, remaining_before)

            if minutes > 0:
                is_partial = remaining_before > minutes
                part_number: Optional[int] = None
                total_parts: Optional[int] = None
                if is_partial:
                    part_number, total_parts = part_numbers(
                        entry.item.estimated_minutes, remaining_before, minutes
                    )
                slices.append(
                    ScheduledSlice(
                        content_id=entry.item.id,
                        title=entry.item.title,
                        content_kind=entry.item.content_kind,
                        topic_title=entry.topic_title,
                        unit_title=entry.unit_title,
                        minutes=round(minutes, 2),
                        is_partial=is_partial,
                        part_number=part_number,
                        total_parts=total_parts,
                    )
                )
                entry.remaining_minutes -= minutes
                remaining_budget -= minutes

            advanced = False
            if entry.remaining_minutes <= CONSUMED_THRESHOLD_MINUTES:
                cursor += 1
                advanced = True

            if minutes <= 0 and not advanced:
                break
        return slices, cursor

    def _breakdown(
        self,
        day: date,
        index: int,
        slices: List[ScheduledSlice],
        hours_per_day: float,
    ) -> DailyBreakdown:
        first = slices[0] if slices else None
        return DailyBreakdown(
            day=DAY_NAMES[day.weekday()],
            date=format_study_date(day),
            study_date=day,
            topic=first.topic_title if first else REVIEW_LABEL,
            topic_breakdown=describe_day(slices),
            unit_title=first.unit_title if first else REVIEW_LABEL,
            week_number=index // DAYS_PER_WEEK + 1,
            study_hours=hours_per_day,
            scheduled_minutes=round(sum(entry.minutes for entry in slices), 1),
            status=day_status(slices),
            slices=slices,
            daily_schedule=render_daily_schedule(slices),
        )

    def _backlog(self, queue: Sequence[_QueueEntry], cursor: int) -> List[BacklogEntry]:
        return [
            BacklogEntry(
                content_id=entry.item.id,
                title=entry.item.title,
                topic_title=entry.topic_title,
                unit_title=entry.unit_title,
                estimated_minutes=entry.item.estimated_minutes,
                remaining_minutes=round(entry.remaining_minutes, 2),
            )
            for entry in queue[cursor:]
        ]


def run_allocation(
    unit_plans: Sequence[UnitPlan],
    study_days: Sequence[date],
    hours_per_day: float,
    *,
    strategy: PacingStrategy = "adaptive",
) -> AllocationResult:
    return DailyAllocator(strategy=strategy).run(unit_plans, study_days, hours_per_day)


def allocate(
    unit_plans: Sequence[UnitPlan],
    study_days: Sequence[date],
    hours_per_day: float,
    *,
    strategy: PacingStrategy = "adaptive",
) -> List[DailyBreakdown]:
    """Daily breakdown for ``study_days``; empty when there are no days."""
    return run_allocation(unit_plans, study_days, hours_per_day, strategy=strategy).days


__all__ = [
    "AllocationResult",
    "DailyAllocator",
    "allocate",
    "day_status",
    "describe_day",
    "format_study_date",
    "part_numbers",
    "render_daily_schedule",
    "run_allocation",
]
