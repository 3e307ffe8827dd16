"""Weekly goals and unit-completion milestones derived from unit plans."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Sequence

from .models import Milestone, UnitPlan, WeekAlignment, WeeklySchedule
from .time_estimates import round_half_up

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


@dataclass
class RollupResult:
    weekly_schedule: List[WeeklySchedule] = field(default_factory=list)
    milestones: List[Milestone] = field(default_factory=list)


def _week_anchor(first_day: date, alignment: WeekAlignment) -> date:
    if alignment == "sunday":
        # date.weekday(): Monday=0 .. Sunday=6
        return first_day - timedelta(days=(first_day.weekday() + 1) % DAYS_PER_WEEK)
    return first_day


def build_milestones(
    unit_plans: Sequence[UnitPlan],
    study_days: Sequence[date],
    hours_per_day: float,
) -> List[Milestone]:
    """One milestone per unit at the day its cumulative hours should be done."""
    if not study_days:
        logger.info("No study days available for milestones")
        return []
    total_hours = sum(unit.estimated_hours for unit in unit_plans)
    last_index = len(study_days) - 1
    milestones: List[Milestone] = []
    cumulative_hours = 0.0
    day_index = 0
    for position, unit in enumerate(unit_plans):
        if hours_per_day > 0:
            day_index = min(day_index + math.ceil(unit.estimated_hours / hours_per_day), last_index)
        else:
            day_index = last_index
        cumulative_hours += unit.estimated_hours
        percent = round_half_up(cumulative_hours / total_hours * 100) if total_hours > 0 else 0
        milestones.append(
            Milestone(
                date=study_days[day_index],
                description=f"Complete {unit.unit_title}",
                hours_completed=round(cumulative_hours, 1),
                percent_complete=int(percent),
                units_completed=[plan.unit_title for plan in unit_plans[: position + 1]],
            )
        )
    return milestones


def build_weekly_schedule(
    unit_plans: Sequence[UnitPlan],
    study_days: Sequence[date],
    hours_per_day: float,
    *,
    alignment: WeekAlignment = "first_study_day",
) -> List[WeeklySchedule]:
    """Fixed 7-day windows with a unit target and a slice of its topics.

    A unit stays the target until the weeks spent on it cover its estimated
    hours at that week's capacity.
    """
    if not study_days or not unit_plans:
        return []

    ordered_days = sorted(study_days)
    last_day = ordered_days[-1]
    week_start = _week_anchor(ordered_days[0], alignment)
    unit_index = 0
    weeks_on_unit = 1
    weeks: List[WeeklySchedule] = []

    while week_start <= last_day and unit_index < len(unit_plans):
        week_end = week_start + timedelta(days=DAYS_PER_WEEK - 1)
        available = sum(1 for day in ordered_days if week_start <= day <= week_end)
        unit = unit_plans[unit_index]
        weekly_hours = available * hours_per_day

        notes: List[str] = []
        if available < DAYS_PER_WEEK:
            notes.append(f"Only {available} study days this week due to constraints")

        topic_count = len(unit.topics)
        if topic_count == 0:
            topics_this_week = 0
        elif unit.estimated_hours <= 0:
            topics_this_week = topic_count
        else:
            hours_per_topic = unit.estimated_hours / topic_count
            topics_this_week = min(math.floor(weekly_hours / hours_per_topic), topic_count)

        weeks.append(
            WeeklySchedule(
                week_number=len(weeks) + 1,
                week_start=week_start,
                week_end=week_end,
                available_days=available,
                target_unit=f"Unit {unit.unit_number}: {unit.unit_title}",
                topics_to_complete=list(unit.topics[:topics_this_week]),
                total_weekly_hours=round(weekly_hours, 1),
                weekly_goal=f"Complete {topics_this_week} topics from {unit.unit_title}",
                notes=notes,
            )
        )

        if weekly_hours > 0 and weeks_on_unit >= math.ceil(unit.estimated_hours / weekly_hours):
            unit_index += 1
            weeks_on_unit = 1
        else:
            weeks_on_unit += 1
        week_start += timedelta(days=DAYS_PER_WEEK)

    return weeks


def rollup(
    unit_plans: Sequence[UnitPlan],
    study_days: Sequence[date],
    hours_per_day: float,
    *,
    alignment: WeekAlignment = "first_study_day",
) -> RollupResult:
    return RollupResult(
        weekly_schedule=build_weekly_schedule(
            unit_plans, study_days, hours_per_day, alignment=alignment
        ),
        milestones=build_milestones(unit_plans, study_days, hours_per_day),
    )


__all__ = ["RollupResult", "build_milestones", "build_weekly_schedule", "rollup"]
