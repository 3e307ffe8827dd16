"""End-to-end study plan pipeline.

Each stage takes its inputs explicitly and returns a new structure:

    course tree -> build_plan -> unit plans
    calendar    -> days_for   -> study days
    unit plans + study days -> run_allocation -> daily breakdown + backlog
    unit plans + study days -> rollup         -> weekly goals + milestones
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import httpx

from .config import Settings, get_settings
from .course_source import fetch_course_tree
from .course_store import is_data_file_valid, load_course_document, save_course_document
from .daily_allocator import run_allocation
from .models import CourseDocument, CourseTree, PacingStrategy, StudyPlan, WeekAlignment
from .rollup import rollup
from .study_calendar import CalendarConfig, days_for
from .telemetry import elapsed_ms, emit_event
from .unit_planner import build_plan, coerce_course_tree

logger = logging.getLogger(__name__)


def build_study_plan(
    course_tree: Union[CourseTree, Mapping[str, Any]],
    calendar: CalendarConfig,
    hours_per_day: float,
    *,
    strategy: PacingStrategy = "adaptive",
    week_alignment: WeekAlignment = "first_study_day",
) -> StudyPlan:
    """Run every planning stage for one course and calendar.

    Raises ``InvalidCourseTreeError`` for a structurally invalid tree. An empty
    calendar yields a plan with no days, weeks or milestones.
    """
    started = time.perf_counter()
    try:
        tree = coerce_course_tree(course_tree)
        unit_plans = build_plan(tree)
        study_days = days_for(calendar)
        allocation = run_allocation(unit_plans, study_days, hours_per_day, strategy=strategy)
        summary = rollup(unit_plans, study_days, hours_per_day, alignment=week_alignment)
    except Exception as exc:  # noqa: BLE001
        emit_event(
            "study_plan_generated",
            status="error",
            duration_ms=elapsed_ms(started),
            strategy=strategy,
            error=str(exc),
            exception_type=exc.__class__.__name__,
        )
        logger.exception("Failed to build study plan")
        raise

    plan = StudyPlan(
        course_title=tree.title,
        total_study_days=len(study_days),
        study_hours_per_day=hours_per_day,
        total_hours_needed=round(sum(unit.estimated_hours for unit in unit_plans), 1),
        pacing_strategy=strategy,
        week_alignment=week_alignment,
        unit_planning=unit_plans,
        daily_breakdown=allocation.days,
        weekly_schedule=summary.weekly_schedule,
        milestones=summary.milestones,
        backlog=allocation.backlog,
    )

    emit_event(
        "study_plan_generated",
        status="success" if study_days else "empty",
        duration_ms=elapsed_ms(started),
        strategy=strategy,
        week_alignment=week_alignment,
        day_count=plan.total_study_days,
        unit_count=len(unit_plans),
        item_count=sum(len(topic.contents) for unit in unit_plans for topic in unit.topic_details),
        total_hours=plan.total_hours_needed,
        backlog_minutes=plan.backlog_minutes,
    )
    if plan.backlog:
        emit_event(
            "schedule_backlog_detected",
            strategy=strategy,
            item_count=len(plan.backlog),
            backlog_minutes=plan.backlog_minutes,
            first_item=plan.backlog[0].title,
        )
    return plan


def ensure_course_document(
    settings: Settings,
    *,
    force_refresh: bool = False,
    client: Optional[httpx.Client] = None,
) -> CourseDocument:
    """Load the stored course, fetching and saving it first when needed."""
    data_path = Path(settings.data_file)
    if force_refresh or not is_data_file_valid(data_path, settings.data_max_age_days):
        logger.info("Fetching %s into %s", settings.course_path, data_path)
        document = fetch_course_tree(
            settings.course_path,
            settings.country_code,
            client=client,
            settings=settings,
        )
        save_course_document(document, data_path)
    return load_course_document(data_path)


def generate_plan(
    settings: Optional[Settings] = None,
    *,
    force_refresh: bool = False,
    client: Optional[httpx.Client] = None,
) -> StudyPlan:
    settings = settings or get_settings()
    document = ensure_course_document(settings, force_refresh=force_refresh, client=client)
    return build_study_plan(
        document.course,
        settings.calendar_config(),
        settings.hours_per_day,
        strategy=settings.pacing_strategy,
        week_alignment=settings.week_alignment,
    )


__all__ = ["build_study_plan", "ensure_course_document", "generate_plan"]
