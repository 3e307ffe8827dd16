"""Command line entry point: fetch course data, inspect it and build plans."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from .config import Settings, get_settings
from .course_source import fetch_course_tree
from .course_store import inspect_data_file, load_course_document, save_course_document
from .course_summary import generate_course_summary
from .logging_config import configure_logging
from .planner import generate_plan
from .reports import render_curriculum_overview, render_plan_markdown, write_plan_json, write_plan_markdown

logger = logging.getLogger("course_planner.cli")


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value}")
    return number


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="course-planner",
        description="Plan a course curriculum across the available study days.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate-data", help="Fetch and store the course data file.")
    generate.add_argument("--force", "-f", action="store_true", help="Refetch even if the file exists.")
    generate.add_argument("--verbose", "-v", action="store_true")

    commands.add_parser("check-data", help="Report the status of the stored course data.")

    plan = commands.add_parser("plan", help="Build and print the study plan.")
    plan.add_argument("--verbose", "-v", action="store_true")
    plan.add_argument("--hours-per-day", type=_positive_float)
    plan.add_argument("--strategy", choices=("adaptive", "fixed"))
    plan.add_argument("--week-alignment", choices=("first_study_day", "sunday"))
    plan.add_argument("--start", type=_iso_date, help="First study date (YYYY-MM-DD).")
    plan.add_argument("--end", type=_iso_date, help="Study end date, exclusive (YYYY-MM-DD).")
    plan.add_argument("--refresh", action="store_true", help="Refetch the course data first.")
    plan.add_argument("--output-json", type=Path)
    plan.add_argument("--output-markdown", type=Path)

    commands.add_parser("curriculum", help="Show the stored course overview.")
    return parser


def _plan_settings(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {
        "hours_per_day": args.hours_per_day,
        "pacing_strategy": args.strategy,
        "week_alignment": args.week_alignment,
        "study_start": args.start,
        "study_end": args.end,
    }
    return settings.model_copy(update={key: value for key, value in overrides.items() if value is not None})


def _generate_data(settings: Settings, args: argparse.Namespace) -> int:
    data_path = Path(settings.data_file)
    if data_path.exists() and not args.force:
        print(f"{data_path} already exists (use --force to regenerate)")
        return 0

    document = fetch_course_tree(settings.course_path, settings.country_code, settings=settings)
    save_course_document(document, data_path)
    print(f"Generated {data_path}")
    if args.verbose:
        summary = generate_course_summary(document)
        print(f"  Units: {summary.course.total_units}")
        print(f"  Content items: {summary.course.total_content_items}")
        print(f"  Estimated time: {summary.time_estimate.total_formatted}")
    return 0


def _check_data(settings: Settings) -> int:
    status = inspect_data_file(settings.data_file)
    if not status.exists:
        print(f"MISSING - {status.path}")
        print('Run "generate-data" to create it.')
        return 1
    if status.error is not None:
        print(f"CORRUPTED - {status.path}: {status.error}")
        return 1
    print(f"EXISTS - {status.path}")
    print(f"  Size: {status.size_kb:.1f} KB")
    print(f"  Modified: {status.modified:%Y-%m-%d}")
    print(f"  Course: {status.course_title or 'Unknown'}")
    print(f"  Units: {status.unit_count}")
    return 0


def _plan(settings: Settings, args: argparse.Namespace) -> int:
    settings = _plan_settings(settings, args)
    if settings.study_end <= settings.study_start:
        logger.error("Study end %s must be after start %s", settings.study_end, settings.study_start)
        return 1
    if args.verbose:
        print(f"Study period: {settings.study_start} to {settings.study_end} (end exclusive)")
        for window in settings.blackout_windows:
            print(f"  Blackout: {window.label or 'unnamed'} {window.start} to {window.end}")
        print(f"  Hours per day: {settings.hours_per_day:g} ({settings.pacing_strategy} pacing)")

    plan = generate_plan(settings, force_refresh=args.refresh)
    if args.output_json:
        write_plan_json(plan, args.output_json)
    if args.output_markdown:
        write_plan_markdown(plan, args.output_markdown)
    print(render_plan_markdown(plan), end="")
    return 0


def _curriculum(settings: Settings) -> int:
    data_path = Path(settings.data_file)
    if not data_path.exists():
        print(f'{data_path} not found. Run "generate-data" first.')
        return 1
    print(render_curriculum_overview(load_course_document(data_path)), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if getattr(args, "verbose", False) else None)
    try:
        settings = get_settings()
        if args.command == "generate-data":
            return _generate_data(settings, args)
        if args.command == "check-data":
            return _check_data(settings)
        if args.command == "plan":
            return _plan(settings, args)
        return _curriculum(settings)
    except Exception as exc:  # noqa: BLE001
        logger.exception("%s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
