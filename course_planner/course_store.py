"""JSON persistence for fetched course documents."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .course_summary import generate_course_summary
from .models import CourseDocument, InvalidCourseTreeError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def summary_path_for(path: PathLike) -> Path:
    path = Path(path)
    return path.with_name(f"{path.stem}-summary{path.suffix or '.json'}")


def save_course_document(document: CourseDocument, path: PathLike) -> Path:
    """Write ``document`` with its summary, plus the summary on its own beside it."""
    path = Path(path)
    summary = generate_course_summary(document)
    stored = document.model_copy(update={"summary": summary})

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(stored.model_dump(mode="json", exclude_none=True), handle, indent=2)
    summary_path = summary_path_for(path)
    with summary_path.open("w", encoding="utf-8") as handle:
        json.dump(summary.model_dump(mode="json", exclude_none=True), handle, indent=2)

    logger.info("Saved course data to %s and summary to %s", path, summary_path)
    return path


def load_course_document(path: PathLike) -> CourseDocument:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except ValueError as exc:
        raise InvalidCourseTreeError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict) or not isinstance(raw.get("course"), dict):
        raise InvalidCourseTreeError(f"{path} does not contain a course.")
    if "units" not in raw["course"]:
        raise InvalidCourseTreeError(f"{path} course is missing the required 'units' field.")
    try:
        return CourseDocument.model_validate(raw)
    except ValidationError as exc:
        raise InvalidCourseTreeError(f"{path} failed validation: {exc}") from exc


def is_data_file_valid(path: PathLike, max_age_days: int = 30) -> bool:
    """True when ``path`` holds a loadable course document.

    Stale files stay valid; their age is only reported as a warning.
    """
    path = Path(path)
    if not path.exists():
        return False
    try:
        document = load_course_document(path)
    except (InvalidCourseTreeError, OSError) as exc:
        logger.warning("Course data file %s is unusable: %s", path, exc)
        return False

    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    age = datetime.now(timezone.utc) - modified
    if age > timedelta(days=max_age_days):
        logger.warning(
            "Course data file %s is %d days old; consider refreshing it",
            path,
            age.days,
        )
    logger.debug("Course data file %s holds %d units", path, len(document.course.units))
    return True


@dataclass
class DataFileStatus:
    path: Path
    exists: bool
    size_kb: float = 0.0
    modified: Optional[datetime] = None
    course_title: Optional[str] = None
    unit_count: int = 0
    error: Optional[str] = None

    @property
    def usable(self) -> bool:
        return self.exists and self.error is None


def inspect_data_file(path: PathLike) -> DataFileStatus:
    path = Path(path)
    if not path.exists():
        return DataFileStatus(path=path, exists=False)
    stat = path.stat()
    status = DataFileStatus(
        path=path,
        exists=True,
        size_kb=round(stat.st_size / 1024, 1),
        modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    )
    try:
        document = load_course_document(path)
    except InvalidCourseTreeError as exc:
        status.error = str(exc)
        return status
    status.course_title = document.course.title or None
    status.unit_count = len(document.course.units)
    return status


__all__ = [
    "DataFileStatus",
    "inspect_data_file",
    "is_data_file_valid",
    "load_course_document",
    "save_course_document",
    "summary_path_for",
]
