"""Available study day generation."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Sequence, Union

from pydantic import BaseModel, Field, field_validator, model_validator

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def parse_weekday(value: Union[int, str]) -> int:
    """Map a weekday name or ``date.weekday()`` index to its index (Monday=0)."""
    if isinstance(value, int):
        if 0 <= value <= 6:
            return value
        raise ValueError(f"Weekday index must be between 0 and 6, got {value}.")
    normalized = value.strip().lower()
    for index, name in enumerate(WEEKDAY_NAMES):
        if name == normalized or name[:3] == normalized:
            return index
    raise ValueError(f"Unknown weekday '{value}'.")


class BlackoutWindow(BaseModel):
    """Dates with no study; both ends inclusive."""

    start: date
    end: date
    label: str = ""

    @model_validator(mode="after")
    def _check_order(self) -> "BlackoutWindow":
        if self.end < self.start:
            raise ValueError(f"Blackout window ending {self.end} starts after it ends ({self.start}).")
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class CalendarConfig(BaseModel):
    """Study period ``[start_date, end_date)`` with blackouts and weekday exclusions."""

    start_date: date
    end_date: date
    blackout_windows: List[BlackoutWindow] = Field(default_factory=list)
    excluded_weekdays: List[int] = Field(default_factory=list)

    @field_validator("excluded_weekdays", mode="before")
    @classmethod
    def _parse_weekdays(cls, value: Iterable[Union[int, str]]) -> List[int]:
        return sorted({parse_weekday(entry) for entry in value or []})


def available_days(
    start_date: date,
    end_date: date,
    blackout_windows: Sequence[BlackoutWindow] = (),
    excluded_weekdays: Iterable[Union[int, str]] = (),
) -> List[date]:
    """Every day in ``[start_date, end_date)`` outside blackouts and excluded weekdays."""
    excluded = {parse_weekday(entry) for entry in excluded_weekdays}
    days: List[date] = []
    current = start_date
    while current < end_date:
        if current.weekday() not in excluded and not any(
            window.contains(current) for window in blackout_windows
        ):
            days.append(current)
        current += timedelta(days=1)
    return days


def days_for(config: CalendarConfig) -> List[date]:
    return available_days(
        config.start_date,
        config.end_date,
        config.blackout_windows,
        config.excluded_weekdays,
    )


__all__ = [
    "BlackoutWindow",
    "CalendarConfig",
    "WEEKDAY_NAMES",
    "available_days",
    "days_for",
    "parse_weekday",
]
