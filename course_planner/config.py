import os
from datetime import date
from functools import lru_cache
from typing import List, Literal, Union

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from .study_calendar import BlackoutWindow, CalendarConfig


def _default_blackouts() -> List[BlackoutWindow]:
    return [
        BlackoutWindow(start=date(2025, 7, 23), end=date(2025, 8, 7), label="Summer Vacation"),
        BlackoutWindow(start=date(2025, 9, 14), end=date(2025, 9, 17), label="Camping Trip"),
    ]


class Settings(BaseSettings):
    course_api_url: str = Field(
        "https://www.khanacademy.org/api/internal/graphql/ContentForPath",
        alias="COURSE_PLANNER_API_URL",
    )
    course_site_url: str = Field("https://www.khanacademy.org/", alias="COURSE_PLANNER_SITE_URL")
    course_api_hash: str = Field("45296627", alias="COURSE_PLANNER_API_HASH")
    course_api_pcv: str = Field(
        "892e3563cdaf14e26db1092266abcc8f9fd3419b",
        alias="COURSE_PLANNER_API_PCV",
    )
    course_path: str = Field("math/calculus-2", alias="COURSE_PLANNER_COURSE_PATH")
    country_code: str = Field("US", alias="COURSE_PLANNER_COUNTRY_CODE")
    request_timeout_seconds: float = Field(30.0, alias="COURSE_PLANNER_REQUEST_TIMEOUT", gt=0)
    request_delay_seconds: float = Field(0.2, alias="COURSE_PLANNER_REQUEST_DELAY", ge=0)
    max_videos: int = Field(50, alias="COURSE_PLANNER_MAX_VIDEOS", ge=0)
    data_file: str = Field("math-calculus-2.json", alias="COURSE_PLANNER_DATA_FILE")
    data_max_age_days: int = Field(30, alias="COURSE_PLANNER_DATA_MAX_AGE_DAYS", ge=0)
    study_start: date = Field(date(2025, 6, 23), alias="COURSE_PLANNER_STUDY_START")
    study_end: date = Field(date(2025, 9, 14), alias="COURSE_PLANNER_STUDY_END")
    blackout_windows: List[BlackoutWindow] = Field(
        default_factory=_default_blackouts,
        alias="COURSE_PLANNER_BLACKOUT_WINDOWS",
    )
    excluded_weekdays: List[Union[int, str]] = Field(
        default_factory=lambda: ["sunday"],
        alias="COURSE_PLANNER_EXCLUDED_WEEKDAYS",
    )
    hours_per_day: float = Field(3.0, alias="COURSE_PLANNER_HOURS_PER_DAY", gt=0)
    pacing_strategy: Literal["adaptive", "fixed"] = Field("adaptive", alias="COURSE_PLANNER_PACING")
    week_alignment: Literal["first_study_day", "sunday"] = Field(
        "first_study_day",
        alias="COURSE_PLANNER_WEEK_ALIGNMENT",
    )

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        populate_by_name = True

    def calendar_config(self) -> CalendarConfig:
        return CalendarConfig(
            start_date=self.study_start,
            end_date=self.study_end,
            blackout_windows=list(self.blackout_windows),
            excluded_weekdays=list(self.excluded_weekdays),
        )


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid planner configuration: {exc}") from exc
