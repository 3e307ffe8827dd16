"""Course tree and study plan models."""

from __future__ import annotations

import datetime as dt
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DayStatus = Literal["completed", "partial", "review"]
PacingStrategy = Literal["adaptive", "fixed"]
WeekAlignment = Literal["first_study_day", "sunday"]


class InvalidCourseTreeError(ValueError):
    """Raised when course data violates the structural input contract."""


class CourseFetchError(RuntimeError):
    """Raised when the course API cannot be reached or returns an unusable payload."""


class TimeEstimate(BaseModel):
    """Composite time estimate in minutes. Built by ``time_estimates`` helpers."""

    model_config = ConfigDict(frozen=True)

    lower_bound: float = 0
    upper_bound: float = 0
    average_minutes: int = 0
    video_minutes: float = 0
    total_minutes: int = 0


# Course tree -----------------------------------------------------------------


class KeyMoment(BaseModel):
    start_offset: float
    end_offset: float
    label: str


class Subtitle(BaseModel):
    text: str
    start_time: float
    end_time: float
    is_valid: bool = True


class Thumbnail(BaseModel):
    url: str
    category: str = ""


class VideoMetadata(BaseModel):
    """Video details fetched per video from the content API."""

    duration: Optional[float] = None
    duration_minutes: Optional[float] = None
    download_urls: Dict[str, str] = Field(default_factory=dict)
    key_moments: List[KeyMoment] = Field(default_factory=list)
    subtitles: List[Subtitle] = Field(default_factory=list)
    thumbnail_urls: List[Thumbnail] = Field(default_factory=list)
    youtube_id: Optional[str] = None
    author_names: List[str] = Field(default_factory=list)
    date_added: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    educational_level: Optional[str] = None


class CourseContent(BaseModel):
    id: str
    title: str
    description: str = ""
    content_kind: str = "Other"
    slug: str = ""
    url: str = ""
    time_estimate: Optional[TimeEstimate] = None
    video_metadata: Optional[VideoMetadata] = None


class CourseTopic(BaseModel):
    id: str
    title: str
    description: str = ""
    slug: str = ""
    url: str = ""
    contents: List[CourseContent] = Field(default_factory=list)
    total_time_estimate: Optional[TimeEstimate] = None


class CourseUnit(BaseModel):
    id: str
    title: str
    description: str = ""
    slug: str = ""
    url: str = ""
    topics: List[CourseTopic] = Field(default_factory=list)
    total_time_estimate: Optional[TimeEstimate] = None


class CourseChallenge(BaseModel):
    id: str
    time_estimate: TimeEstimate


class CourseTree(BaseModel):
    """Normalized course: units -> topics -> contents."""

    id: str = ""
    title: str = ""
    description: str = ""
    slug: str = ""
    url: str = ""
    icon_path: str = ""
    mastery_enabled: bool = False
    units: List[CourseUnit]
    course_challenge: Optional[CourseChallenge] = None
    mastery_challenge: Optional[CourseChallenge] = None
    total_time_estimate: Optional[TimeEstimate] = None


class ExtractionMetadata(BaseModel):
    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    commit_sha: str = ""
    path: str = ""
    country_code: str = ""


class UnitSummary(BaseModel):
    title: str
    topic_count: int
    content_count: int
    video_count: int
    video_duration_minutes: float
    estimated_minutes: float


class VideoStats(BaseModel):
    total: int = 0
    with_metadata: int = 0
    with_key_moments: int = 0
    with_subtitles: int = 0
    total_duration_minutes: float = 0
    total_duration_formatted: str = ""


class ContentStats(BaseModel):
    videos: VideoStats = Field(default_factory=VideoStats)
    exercises: int = 0
    articles: int = 0
    quizzes: int = 0
    unit_tests: int = 0
    other: int = 0


class ChallengeTime(BaseModel):
    minutes: int
    formatted: str


class TimeBreakdown(BaseModel):
    video_minutes: float = 0
    video_formatted: str = ""
    exercise_minutes: float = 0
    total_minutes: float = 0
    total_formatted: str = ""
    course_challenge: Optional[ChallengeTime] = None
    mastery_challenge: Optional[ChallengeTime] = None


class CourseOverview(BaseModel):
    title: str
    description: str = ""
    slug: str = ""
    total_units: int = 0
    total_topics: int = 0
    total_content_items: int = 0
    mastery_enabled: bool = False


class CourseSummary(BaseModel):
    course: CourseOverview
    content: ContentStats
    time_estimate: TimeBreakdown
    unit_summaries: List[UnitSummary] = Field(default_factory=list)
    metadata: ExtractionMetadata


class CourseDocument(BaseModel):
    """Persisted form of a fetched course."""

    course: CourseTree
    metadata: ExtractionMetadata = Field(default_factory=ExtractionMetadata)
    summary: Optional[CourseSummary] = None


# Study plan ------------------------------------------------------------------


class ContentItem(BaseModel):
    id: str
    title: str
    content_kind: str
    estimated_minutes: float
    url: Optional[str] = None


class TopicDetail(BaseModel):
    title: str
    estimated_hours: float
    content_count: int
    video_count: int
    video_duration_minutes: float
    contents: List[ContentItem] = Field(default_factory=list)


class UnitPlan(BaseModel):
    unit_number: int
    unit_title: str
    topics: List[str] = Field(default_factory=list)
    estimated_hours: float = 0
    week_target: int = 1
    topic_details: List[TopicDetail] = Field(default_factory=list)


class ScheduledSlice(BaseModel):
    """Minutes of one content item assigned to one day."""

    content_id: str
    title: str
    content_kind: str
    topic_title: str
    unit_title: str
    minutes: float
    is_partial: bool = False
    part_number: Optional[int] = None
    total_parts: Optional[int] = None


class DailyBreakdown(BaseModel):
    day: str
    date: str
    study_date: dt.date
    topic: str
    topic_breakdown: str
    unit_title: str
    week_number: int
    study_hours: float
    scheduled_minutes: float = 0
    status: DayStatus = "review"
    slices: List[ScheduledSlice] = Field(default_factory=list)
    daily_schedule: str = ""


class BacklogEntry(BaseModel):
    content_id: str
    title: str
    topic_title: str
    unit_title: str
    estimated_minutes: float
    remaining_minutes: float


class WeeklySchedule(BaseModel):
    week_number: int
    week_start: dt.date
    week_end: dt.date
    available_days: int
    target_unit: str
    topics_to_complete: List[str] = Field(default_factory=list)
    total_weekly_hours: float
    weekly_goal: str
    notes: List[str] = Field(default_factory=list)


class Milestone(BaseModel):
    date: dt.date
    description: str
    hours_completed: float
    percent_complete: int
    units_completed: List[str] = Field(default_factory=list)


class StudyPlan(BaseModel):
    """Aggregate output of one planning run."""

    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    course_title: str = ""
    total_study_days: int
    study_hours_per_day: float
    total_hours_needed: float
    pacing_strategy: PacingStrategy = "adaptive"
    week_alignment: WeekAlignment = "first_study_day"
    unit_planning: List[UnitPlan] = Field(default_factory=list)
    daily_breakdown: List[DailyBreakdown] = Field(default_factory=list)
    weekly_schedule: List[WeeklySchedule] = Field(default_factory=list)
    milestones: List[Milestone] = Field(default_factory=list)
    backlog: List[BacklogEntry] = Field(default_factory=list)

    @property
    def backlog_minutes(self) -> float:
        return round(sum(entry.remaining_minutes for entry in self.backlog), 1)


__all__ = [
    "BacklogEntry",
    "ContentItem",
    "CourseChallenge",
    "CourseContent",
    "CourseDocument",
    "CourseFetchError",
    "CourseSummary",
    "CourseTopic",
    "CourseTree",
    "CourseUnit",
    "DailyBreakdown",
    "DayStatus",
    "ExtractionMetadata",
    "InvalidCourseTreeError",
    "Milestone",
    "PacingStrategy",
    "ScheduledSlice",
    "StudyPlan",
    "TimeEstimate",
    "TopicDetail",
    "UnitPlan",
    "VideoMetadata",
    "WeekAlignment",
    "WeeklySchedule",
]
