from __future__ import annotations

import pytest

from course_planner.models import (
    CourseContent,
    CourseTopic,
    CourseTree,
    CourseUnit,
    InvalidCourseTreeError,
    TimeEstimate,
    VideoMetadata,
)
from course_planner.unit_planner import build_plan, build_topic_detail, coerce_course_tree


def _video(content_id: str, minutes: float) -> CourseContent:
    return CourseContent(
        id=content_id,
        title=f"Video {content_id}",
        content_kind="Video",
        video_metadata=VideoMetadata(duration_minutes=minutes),
    )


def _exercise(content_id: str) -> CourseContent:
    return CourseContent(id=content_id, title=f"Exercise {content_id}", content_kind="Exercise")


def test_single_short_video_topic_clamps_to_one_hour() -> None:
    detail = build_topic_detail(CourseTopic(id="t1", title="Intro", contents=[_video("v1", 10)]))

    assert detail.estimated_hours == 1.0
    assert detail.content_count == 1
    assert detail.video_count == 1
    assert detail.video_duration_minutes == 10
    assert detail.contents[0].estimated_minutes == 15


def test_topic_hours_round_half_tenths_up() -> None:
    detail = build_topic_detail(CourseTopic(id="t9", title="Fifty minutes", contents=[_video("v1", 50)]))

    # 75 minutes of study is 1.25 hours.
    assert detail.estimated_hours == 1.3


def test_long_topic_clamps_to_four_hours() -> None:
    contents = [_video(f"v{index}", 40) for index in range(6)]

    detail = build_topic_detail(CourseTopic(id="t2", title="Marathon", contents=contents))

    assert detail.estimated_hours == 4.0


def test_topic_estimate_takes_priority_over_contents() -> None:
    topic = CourseTopic(
        id="t3",
        title="Estimated",
        contents=[_video("v1", 10)],
        total_time_estimate=TimeEstimate(total_minutes=90),
    )

    assert build_topic_detail(topic).estimated_hours == 1.5


def test_topic_average_estimate_used_when_total_missing() -> None:
    topic = CourseTopic(
        id="t4",
        title="Averaged",
        contents=[_exercise("e1")],
        total_time_estimate=TimeEstimate(average_minutes=150),
    )

    assert build_topic_detail(topic).estimated_hours == 2.5


def test_synthesized_quiz_topic_uses_assessment_minutes() -> None:
    detail = build_topic_detail(CourseTopic(id="t5", title="Quiz 2"))

    assert detail.content_count == 1
    assert detail.contents[0].content_kind == "Topic quiz"
    assert detail.estimated_hours == 0.4


def test_article_only_topic_has_half_hour_floor() -> None:
    contents = [
        CourseContent(id=f"a{index}", title=f"Article {index}", content_kind="Article")
        for index in range(2)
    ]

    detail = build_topic_detail(CourseTopic(id="t6", title="Reading", contents=contents))

    assert detail.estimated_hours == 0.5


def test_unresolvable_topic_counts_as_zero_hours() -> None:
    detail = build_topic_detail(CourseTopic(id="t7", title="Coming soon"))

    assert detail.estimated_hours == 0
    assert detail.contents == []


def test_build_plan_numbers_units_and_sums_topic_hours() -> None:
    tree = CourseTree(
        title="Calculus 2",
        units=[
            CourseUnit(
                id="u1",
                title="Integrals",
                topics=[
                    CourseTopic(id="t1", title="Intro", contents=[_video("v1", 10)]),
                    CourseTopic(id="t2", title="Practice", contents=[_exercise("e1")]),
                ],
            ),
            CourseUnit(id="u2", title="Empty unit"),
        ],
    )

    plans = build_plan(tree)

    assert [plan.unit_number for plan in plans] == [1, 2]
    assert [plan.week_target for plan in plans] == [1, 2]
    assert plans[0].topics == ["Intro", "Practice"]
    assert plans[0].estimated_hours == 2.0
    assert plans[1].estimated_hours == 0
    assert plans[1].topic_details == []


def test_non_trivial_topics_without_estimates_get_at_least_an_hour_each() -> None:
    topics = [
        CourseTopic(id=f"t{index}", title=f"Topic {index}", contents=[_exercise(f"e{index}")])
        for index in range(3)
    ]

    plans = build_plan({"units": [{"id": "u1", "title": "Series", "topics": [t.model_dump() for t in topics]}]})

    assert plans[0].estimated_hours >= 3.0


def test_build_plan_accepts_mappings() -> None:
    plans = build_plan({"title": "Raw", "units": [{"id": "u1", "title": "Only unit"}]})

    assert len(plans) == 1
    assert plans[0].unit_title == "Only unit"


def test_missing_units_is_invalid_input() -> None:
    with pytest.raises(InvalidCourseTreeError):
        build_plan({"title": "No units here"})


def test_malformed_units_are_invalid_input() -> None:
    with pytest.raises(InvalidCourseTreeError):
        build_plan({"units": [{"title": "Unit without id"}]})


def test_non_mapping_input_is_invalid() -> None:
    with pytest.raises(InvalidCourseTreeError):
        coerce_course_tree(["not", "a", "tree"])  # type: ignore[arg-type]
