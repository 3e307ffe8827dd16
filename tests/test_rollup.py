from __future__ import annotations

from datetime import date, timedelta
from typing import List, Sequence

from course_planner.models import UnitPlan
from course_planner.rollup import build_milestones, build_weekly_schedule, rollup


def _days(count: int, start: date = date(2025, 6, 23)) -> List[date]:
    return [start + timedelta(days=offset) for offset in range(count)]


def _unit(number: int, title: str, hours: float, topics: Sequence[str]) -> UnitPlan:
    return UnitPlan(
        unit_number=number,
        unit_title=title,
        topics=list(topics),
        estimated_hours=hours,
        week_target=number,
    )


def test_single_unit_milestone_lands_on_second_day() -> None:
    unit = _unit(1, "Integrals", 4.0, ["Topic A", "Topic B"])
    days = _days(3)

    milestones = build_milestones([unit], days, 4)

    assert len(milestones) == 1
    milestone = milestones[0]
    assert milestone.date == days[1]
    assert milestone.percent_complete == 100
    assert milestone.hours_completed == 4.0
    assert milestone.description == "Complete Integrals"
    assert milestone.units_completed == ["Integrals"]


def test_milestones_accumulate_days_and_percentages() -> None:
    units = [
        _unit(1, "Integrals", 4.0, ["A", "B"]),
        _unit(2, "Series", 8.0, ["C", "D", "E", "F"]),
    ]
    days = _days(10)

    milestones = build_milestones(units, days, 2)

    assert [m.date for m in milestones] == [days[2], days[6]]
    assert [m.percent_complete for m in milestones] == [33, 100]
    assert milestones[1].units_completed == ["Integrals", "Series"]


def test_milestones_clamp_to_last_study_day() -> None:
    units = [_unit(1, "Integrals", 4.0, ["A"]), _unit(2, "Series", 8.0, ["B"])]
    days = _days(3)

    milestones = build_milestones(units, days, 1)

    assert [m.date for m in milestones] == [days[2], days[2]]


def test_zero_hour_course_reports_zero_percent() -> None:
    milestones = build_milestones([_unit(1, "Empty", 0.0, [])], _days(2), 3)

    assert milestones[0].percent_complete == 0
    assert milestones[0].date == _days(2)[0]


def test_empty_calendar_rolls_up_to_nothing() -> None:
    result = rollup([_unit(1, "Integrals", 4.0, ["A"])], [], 3)

    assert result.milestones == []
    assert result.weekly_schedule == []


def test_weekly_windows_start_on_first_study_day() -> None:
    units = [
        _unit(1, "Integrals", 4.0, ["A", "B"]),
        _unit(2, "Series", 8.0, ["C", "D", "E", "F"]),
    ]

    weeks = build_weekly_schedule(units, _days(10), 2)

    assert len(weeks) == 2
    first, second = weeks
    assert first.week_start == date(2025, 6, 23)
    assert first.week_end == date(2025, 6, 29)
    assert first.available_days == 7
    assert first.total_weekly_hours == 14
    assert first.target_unit == "Unit 1: Integrals"
    assert first.topics_to_complete == ["A", "B"]
    assert first.weekly_goal == "Complete 2 topics from Integrals"
    assert first.notes == []

    assert second.target_unit == "Unit 2: Series"
    assert second.available_days == 3
    assert second.topics_to_complete == ["C", "D", "E"]
    assert second.notes == ["Only 3 study days this week due to constraints"]


def test_unit_stays_target_until_its_hours_are_covered() -> None:
    units = [_unit(1, "Integrals", 20.0, ["A", "B", "C", "D"])]

    weeks = build_weekly_schedule(units, _days(21), 1)

    # 7 hours a week against 20 hours of work keeps the unit for three weeks.
    assert [week.target_unit for week in weeks] == ["Unit 1: Integrals"] * 3
    assert [week.week_number for week in weeks] == [1, 2, 3]
    assert weeks[0].topics_to_complete == ["A"]


def test_sunday_alignment_anchors_weeks_to_previous_sunday() -> None:
    units = [_unit(1, "Integrals", 30.0, ["A", "B", "C"])]
    # 2025-06-25 is a Wednesday.
    days = _days(6, start=date(2025, 6, 25))

    weeks = build_weekly_schedule(units, days, 2, alignment="sunday")

    assert weeks[0].week_start == date(2025, 6, 22)
    assert weeks[0].week_end == date(2025, 6, 28)
    assert weeks[0].available_days == 4
    assert weeks[1].week_start == date(2025, 6, 29)
    assert weeks[1].available_days == 2


def test_single_study_day_still_gets_a_week() -> None:
    weeks = build_weekly_schedule([_unit(1, "Integrals", 2.0, ["A"])], _days(1), 3)

    assert len(weeks) == 1
    assert weeks[0].available_days == 1
