from __future__ import annotations

import itertools
from datetime import date

import pendulum
import pytest

from onboardtrack.core.progress import (
    COHORT_STAGES,
    ProgressConfig,
    advance_participant_stage,
    calculate_participant_progress,
    cohort_statistics,
    initial_participant_progress,
    is_participant_on_track,
    milestone_suggestions,
    refresh_participant_progress,
    stage_display_name,
)
from onboardtrack.schemas import Cohort

NOW = pendulum.datetime(2025, 10, 6, 9, 0, tz="UTC")
START = date(2025, 10, 6)


def completed_through(stage: str, current_status: str = "in_progress") -> dict[str, str]:
    index = COHORT_STAGES.index(stage)
    statuses = {name: "completed" for name in COHORT_STAGES[:index]}
    statuses[stage] = current_status
    return statuses


def build_cohort(**fields) -> Cohort:
    data = {
        "id": "cohort-1",
        "call_center": "CLT",
        "class_type": "UNL",
        "start_date": START,
    }
    data.update(fields)
    return Cohort.model_validate(data)


def test_week_three_in_progress_is_thirty_two_percent():
    assert calculate_participant_progress("WK_3_CSR", completed_through("WK_3_CSR")) == 32


def test_start_not_started_is_zero():
    assert calculate_participant_progress("START", {"START": "not_started"}) == 0


def test_fully_completed_is_one_hundred():
    statuses = completed_through("COMPLETED", current_status="completed")

    assert calculate_participant_progress("COMPLETED", statuses) == 100


def test_half_credit_applies_only_to_current_stage():
    statuses = {"START": "in_progress", "WK_1": "in_progress"}

    assert calculate_participant_progress("WK_1", statuses) == round(0.5 / 11 * 100)


def test_unknown_stage_is_zero():
    assert calculate_participant_progress("WK_10", {"WK_10": "completed"}) == 0


def test_progress_is_always_an_integer_percentage():
    for stage, status in itertools.product(
        COHORT_STAGES, ("not_started", "in_progress", "completed", "failed")
    ):
        value = calculate_participant_progress(stage, completed_through(stage, status))
        assert isinstance(value, int)
        assert 0 <= value <= 100


def test_not_started_cohort_is_always_on_track():
    assert is_participant_on_track(START, 0, date(2025, 10, 1)) is True


@pytest.mark.parametrize(
    "progress,expected",
    [(24, True), (23, False), (100, True)],
)
def test_on_track_allows_ten_point_tolerance(progress, expected):
    # 21 days in: expected 33.3%
    assert is_participant_on_track(START, progress, date(2025, 10, 27)) is expected


def test_expected_progress_caps_at_one_hundred():
    assert is_participant_on_track(START, 90, date(2026, 3, 1)) is True
    assert is_participant_on_track(START, 89, date(2026, 3, 1)) is False


def test_on_track_honours_configured_program_length():
    config = ProgressConfig(program_days=42, on_track_tolerance=5.0)

    assert is_participant_on_track(START, 45, date(2025, 10, 27), config=config) is True
    assert is_participant_on_track(START, 44, date(2025, 10, 27), config=config) is False


def test_advance_completes_current_and_starts_next_stage():
    progress = initial_participant_progress("cand-1", NOW)

    advanced = advance_participant_stage(progress, "WK_1", NOW.add(days=7))

    assert advanced.current_stage == "WK_1"
    assert advanced.stage_progress["START"].status == "completed"
    assert advanced.stage_progress["WK_1"].status == "in_progress"
    assert advanced.overall_progress == round(1.5 / 11 * 100)


def test_advance_rejects_backward_moves():
    progress = advance_participant_stage(
        initial_participant_progress("cand-1", NOW), "WK_2", NOW
    )

    with pytest.raises(ValueError):
        advance_participant_stage(progress, "WK_1", NOW)
    with pytest.raises(ValueError):
        advance_participant_stage(progress, "WK_12", NOW)


def test_refresh_and_statistics():
    on_time = initial_participant_progress("a", NOW)
    lagging = initial_participant_progress("b", NOW).model_copy(
        update={"flagged_concerns": ["Attendance"]}
    )
    cohort = build_cohort(
        participants=["a", "b"],
        participant_progress={"a": on_time, "b": lagging},
    )
    as_of = date(2025, 11, 10)

    refreshed = {
        pid: refresh_participant_progress(cohort, progress, as_of)
        for pid, progress in cohort.participant_progress.items()
    }
    stats = cohort_statistics(cohort.model_copy(update={"participant_progress": refreshed}))

    assert refreshed["a"].is_on_track is False
    assert stats.total_participants == 2
    assert stats.participants_on_track == 0
    assert stats.participants_with_concerns == 1
    assert stats.stage_distribution == {"START": 2}


def test_stage_names_and_milestones():
    assert stage_display_name("WK_7_A_BAY") == "Week 7 - A-Bay"
    assert stage_display_name("UNKNOWN") == "UNKNOWN"
    assert milestone_suggestions("START")[0]["title"] == "Complete Orientation"
    assert milestone_suggestions("UNKNOWN") == []
