"""Cohort training-week progress tracking."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping

from ..schemas import Cohort, ParticipantProgress, StageProgress

COHORT_STAGES: tuple[str, ...] = (
    "START",
    "WK_1",
    "WK_2",
    "WK_3_CSR",
    "WK_4_CSR",
    "WK_5_CSR",
    "WK_6_CSR",
    "WK_7_A_BAY",
    "WK_8_A_BAY",
    "WK_9_TEAM",
    "COMPLETED",
)

STAGE_DISPLAY_NAMES: dict[str, str] = {
    "START": "Orientation",
    "WK_1": "Week 1 - Foundations",
    "WK_2": "Week 2 - Products",
    "WK_3_CSR": "Week 3 - CSR Training",
    "WK_4_CSR": "Week 4 - CSR Training",
    "WK_5_CSR": "Week 5 - CSR Training",
    "WK_6_CSR": "Week 6 - CSR Training",
    "WK_7_A_BAY": "Week 7 - A-Bay",
    "WK_8_A_BAY": "Week 8 - A-Bay",
    "WK_9_TEAM": "Week 9 - Team Assignment",
    "COMPLETED": "Graduated",
}

MILESTONE_SUGGESTIONS: dict[str, list[tuple[str, str]]] = {
    "START": [
        ("Complete Orientation", "Attend orientation session and complete initial paperwork"),
        ("Set Up Workstation", "Receive equipment and set up workstation"),
        ("Meet Trainer", "Initial meeting with assigned trainer"),
    ],
    "WK_1": [
        ("Complete Foundation Modules", "Finish all week 1 training modules"),
        ("First Assessment", "Complete week 1 knowledge assessment"),
    ],
    "WK_2": [
        ("Product Knowledge Test", "Pass product knowledge assessment"),
        ("Shadow Experienced Agent", "Complete shadowing requirements"),
    ],
    "WK_3_CSR": [
        ("CSR System Training", "Complete customer service system training"),
        ("Phone Handling Practice", "Practice phone handling techniques"),
    ],
    "WK_4_CSR": [
        ("Customer Interaction Training", "Complete customer interaction modules"),
        ("CSR Assessment", "Pass CSR knowledge assessment"),
    ],
    "WK_5_CSR": [
        ("Advanced CSR Skills", "Complete advanced CSR training modules"),
        ("Practice Customer Scenarios", "Handle practice customer scenarios"),
    ],
    "WK_6_CSR": [
        ("CSR Certification", "Achieve CSR certification"),
        ("Prepare for A-Bay", "Complete A-Bay preparation modules"),
    ],
    "WK_7_A_BAY": [
        ("A-Bay Orientation", "Complete A-Bay orientation and setup"),
        ("Live Call Practice", "Begin supervised live call practice"),
    ],
    "WK_8_A_BAY": [
        ("Independent Calls", "Handle calls independently with minimal supervision"),
        ("A-Bay Assessment", "Pass A-Bay performance assessment"),
    ],
    "WK_9_TEAM": [
        ("Team Assignment", "Receive final team assignment"),
        ("Final Evaluation", "Complete final training evaluation"),
    ],
    "COMPLETED": [
        ("Graduation Certificate", "Receive training completion certificate"),
        ("Begin Production", "Start in assigned production team"),
    ],
}


@dataclass
class ProgressConfig:
    """Timeline assumptions for on-track checks."""

    program_days: int = 63
    on_track_tolerance: float = 10.0


@dataclass(slots=True)
class CohortStatistics:
    total_participants: int
    participants_on_track: int
    participants_with_concerns: int
    average_progress: float
    stage_distribution: dict[str, int]


def _status_of(entry: StageProgress | Mapping[str, Any] | str | None) -> str | None:
    if entry is None:
        return None
    if isinstance(entry, str):
        return entry
    if isinstance(entry, StageProgress):
        return entry.status
    return entry.get("status")


def calculate_participant_progress(
    current_stage: str,
    stage_progress: Mapping[str, StageProgress | Mapping[str, Any] | str],
) -> int:
    """Percent of the eleven stages completed, with half credit for the current one."""
    if current_stage not in COHORT_STAGES:
        return 0
    current_index = COHORT_STAGES.index(current_stage)

    completed = 0.0
    for stage in COHORT_STAGES[: current_index + 1]:
        if _status_of(stage_progress.get(stage)) == "completed":
            completed += 1
    if _status_of(stage_progress.get(current_stage)) == "in_progress":
        completed += 0.5

    return round(completed / len(COHORT_STAGES) * 100)


def is_participant_on_track(
    start_date: date,
    overall_progress: float,
    as_of: date,
    *,
    config: ProgressConfig | None = None,
) -> bool:
    config = config or ProgressConfig()
    elapsed_days = as_of.toordinal() - start_date.toordinal()
    if elapsed_days < 0:
        return True
    expected = min(100.0, elapsed_days / config.program_days * 100)
    return overall_progress >= expected - config.on_track_tolerance


def stage_display_name(stage: str) -> str:
    return STAGE_DISPLAY_NAMES.get(stage, stage)


def milestone_suggestions(stage: str) -> list[dict[str, str]]:
    return [
        {"title": title, "description": description}
        for title, description in MILESTONE_SUGGESTIONS.get(stage, [])
    ]


def initial_participant_progress(participant_id: str, now: datetime) -> ParticipantProgress:
    return ParticipantProgress(
        participant_id=participant_id,
        current_stage="START",
        stage_progress={"START": StageProgress(status="in_progress", started_at=now)},
        overall_progress=0,
        is_on_track=True,
        last_updated=now,
    )


def advance_participant_stage(
    progress: ParticipantProgress,
    new_stage: str,
    now: datetime,
) -> ParticipantProgress:
    """Complete the current stage and start ``new_stage``; only forward moves."""
    if new_stage not in COHORT_STAGES:
        raise ValueError(f"Unknown cohort stage: {new_stage!r}")
    if COHORT_STAGES.index(new_stage) <= COHORT_STAGES.index(progress.current_stage):
        raise ValueError(
            f"Cannot move participant from {progress.current_stage} back to {new_stage}"
        )

    stages = dict(progress.stage_progress)
    current = stages.get(progress.current_stage, StageProgress())
    stages[progress.current_stage] = current.model_copy(
        update={"status": "completed", "completed_at": now}
    )
    new_status = "completed" if new_stage == "COMPLETED" else "in_progress"
    stages[new_stage] = StageProgress(
        status=new_status,
        started_at=now,
        completed_at=now if new_status == "completed" else None,
    )

    return progress.model_copy(
        update={
            "current_stage": new_stage,
            "stage_progress": stages,
            "overall_progress": calculate_participant_progress(new_stage, stages),
            "last_updated": now,
        }
    )


def refresh_participant_progress(
    cohort: Cohort,
    progress: ParticipantProgress,
    as_of: date,
    *,
    config: ProgressConfig | None = None,
) -> ParticipantProgress:
    overall = calculate_participant_progress(progress.current_stage, progress.stage_progress)
    return progress.model_copy(
        update={
            "overall_progress": overall,
            "is_on_track": is_participant_on_track(
                cohort.start_date, overall, as_of, config=config
            ),
        }
    )


def cohort_statistics(cohort: Cohort) -> CohortStatistics:
    progress = list(cohort.participant_progress.values())
    average = sum(p.overall_progress for p in progress) / len(progress) if progress else 0.0
    return CohortStatistics(
        total_participants=len(cohort.participants),
        participants_on_track=sum(1 for p in progress if p.is_on_track),
        participants_with_concerns=sum(1 for p in progress if p.flagged_concerns),
        average_progress=average,
        stage_distribution=dict(Counter(p.current_stage for p in progress)),
    )
