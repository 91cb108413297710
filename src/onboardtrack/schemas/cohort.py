from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .candidate import CallCenter, ClassType

CohortStage = Literal[
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
]
StageStatus = Literal["not_started", "in_progress", "completed", "failed"]
TrainerType = Literal["SSS", "CAP"]
CohortStatus = Literal["Active", "Completed", "On Hold"]


class TrainerRef(BaseModel):
    """Trainer summary embedded in a cohort."""

    name: str
    type: TrainerType
    contact: str | None = None

    model_config = ConfigDict(extra="forbid")


class Milestone(BaseModel):
    stage: str
    completed_at: datetime | None = None
    notes: str | None = None

    model_config = ConfigDict(extra="forbid")


class PerformanceMetrics(BaseModel):
    attendance: float | None = None
    assessment_scores: list[float] = Field(default_factory=list)
    behavioral_ratings: float | None = None

    model_config = ConfigDict(extra="forbid")


class StageProgress(BaseModel):
    status: StageStatus = "not_started"
    started_at: datetime | None = None
    completed_at: datetime | None = None
    notes: str | None = None
    performance_metrics: PerformanceMetrics | None = None

    model_config = ConfigDict(extra="forbid")


class ParticipantProgress(BaseModel):
    """One participant's advancement through the cohort's weekly stages."""

    participant_id: str
    current_stage: CohortStage = "START"
    stage_progress: dict[CohortStage, StageProgress] = Field(default_factory=dict)
    overall_progress: int = Field(default=0, ge=0, le=100)
    is_on_track: bool = True
    flagged_concerns: list[str] = Field(default_factory=list)
    last_updated: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class CohortPerformance(BaseModel):
    metrics: str | None = None
    last_updated: datetime | None = None
    notes: str | None = None

    model_config = ConfigDict(extra="forbid")


class Cohort(BaseModel):
    """Training class grouping candidates by site, class type and start date."""

    id: str
    name: str = ""
    call_center: CallCenter
    class_type: ClassType
    current_stage: CohortStage = "START"
    week_number: int = Field(default=0, ge=0)
    start_date: date
    expected_end_date: date | None = None
    trainer: TrainerRef | None = None
    participants: list[str] = Field(default_factory=list)
    participant_progress: dict[str, ParticipantProgress] = Field(default_factory=dict)
    performance: CohortPerformance = Field(default_factory=CohortPerformance)
    milestones: list[Milestone] = Field(default_factory=list)
    status: CohortStatus = "Active"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class Trainer(BaseModel):
    """Staffing resource; capacity-bounded and scoped to a site."""

    id: str
    name: str
    type: TrainerType
    email: str | None = None
    phone: str | None = None
    call_center: Literal["CLT", "ATX", "Both"]
    current_assignments: list[str] = Field(default_factory=list)
    max_capacity: int = Field(default=1, ge=0)
    specializations: list[str] = Field(default_factory=list)
    is_active: bool = True

    model_config = ConfigDict(extra="forbid")
