from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

CallCenter = Literal["CLT", "ATX"]
LicenseStatus = Literal["Licensed", "Unlicensed"]
CandidateStatus = Literal["Active", "Completed", "Dropped", "On Hold"]
InterviewStatus = Literal["Not Started", "Scheduled", "In Progress", "Completed"]
InterviewResult = Literal["Passed", "Failed"]
BackgroundCheckStatus = Literal["Pending", "In Progress", "Review", "Completed", "Failed"]
SectionStatus = Literal["Pass", "Fail", "Review"]
ClassType = Literal["UNL", "AGENT"]
Recommendation = Literal["Strongly Recommend", "Recommend", "Neutral", "Do Not Recommend"]


class PersonalInfo(BaseModel):
    """Contact channels for a candidate."""

    name: str = ""
    email: str | None = None
    phone: str | None = None
    alt_phone: str | None = None
    location: str | None = None

    model_config = ConfigDict(extra="forbid")


class EvaluationScores(BaseModel):
    """Five structured interview sub-scores, each 1-5."""

    communication: int = Field(ge=1, le=5)
    technical_skills: int = Field(ge=1, le=5)
    customer_service: int = Field(ge=1, le=5)
    problem_solving: int = Field(ge=1, le=5)
    culture_fit: int = Field(ge=1, le=5)

    model_config = ConfigDict(extra="forbid", frozen=True)

    def values(self) -> list[int]:
        return [
            self.communication,
            self.technical_skills,
            self.customer_service,
            self.problem_solving,
            self.culture_fit,
        ]

    def mean(self) -> float:
        scores = self.values()
        return round(sum(scores) / len(scores), 1)


class InterviewEvaluation(BaseModel):
    """One evaluator's scorecard for one interview.

    Scorecards are immutable: corrections are made by appending a new one.
    ``average_score`` is always stored as the sub-score mean to one decimal. A
    supplied value that does not round to that mean is rejected.
    """

    id: str = Field(default_factory=lambda: f"eval-{uuid.uuid4().hex[:12]}")
    manager_id: str | None = None
    manager_name: str | None = None
    manager_email: str | None = None
    evaluation_date: datetime | None = None
    scores: EvaluationScores
    average_score: float
    recommendation: Recommendation
    strengths: str = ""
    concerns: str = ""
    notes: str = ""

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _derive_average(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        scores = data.get("scores")
        if scores is None:
            return data
        if not isinstance(scores, EvaluationScores):
            scores = EvaluationScores.model_validate(scores)
        expected = scores.mean()
        provided = data.get("average_score")
        if provided is None:
            return {**data, "scores": scores, "average_score": expected}
        if round(float(provided), 1) != expected:
            raise ValueError(
                f"average_score {provided} does not match sub-score mean {expected}"
            )
        return {**data, "scores": scores, "average_score": expected}


class InterviewRecord(BaseModel):
    """Interview lifecycle state."""

    status: InterviewStatus = "Not Started"
    result: InterviewResult | None = None
    scheduled_date: datetime | None = None
    completed_date: datetime | None = None
    evaluations: list[InterviewEvaluation] = Field(default_factory=list)
    composite_score: float | None = None
    calendar_event_id: str | None = None
    location: str | None = None
    interviewer_email: str | None = None

    model_config = ConfigDict(extra="forbid")


class ExtendedStatuses(BaseModel):
    """Per-section background check outcomes reported by the vendor."""

    credit: SectionStatus | None = None
    federal: SectionStatus | None = None
    state: SectionStatus | None = None
    social: SectionStatus | None = None
    pdb: SectionStatus | None = None
    sex_offender: SectionStatus | None = None
    drug: SectionStatus | None = None
    employment: SectionStatus | None = None
    education: SectionStatus | None = None

    model_config = ConfigDict(extra="forbid")

    def reported(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


class VendorTimestamps(BaseModel):
    submitted: str | None = None
    completed: str | None = None

    model_config = ConfigDict(extra="forbid")


class BackgroundCheckRecord(BaseModel):
    """Background check state; ``status`` is ``None`` until the check is queued."""

    initiated: bool = False
    status: BackgroundCheckStatus | None = None
    passed: bool | None = None
    passed_at: datetime | None = None
    failed_at: datetime | None = None
    completed_at: datetime | None = None
    last_checked_at: datetime | None = None
    notes: str | None = None
    ibr_id: str | None = None
    extended_statuses: ExtendedStatuses | None = None
    report_url: str | None = None
    timestamps: VendorTimestamps | None = None

    model_config = ConfigDict(extra="forbid")


class OfferRecord(BaseModel):
    sent: bool = False
    sent_at: datetime | None = None
    signed: bool = False
    signed_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class Offers(BaseModel):
    pre_license_offer: OfferRecord = Field(default_factory=OfferRecord)
    full_agent_offer: OfferRecord = Field(default_factory=OfferRecord)

    model_config = ConfigDict(extra="forbid")


class Licensing(BaseModel):
    license_obtained: bool = False
    license_passed: bool = False
    license_passed_at: datetime | None = None
    exam_attempts: int = Field(default=0, ge=0)
    notes: str | None = None

    model_config = ConfigDict(extra="forbid")


class ClassAssignment(BaseModel):
    """Class placement, the onboarding checklist and unlicensed training state."""

    class_type: ClassType | None = None
    start_date: date | None = None
    start_confirmed: bool = False
    pre_start_call_completed: bool = False
    background_disclosure_completed: bool = False
    badge_received: bool = False
    it_request_completed: bool = False
    training_completed: bool = False
    training_completed_date: datetime | None = None
    graduated_to_licensing: bool = False

    model_config = ConfigDict(extra="forbid")

    def checklist(self) -> dict[str, bool]:
        return {
            "pre_start_call_completed": self.pre_start_call_completed,
            "start_confirmed": self.start_confirmed,
            "background_disclosure_completed": self.background_disclosure_completed,
            "badge_received": self.badge_received,
            "it_request_completed": self.it_request_completed,
        }

    def checklist_completed(self) -> int:
        return sum(1 for done in self.checklist().values() if done)

    def checklist_complete(self) -> bool:
        return all(self.checklist().values())


class Candidate(BaseModel):
    """Applicant record accumulated across every onboarding stage."""

    id: str
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    call_center: CallCenter
    license_status: LicenseStatus = "Unlicensed"
    resume_url: str | None = None
    interview: InterviewRecord = Field(default_factory=InterviewRecord)
    background_check: BackgroundCheckRecord = Field(default_factory=BackgroundCheckRecord)
    offers: Offers = Field(default_factory=Offers)
    licensing: Licensing = Field(default_factory=Licensing)
    class_assignment: ClassAssignment = Field(default_factory=ClassAssignment)
    ready_to_go: bool = False
    status: CandidateStatus = "Active"
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _ready_requires_checklist(self) -> "Candidate":
        if self.ready_to_go and not self.class_assignment.checklist_complete():
            raise ValueError("ready_to_go requires every onboarding checklist item")
        return self

    @property
    def is_licensed(self) -> bool:
        return self.license_status == "Licensed"

    @property
    def class_assigned(self) -> bool:
        return self.class_assignment.start_date is not None
