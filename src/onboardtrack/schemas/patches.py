"""Typed partial updates for candidate and cohort documents.

A patch only carries the fields that were explicitly set, so ``None`` can be
used to clear a value. Nested patch models are merged field by field; any
other value (lists, mappings, embedded records) replaces the stored one.
Unknown fields are rejected at construction time.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from .candidate import (
    BackgroundCheckStatus,
    Candidate,
    CandidateStatus,
    ClassType,
    ExtendedStatuses,
    InterviewEvaluation,
    InterviewResult,
    InterviewStatus,
    LicenseStatus,
    VendorTimestamps,
)
from .cohort import (
    Cohort,
    CohortStage,
    CohortStatus,
    Milestone,
    ParticipantProgress,
    TrainerRef,
)


class _Patch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def merge_into(self, document: dict[str, Any]) -> dict[str, Any]:
        merged = dict(document)
        for name in self.model_fields_set:
            value = getattr(self, name)
            if isinstance(value, _Patch):
                current = merged.get(name)
                merged[name] = value.merge_into(current if isinstance(current, dict) else {})
            else:
                merged[name] = _dump(value)
        return merged

    def is_empty(self) -> bool:
        return not self.model_fields_set


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="python")
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    return value


class InterviewPatch(_Patch):
    status: InterviewStatus | None = None
    result: InterviewResult | None = None
    scheduled_date: datetime | None = None
    completed_date: datetime | None = None
    evaluations: list[InterviewEvaluation] | None = None
    composite_score: float | None = None
    calendar_event_id: str | None = None
    location: str | None = None
    interviewer_email: str | None = None


class BackgroundCheckPatch(_Patch):
    initiated: bool | None = None
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


class OfferPatch(_Patch):
    sent: bool | None = None
    sent_at: datetime | None = None
    signed: bool | None = None
    signed_at: datetime | None = None


class OffersPatch(_Patch):
    pre_license_offer: OfferPatch | None = None
    full_agent_offer: OfferPatch | None = None


class LicensingPatch(_Patch):
    license_obtained: bool | None = None
    license_passed: bool | None = None
    license_passed_at: datetime | None = None
    exam_attempts: int | None = None
    notes: str | None = None


class ClassAssignmentPatch(_Patch):
    class_type: ClassType | None = None
    start_date: date | None = None
    start_confirmed: bool | None = None
    pre_start_call_completed: bool | None = None
    background_disclosure_completed: bool | None = None
    badge_received: bool | None = None
    it_request_completed: bool | None = None
    training_completed: bool | None = None
    training_completed_date: datetime | None = None
    graduated_to_licensing: bool | None = None


class CandidatePatch(_Patch):
    license_status: LicenseStatus | None = None
    status: CandidateStatus | None = None
    interview: InterviewPatch | None = None
    background_check: BackgroundCheckPatch | None = None
    offers: OffersPatch | None = None
    licensing: LicensingPatch | None = None
    class_assignment: ClassAssignmentPatch | None = None
    ready_to_go: bool | None = None
    notes: str | None = None
    updated_at: datetime | None = None


class CohortPatch(_Patch):
    name: str | None = None
    current_stage: CohortStage | None = None
    week_number: int | None = None
    expected_end_date: date | None = None
    trainer: TrainerRef | None = None
    participants: list[str] | None = None
    participant_progress: dict[str, ParticipantProgress] | None = None
    milestones: list[Milestone] | None = None
    status: CohortStatus | None = None
    updated_at: datetime | None = None


def apply_candidate_patch(candidate: Candidate, patch: CandidatePatch) -> Candidate:
    """Return a new, re-validated candidate with ``patch`` merged in."""
    merged = patch.merge_into(candidate.model_dump(mode="python"))
    return Candidate.model_validate(merged)


def apply_cohort_patch(cohort: Cohort, patch: CohortPatch) -> Cohort:
    """Return a new, re-validated cohort with ``patch`` merged in."""
    merged = patch.merge_into(cohort.model_dump(mode="python"))
    return Cohort.model_validate(merged)
