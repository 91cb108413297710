"""Offer, training, licensing and class-assignment transitions."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from ..schemas import (
    Candidate,
    CandidatePatch,
    ClassAssignmentPatch,
    Cohort,
    CohortPatch,
    LicensingPatch,
    OfferPatch,
    OffersPatch,
)
from .eligibility import EligibilityResolver
from .progress import initial_participant_progress

OfferKind = Literal["pre_license_offer", "full_agent_offer"]

CHECKLIST_FIELDS = (
    "pre_start_call_completed",
    "start_confirmed",
    "background_disclosure_completed",
    "badge_received",
    "it_request_completed",
)


def _offer(candidate: Candidate, kind: OfferKind):
    if kind not in ("pre_license_offer", "full_agent_offer"):
        raise ValueError(f"Unknown offer kind: {kind!r}")
    return getattr(candidate.offers, kind)


def send_offer(candidate: Candidate, kind: OfferKind, now: datetime) -> CandidatePatch:
    if kind == "pre_license_offer" and candidate.background_check.status != "Completed":
        raise ValueError("Pre-license offer requires a completed background check")
    if kind == "full_agent_offer" and not candidate.is_licensed:
        raise ValueError("Full agent offer requires a licensed candidate")
    _offer(candidate, kind)
    return CandidatePatch(offers=OffersPatch(**{kind: OfferPatch(sent=True, sent_at=now)}))


def sign_offer(candidate: Candidate, kind: OfferKind, now: datetime) -> CandidatePatch:
    offer = _offer(candidate, kind)
    if offer.signed:
        return CandidatePatch()
    if not offer.sent:
        raise ValueError(f"Cannot sign {kind.replace('_', ' ')} before it is sent")
    return CandidatePatch(offers=OffersPatch(**{kind: OfferPatch(signed=True, signed_at=now)}))


def mark_training_complete(candidate: Candidate, now: datetime) -> CandidatePatch:
    if candidate.is_licensed:
        raise ValueError("Training completion only applies to the unlicensed track")
    if not candidate.offers.pre_license_offer.signed:
        raise ValueError("Training requires a signed pre-license offer")
    if not candidate.class_assigned:
        raise ValueError("Candidate must be assigned to a class before completing training")
    return CandidatePatch(
        class_assignment=ClassAssignmentPatch(
            training_completed=True,
            training_completed_date=now,
        )
    )


def record_exam_attempt(candidate: Candidate) -> CandidatePatch:
    return CandidatePatch(
        licensing=LicensingPatch(exam_attempts=candidate.licensing.exam_attempts + 1)
    )


def mark_licensed(candidate: Candidate, now: datetime) -> CandidatePatch:
    if candidate.is_licensed:
        return CandidatePatch()
    return CandidatePatch(
        license_status="Licensed",
        licensing=LicensingPatch(
            license_obtained=True,
            license_passed=True,
            license_passed_at=now,
        ),
        class_assignment=ClassAssignmentPatch(
            graduated_to_licensing=candidate.class_assignment.training_completed,
        ),
    )


def update_checklist(candidate: Candidate, **items: bool) -> CandidatePatch:
    """Set onboarding checklist items and derive ``ready_to_go`` from the result."""
    unknown = set(items) - set(CHECKLIST_FIELDS)
    if unknown:
        raise ValueError(f"Unknown checklist items: {sorted(unknown)}")
    checklist = candidate.class_assignment.checklist()
    checklist.update(items)
    return CandidatePatch(
        class_assignment=ClassAssignmentPatch(**items),
        ready_to_go=all(checklist.values()),
    )


def add_participant_patches(
    candidate: Candidate,
    cohort: Cohort,
    now: datetime,
    *,
    resolver: EligibilityResolver | None = None,
) -> tuple[CohortPatch, CandidatePatch]:
    """Enroll a candidate; raises ``IneligibleAssignment`` with every failed rule."""
    resolver = resolver or EligibilityResolver()
    resolver.require_eligible(candidate, cohort)

    progress = dict(cohort.participant_progress)
    progress[candidate.id] = initial_participant_progress(candidate.id, now)
    cohort_patch = CohortPatch(
        participants=[*cohort.participants, candidate.id],
        participant_progress=progress,
        updated_at=now,
    )
    candidate_patch = CandidatePatch(
        class_assignment=ClassAssignmentPatch(
            start_date=cohort.start_date,
            start_confirmed=True,
            class_type=cohort.class_type,
        ),
        ready_to_go=False,
        updated_at=now,
    )
    return cohort_patch, candidate_patch


def remove_participant_patches(
    candidate: Candidate,
    cohort: Cohort,
    now: datetime,
) -> tuple[CohortPatch, CandidatePatch]:
    progress = {
        key: value
        for key, value in cohort.participant_progress.items()
        if key != candidate.id
    }
    cohort_patch = CohortPatch(
        participants=[pid for pid in cohort.participants if pid != candidate.id],
        participant_progress=progress,
        updated_at=now,
    )
    candidate_patch = CandidatePatch(
        class_assignment=ClassAssignmentPatch(start_date=None, start_confirmed=False),
        ready_to_go=False,
        updated_at=now,
    )
    return cohort_patch, candidate_patch
