"""Cohort assignment eligibility rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..schemas import Candidate, Cohort, Trainer
from .errors import IneligibleAssignment

LARGE_COHORT_SIZE = 20


@dataclass(slots=True)
class EligibilityResult:
    """Verdict with every violated rule listed, in rule order."""

    is_eligible: bool
    reasons: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RosterValidation:
    is_valid: bool
    issues: list[str]
    warnings: list[str]


class EligibilityResolver:
    """Decide whether a candidate may join a cohort.

    Every rule is evaluated so callers see all violations at once.
    """

    def check(
        self,
        candidate: Candidate,
        cohort: Cohort,
        *,
        existing_participant: bool = False,
    ) -> EligibilityResult:
        reasons: list[str] = []

        if candidate.call_center != cohort.call_center:
            reasons.append(
                f"Call center mismatch: candidate is {candidate.call_center}, "
                f"cohort requires {cohort.call_center}"
            )

        if candidate.status != "Active":
            reasons.append(f"Candidate status is {candidate.status}, must be Active")

        background_status = candidate.background_check.status
        if background_status != "Completed":
            reasons.append(
                f"Background check status is {background_status or 'Not Started'}, "
                "must be Completed"
            )

        if not existing_participant and candidate.id in cohort.participants:
            reasons.append("Candidate is already a participant in this cohort")

        assignment = candidate.class_assignment
        if (
            assignment.start_date is not None
            and assignment.start_confirmed
            and assignment.start_date != cohort.start_date
        ):
            reasons.append(
                "Candidate is already confirmed for a different cohort starting "
                f"{assignment.start_date.isoformat()}"
            )

        if cohort.class_type == "UNL":
            if candidate.license_status != "Unlicensed":
                reasons.append(
                    f"Class type is UNL but candidate license status is {candidate.license_status}"
                )
            if not candidate.offers.pre_license_offer.signed:
                reasons.append("Pre-license offer must be signed for UNL class")
        elif cohort.class_type == "AGENT":
            if candidate.license_status != "Licensed":
                reasons.append(
                    f"Class type is AGENT but candidate license status is {candidate.license_status}"
                )

        return EligibilityResult(is_eligible=not reasons, reasons=reasons)

    def require_eligible(self, candidate: Candidate, cohort: Cohort) -> None:
        result = self.check(candidate, cohort)
        if not result.is_eligible:
            raise IneligibleAssignment(candidate.id, cohort.id, result.reasons)

    def assignable_candidates(
        self,
        candidates: Iterable[Candidate],
        cohort: Cohort,
    ) -> list[Candidate]:
        """Candidates that may be offered in the cohort's add-participant list."""
        return [c for c in candidates if self.check(c, cohort).is_eligible]

    def validate_cohort_participants(
        self,
        cohort: Cohort,
        participants: Iterable[Candidate],
    ) -> RosterValidation:
        roster = list(participants)
        issues: list[str] = []
        warnings: list[str] = []

        for participant in roster:
            result = self.check(participant, cohort, existing_participant=True)
            if not result.is_eligible:
                name = participant.personal_info.name or participant.id
                issues.append(f"{name}: {', '.join(result.reasons)}")

        if not roster:
            warnings.append("Cohort has no participants assigned")
        elif len(roster) > LARGE_COHORT_SIZE:
            warnings.append(
                f"Large cohort size ({len(roster)} participants) may affect training quality"
            )

        licensed = sum(1 for p in roster if p.license_status == "Licensed")
        unlicensed = sum(1 for p in roster if p.license_status == "Unlicensed")
        if licensed and unlicensed:
            warnings.append(
                "Mixed license types in cohort - consider separating licensed and unlicensed agents"
            )

        return RosterValidation(is_valid=not issues, issues=issues, warnings=warnings)


def filter_candidates_for_bulk_actions(
    candidates: Iterable[Candidate],
    *,
    call_center: str | None = None,
    license_status: str | None = None,
    ready_for_class: bool = False,
    unassigned: bool = False,
) -> list[Candidate]:
    selected: list[Candidate] = []
    for candidate in candidates:
        if call_center and candidate.call_center != call_center:
            continue
        if license_status and candidate.license_status != license_status:
            continue
        if ready_for_class:
            offer = (
                candidate.offers.pre_license_offer
                if candidate.license_status == "Unlicensed"
                else candidate.offers.full_agent_offer
            )
            if candidate.background_check.status != "Completed" or not offer.signed:
                continue
        if unassigned:
            assignment = candidate.class_assignment
            if assignment.start_date is not None and assignment.start_confirmed:
                continue
        selected.append(candidate)
    return selected


def check_trainer_assignment(trainer: Trainer, cohort: Cohort) -> EligibilityResult:
    """Trainers must be active, cover the cohort's site and have spare capacity."""
    reasons: list[str] = []
    if not trainer.is_active:
        reasons.append(f"Trainer {trainer.name} is inactive")
    if trainer.call_center not in ("Both", cohort.call_center):
        reasons.append(
            f"Trainer {trainer.name} covers {trainer.call_center}, cohort is {cohort.call_center}"
        )
    if cohort.id not in trainer.current_assignments and (
        len(trainer.current_assignments) >= trainer.max_capacity
    ):
        reasons.append(
            f"Trainer {trainer.name} is at capacity "
            f"({len(trainer.current_assignments)}/{trainer.max_capacity})"
        )
    return EligibilityResult(is_eligible=not reasons, reasons=reasons)
