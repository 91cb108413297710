"""Failure taxonomy raised by the onboarding core."""

from __future__ import annotations

from typing import Sequence


class OnboardingError(Exception):
    """Base class for onboarding decision failures."""


class InvalidTransition(OnboardingError):
    """Requested interview transition is not allowed from the current state."""

    def __init__(self, current: str, requested: str, message: str | None = None):
        self.current = current
        self.requested = requested
        super().__init__(
            message or f"Cannot move interview from {current!r} to {requested!r}"
        )


class EvaluationRequired(OnboardingError):
    """Interview completion was attempted without any scorecards."""

    def __init__(self, candidate_id: str | None = None):
        self.candidate_id = candidate_id
        super().__init__("Cannot complete interview without evaluations")


class IneligibleAssignment(OnboardingError):
    """Candidate failed one or more cohort eligibility rules."""

    def __init__(self, candidate_id: str, cohort_id: str, reasons: Sequence[str]):
        self.candidate_id = candidate_id
        self.cohort_id = cohort_id
        self.reasons = list(reasons)
        super().__init__(
            f"Candidate {candidate_id} is not eligible for cohort {cohort_id}"
        )

    def __str__(self) -> str:
        return f"{self.args[0]}: {'; '.join(self.reasons)}"


class StaleOrMissingEntity(OnboardingError, LookupError):
    """Referenced entity was not found in the store at read time."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id!r} not found")


__all__ = [
    "EvaluationRequired",
    "IneligibleAssignment",
    "InvalidTransition",
    "OnboardingError",
    "StaleOrMissingEntity",
]
