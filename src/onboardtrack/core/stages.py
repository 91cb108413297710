"""Onboarding step derivation."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable

from ..schemas import Candidate
from .scoring import PASSING_SCORE, meets_hiring_criteria

CHECKLIST_SIZE = 5
READY_BUCKET = "ready"


@dataclass(slots=True)
class StepAction:
    label: str
    section: str
    action: str | None = None


@dataclass(slots=True)
class OnboardingStep:
    id: str
    title: str
    description: str
    is_complete: bool
    is_locked: bool
    is_active: bool = False
    action: StepAction | None = None
    requirements: list[str] = field(default_factory=list)
    completed_at: datetime | date | None = None


@dataclass(slots=True)
class OnboardingPlan:
    """Ordered steps plus the derived progress view for one candidate."""

    candidate_id: str
    track: str
    steps: list[OnboardingStep]
    completed_steps: int
    total_steps: int
    progress_percent: int

    @property
    def active_step(self) -> OnboardingStep | None:
        return next((step for step in self.steps if step.is_active), None)

    @property
    def is_complete(self) -> bool:
        return self.completed_steps == self.total_steps


class StageDeriver:
    """Turn a candidate record into its ordered onboarding steps."""

    def derive(self, candidate: Candidate) -> OnboardingPlan:
        steps = self._build_steps(candidate)

        active = next((step for step in steps if not step.is_complete), None)
        if active is not None:
            active.is_active = True
            active.action = self._action_for(active.id, candidate)

        completed = sum(1 for step in steps if step.is_complete)
        return OnboardingPlan(
            candidate_id=candidate.id,
            track="Licensed Track" if candidate.is_licensed else "Unlicensed Track",
            steps=steps,
            completed_steps=completed,
            total_steps=len(steps),
            progress_percent=round(completed / len(steps) * 100),
        )

    def _build_steps(self, candidate: Candidate) -> list[OnboardingStep]:
        interview = candidate.interview
        background = candidate.background_check
        offers = candidate.offers
        assignment = candidate.class_assignment

        interview_complete = interview.status == "Completed" and interview.result == "Passed"
        background_complete = background.status == "Completed"
        pre_signed = offers.pre_license_offer.signed
        full_signed = offers.full_agent_offer.signed
        licensed = candidate.is_licensed

        steps = [
            OnboardingStep(
                id="interview",
                title="Interview Process",
                description="Complete candidate interview and evaluation",
                is_complete=interview_complete,
                is_locked=False,
                requirements=["Resume reviewed", "Initial screening completed"],
                completed_at=interview.completed_date,
            ),
            OnboardingStep(
                id="background",
                title="Background Check",
                description=(
                    "Background check failed - review details"
                    if background.status == "Failed"
                    else "Complete background check process"
                ),
                is_complete=background_complete,
                is_locked=not interview_complete,
                requirements=[
                    "Interview passed (4.0+ score)",
                    "Personal information verified",
                    "Consent form signed",
                ],
                completed_at=background.passed_at,
            ),
            OnboardingStep(
                id="pre-license-offer",
                title="Pre-License Offer",
                description="Send and receive signed pre-license offer",
                is_complete=pre_signed,
                is_locked=not background_complete,
                requirements=["Background check passed", "Candidate is unlicensed"],
                completed_at=offers.pre_license_offer.signed_at,
            ),
        ]

        if not licensed and pre_signed:
            steps.append(
                OnboardingStep(
                    id="training-completion",
                    title="Complete UNL Training",
                    description=(
                        "2-week training program completed"
                        if assignment.training_completed
                        else "Complete 2-week unlicensed training program"
                    ),
                    is_complete=assignment.training_completed,
                    is_locked=not pre_signed,
                    requirements=[
                        "Pre-license offer signed",
                        "Assigned to UNL cohort",
                        "Completed 2-week training",
                    ],
                    completed_at=assignment.training_completed_date,
                )
            )

        if not licensed and assignment.training_completed:
            steps.append(
                OnboardingStep(
                    id="licensing",
                    title="Licensing Milestone",
                    description="Confirm candidate has passed state exam and obtained license",
                    is_complete=licensed,
                    is_locked=not assignment.training_completed,
                    requirements=["Completed UNL training", "State exam scheduled & passed"],
                    completed_at=candidate.licensing.license_passed_at,
                )
            )

        steps.append(
            OnboardingStep(
                id="full-offer",
                title="Full Agent Offer",
                description="Send and receive signed full agent offer",
                is_complete=full_signed,
                is_locked=not licensed,
                requirements=[
                    "Background check passed",
                    "License obtained",
                    "Ready for licensed class",
                ],
                completed_at=offers.full_agent_offer.signed_at,
            )
        )

        steps.append(
            OnboardingStep(
                id="class-assignment",
                title="Class Assignment",
                description=self._class_assignment_description(candidate),
                is_complete=candidate.ready_to_go,
                is_locked=not pre_signed and not full_signed,
                requirements=(
                    ["Full agent offer signed", "Training schedule confirmed"]
                    if licensed
                    else ["Pre-license offer signed", "Training schedule confirmed"]
                ),
                completed_at=assignment.start_date if candidate.ready_to_go else None,
            )
        )
        return steps

    @staticmethod
    def _class_assignment_description(candidate: Candidate) -> str:
        if candidate.ready_to_go:
            return "All onboarding tasks completed - Ready to start!"
        done = candidate.class_assignment.checklist_completed()
        progress = f"{done}/{CHECKLIST_SIZE} onboarding tasks completed"
        if not candidate.class_assigned:
            return f"Assign to training class and complete onboarding ({progress})"
        return f"Onboarding in progress ({progress})"

    @staticmethod
    def _action_for(step_id: str, candidate: Candidate) -> StepAction | None:
        if step_id == "interview":
            status = candidate.interview.status
            if status == "Not Started":
                return StepAction("Schedule Interview", "interview", "schedule")
            if status == "Scheduled":
                return StepAction("Start Interview", "interview", "start")
            if status == "In Progress":
                return StepAction("Complete Interview", "interview", "complete")
            return StepAction("View Interview", "interview")

        if step_id == "background":
            background = candidate.background_check
            if background.initiated and background.status == "Failed":
                return StepAction("View Details", "background")
            if background.initiated:
                return StepAction("Check Status", "background")
            return StepAction("Initiate Check", "background", "initiate")

        if step_id in ("pre-license-offer", "full-offer"):
            offer = (
                candidate.offers.pre_license_offer
                if step_id == "pre-license-offer"
                else candidate.offers.full_agent_offer
            )
            if offer.sent:
                return StepAction("Follow Up", "offers")
            return StepAction("Send Offer", "offers", "send")

        if step_id == "training-completion":
            if candidate.class_assigned:
                return StepAction("Mark Training Complete", "assignment", "training-complete")
            return StepAction("Assign to Class", "assignment")

        if step_id == "licensing":
            return StepAction("Mark Licensed", "licensing", "mark")

        if step_id == "class-assignment":
            if not candidate.class_assigned:
                return StepAction("Assign to Class", "assignment")
            return StepAction("Complete Checklist", "assignment")

        return None


def onboarding_funnel(
    candidates: Iterable[Candidate],
    deriver: StageDeriver | None = None,
) -> dict[str, int]:
    """Count candidates by their active onboarding step."""
    deriver = deriver or StageDeriver()
    counts: Counter[str] = Counter()
    for candidate in candidates:
        active = deriver.derive(candidate).active_step
        counts[active.id if active else READY_BUCKET] += 1
    return dict(counts)


def candidates_awaiting_background_check(
    candidates: Iterable[Candidate],
    *,
    passing_score: float = PASSING_SCORE,
) -> list[Candidate]:
    """Passed candidates whose background check is not started or still pending."""
    return [
        candidate
        for candidate in candidates
        if candidate.interview.result == "Passed"
        and meets_hiring_criteria(candidate.interview, passing_score=passing_score)
        and (
            not candidate.background_check.initiated
            or candidate.background_check.status == "Pending"
        )
    ]
