"""Interview lifecycle state machine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

import pendulum
import structlog

from ..schemas import (
    BackgroundCheckPatch,
    Candidate,
    CandidatePatch,
    InterviewEvaluation,
    InterviewPatch,
    InterviewRecord,
)
from .errors import EvaluationRequired, InvalidTransition
from .scoring import PASSING_SCORE, composite_score, mean_score, passes

STATUS_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "Not Started": ("Scheduled",),
    "Scheduled": ("In Progress", "Not Started"),
    "In Progress": ("Completed",),
    "Completed": (),
}

EVALUATION_STATUSES = ("In Progress", "Completed")


@dataclass
class InterviewConfig:
    """Thresholds used when an interview is completed."""

    passing_score: float = PASSING_SCORE


@dataclass(slots=True)
class NextAction:
    label: str
    action: str


class InterviewStateMachine:
    """Validate interview transitions and build the candidate patches they produce.

    The machine never writes anything itself: each operation returns a
    ``CandidatePatch`` for the caller to persist.
    """

    def __init__(
        self,
        *,
        config: InterviewConfig | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or InterviewConfig()
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))
        self._logger = structlog.get_logger(__name__)

    @staticmethod
    def can_transition_to(current: str, requested: str) -> bool:
        return requested in STATUS_TRANSITIONS.get(current, ())

    def schedule(
        self,
        candidate: Candidate,
        *,
        scheduled_date: datetime,
        location: str,
        calendar_event_id: str,
        interviewer_email: str | None = None,
    ) -> CandidatePatch:
        self._require_transition(candidate, "Scheduled")
        if not location:
            raise ValueError("Interview location is required")
        if not calendar_event_id:
            raise ValueError("Calendar event reference is required")
        when = pendulum.instance(scheduled_date)
        if when <= pendulum.instance(self._now_provider()):
            raise ValueError(f"Interview must be scheduled in the future, got {when}")

        return CandidatePatch(
            interview=InterviewPatch(
                status="Scheduled",
                scheduled_date=scheduled_date,
                calendar_event_id=calendar_event_id,
                location=location,
                interviewer_email=interviewer_email,
            )
        )

    def start(self, candidate: Candidate) -> CandidatePatch:
        self._require_transition(candidate, "In Progress")
        return CandidatePatch(interview=InterviewPatch(status="In Progress"))

    def cancel(self, candidate: Candidate) -> CandidatePatch:
        self._require_transition(candidate, "Not Started")
        return CandidatePatch(
            interview=InterviewPatch(
                status="Not Started",
                scheduled_date=None,
                calendar_event_id=None,
                location=None,
            )
        )

    def complete(
        self,
        candidate: Candidate,
        *,
        force_result: str | None = None,
    ) -> CandidatePatch:
        """Close the interview and derive its result from the scorecards.

        ``force_result`` is the authorized override for completing an interview
        that has no scorecards, or whose outcome was decided outside them.
        """
        self._require_transition(candidate, "Completed")
        if force_result not in (None, "Passed", "Failed"):
            raise ValueError(f"Unsupported interview result: {force_result!r}")

        evaluations = candidate.interview.evaluations
        if not evaluations and force_result is None:
            raise EvaluationRequired(candidate.id)

        score = composite_score(evaluations)
        passed = passes(mean_score(evaluations), passing_score=self._config.passing_score)
        result = force_result or ("Passed" if passed else "Failed")
        interview_patch = InterviewPatch(
            status="Completed",
            result=result,
            completed_date=self._now_provider(),
            composite_score=score,
        )
        if result == "Passed" and candidate.background_check.status is None:
            patch = CandidatePatch(
                interview=interview_patch,
                background_check=BackgroundCheckPatch(status="Pending"),
            )
        else:
            patch = CandidatePatch(interview=interview_patch)

        self._logger.info(
            "interview.completed",
            candidate_id=candidate.id,
            composite_score=score,
            result=result,
            forced=force_result is not None,
        )
        return patch

    def add_evaluation(
        self,
        candidate: Candidate,
        evaluation: InterviewEvaluation | dict[str, Any],
    ) -> CandidatePatch:
        status = candidate.interview.status
        if status not in EVALUATION_STATUSES:
            raise InvalidTransition(
                status,
                "Evaluation",
                "Can only add evaluations to interviews in progress or completed",
            )
        if not isinstance(evaluation, InterviewEvaluation):
            evaluation = InterviewEvaluation.model_validate(evaluation)

        evaluations = [*candidate.interview.evaluations, evaluation]
        return CandidatePatch(
            interview=InterviewPatch(
                evaluations=evaluations,
                composite_score=composite_score(evaluations),
            )
        )

    @staticmethod
    def next_action(interview: InterviewRecord | None) -> NextAction | None:
        status = interview.status if interview else "Not Started"
        if status == "Not Started":
            return NextAction(label="Schedule Interview", action="schedule")
        if status == "Scheduled":
            return NextAction(label="Start Interview", action="start")
        if status == "In Progress":
            return NextAction(label="Complete Interview", action="complete")
        return None

    def _require_transition(self, candidate: Candidate, requested: str) -> None:
        current = candidate.interview.status
        if not self.can_transition_to(current, requested):
            raise InvalidTransition(current, requested)
