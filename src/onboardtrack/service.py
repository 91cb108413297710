"""Application service: read, decide, persist, audit."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

import pendulum
import structlog

from .adapters import BackgroundCheckVendor, CalendarClient, Notifier
from .core.background import (
    TERMINAL_STATUSES,
    BackgroundCheckChange,
    initiate_background_check,
    notification_message,
    override_background_check,
)
from .core.eligibility import EligibilityResolver, check_trainer_assignment
from .core.interview import InterviewStateMachine
from .core.onboarding import (
    OfferKind,
    add_participant_patches,
    mark_licensed,
    mark_training_complete,
    record_exam_attempt,
    remove_participant_patches,
    send_offer,
    sign_offer,
    update_checklist,
)
from .core.progress import advance_participant_stage
from .core.stages import OnboardingPlan, StageDeriver
from .pipeline import AuditLogger
from .repository import InMemoryRepository
from .schemas import (
    Candidate,
    CandidatePatch,
    Cohort,
    CohortPatch,
    InterviewEvaluation,
    Notification,
    TrainerRef,
)


class OnboardingService:
    """Run onboarding actions against the repository.

    Every action reads the current documents, asks the core for a patch and
    persists it. Core exceptions propagate unchanged to the caller.
    """

    def __init__(
        self,
        *,
        repository: InMemoryRepository,
        machine: InterviewStateMachine,
        resolver: EligibilityResolver,
        deriver: StageDeriver,
        vendor: BackgroundCheckVendor | None = None,
        calendar_client: CalendarClient | None = None,
        notifier: Notifier | None = None,
        audit_logger: AuditLogger | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._machine = machine
        self._resolver = resolver
        self._deriver = deriver
        self._vendor = vendor
        self._calendar = calendar_client
        self._notifier = notifier
        self._audit = audit_logger
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))
        self._logger = structlog.get_logger(__name__)

    def plan(self, candidate_id: str) -> OnboardingPlan:
        return self._deriver.derive(self._repository.get_candidate(candidate_id))

    # Interview

    def schedule_interview(
        self,
        candidate_id: str,
        *,
        scheduled_date: datetime,
        location: str,
        interviewer_email: str | None = None,
        calendar_event_id: str | None = None,
    ) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        if calendar_event_id is None and self._calendar is not None:
            attendees = [a for a in (interviewer_email, candidate.personal_info.email) if a]
            calendar_event_id = self._calendar.create_event(
                candidate=candidate,
                start=scheduled_date,
                location=location,
                attendees=attendees,
            )
        patch = self._machine.schedule(
            candidate,
            scheduled_date=scheduled_date,
            location=location,
            calendar_event_id=calendar_event_id or "",
            interviewer_email=interviewer_email,
        )
        return self._commit(candidate, patch, "interview.scheduled", scheduled_date=scheduled_date)

    def start_interview(self, candidate_id: str) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        return self._commit(candidate, self._machine.start(candidate), "interview.started")

    def cancel_interview(self, candidate_id: str) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        patch = self._machine.cancel(candidate)
        event_id = candidate.interview.calendar_event_id
        if self._calendar is not None and event_id:
            self._calendar.delete_event(event_id)
        return self._commit(candidate, patch, "interview.cancelled")

    def add_evaluation(
        self,
        candidate_id: str,
        evaluation: InterviewEvaluation | dict[str, Any],
    ) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        patch = self._machine.add_evaluation(candidate, evaluation)
        return self._commit(candidate, patch, "interview.evaluation_added")

    def complete_interview(
        self,
        candidate_id: str,
        *,
        force_result: str | None = None,
        actor: str | None = None,
    ) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        patch = self._machine.complete(candidate, force_result=force_result)
        updated = self._commit(candidate, patch)
        self._record(
            {
                "event": "interview.result_recorded",
                "candidate_id": candidate_id,
                "result": updated.interview.result,
                "composite_score": updated.interview.composite_score,
                "forced": force_result is not None,
                "actor": actor,
            }
        )
        return updated

    # Offers, training and licensing

    def send_offer(self, candidate_id: str, kind: OfferKind) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        patch = send_offer(candidate, kind, self._now_provider())
        return self._commit(candidate, patch, "offer.sent", kind=kind)

    def sign_offer(self, candidate_id: str, kind: OfferKind) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        now = self._now_provider()
        patch = sign_offer(candidate, kind, now)
        updated = self._commit(candidate, patch, "offer.signed", kind=kind)
        if not patch.is_empty():
            self._repository.save_offer_document(
                candidate_id, {"kind": kind, "signed_at": now}
            )
        return updated

    def mark_training_complete(self, candidate_id: str) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        patch = mark_training_complete(candidate, self._now_provider())
        return self._commit(candidate, patch, "training.completed")

    def record_exam_attempt(self, candidate_id: str) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        return self._commit(candidate, record_exam_attempt(candidate), "licensing.exam_attempt")

    def mark_licensed(self, candidate_id: str) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        patch = mark_licensed(candidate, self._now_provider())
        return self._commit(candidate, patch, "licensing.licensed")

    def update_checklist(self, candidate_id: str, **items: bool) -> Candidate:
        candidate = self._repository.get_candidate(candidate_id)
        patch = update_checklist(candidate, **items)
        return self._commit(candidate, patch, "checklist.updated", items=sorted(items))

    # Background checks

    def initiate_background_check(self, candidate_id: str) -> Candidate:
        if self._vendor is None:
            raise RuntimeError("No background check vendor configured")
        candidate = self._repository.get_candidate(candidate_id)
        if candidate.background_check.status in TERMINAL_STATUSES:
            raise ValueError(
                f"Background check already {candidate.background_check.status}"
            )
        reference = self._vendor.submit(candidate)
        patch = initiate_background_check(candidate, reference, self._now_provider())
        updated = self._commit(candidate, patch)
        self._record(
            {
                "event": "background_check.initiated",
                "candidate_id": candidate_id,
                "ibr_id": reference,
            }
        )
        return updated

    def override_background_check(
        self,
        candidate_id: str,
        *,
        passed: bool,
        actor: str,
        notes: str | None = None,
    ) -> BackgroundCheckChange:
        candidate = self._repository.get_candidate(candidate_id)
        now = self._now_provider()
        change = override_background_check(
            candidate, passed=passed, actor=actor, now=now, notes=notes
        )
        self._repository.patch_candidate(candidate_id, change.patch)
        self._notify(candidate, change, now)
        self._record({"event": "background_check.override", **change.audit_record()})
        return change

    # Cohorts

    def add_participant(self, cohort_id: str, candidate_id: str) -> tuple[Cohort, Candidate]:
        cohort = self._repository.get_cohort(cohort_id)
        candidate = self._repository.get_candidate(candidate_id)
        cohort_patch, candidate_patch = add_participant_patches(
            candidate, cohort, self._now_provider(), resolver=self._resolver
        )
        return self._commit_pair(
            cohort, cohort_patch, candidate, candidate_patch, "cohort.participant_added"
        )

    def remove_participant(self, cohort_id: str, candidate_id: str) -> tuple[Cohort, Candidate]:
        cohort = self._repository.get_cohort(cohort_id)
        candidate = self._repository.get_candidate(candidate_id)
        cohort_patch, candidate_patch = remove_participant_patches(
            candidate, cohort, self._now_provider()
        )
        return self._commit_pair(
            cohort, cohort_patch, candidate, candidate_patch, "cohort.participant_removed"
        )

    def advance_participant(self, cohort_id: str, participant_id: str, new_stage: str) -> Cohort:
        cohort = self._repository.get_cohort(cohort_id)
        if participant_id not in cohort.participant_progress:
            raise ValueError(f"Candidate {participant_id} is not a participant of {cohort_id}")
        now = self._now_provider()
        progress = dict(cohort.participant_progress)
        progress[participant_id] = advance_participant_stage(
            progress[participant_id], new_stage, now
        )
        updated = self._repository.patch_cohort(
            cohort_id, CohortPatch(participant_progress=progress, updated_at=now)
        )
        self._logger.info(
            "cohort.participant_advanced",
            cohort_id=cohort_id,
            candidate_id=participant_id,
            stage=new_stage,
        )
        return updated

    def assign_trainer(self, cohort_id: str, trainer_id: str) -> Cohort:
        cohort = self._repository.get_cohort(cohort_id)
        trainer = self._repository.get_trainer(trainer_id)
        verdict = check_trainer_assignment(trainer, cohort)
        if not verdict.is_eligible:
            raise ValueError("; ".join(verdict.reasons))
        if cohort.id not in trainer.current_assignments:
            self._repository.save_trainer(
                trainer.model_copy(
                    update={"current_assignments": [*trainer.current_assignments, cohort.id]}
                )
            )
        updated = self._repository.patch_cohort(
            cohort_id,
            CohortPatch(
                trainer=TrainerRef(name=trainer.name, type=trainer.type, contact=trainer.email),
                updated_at=self._now_provider(),
            ),
        )
        self._logger.info("cohort.trainer_assigned", cohort_id=cohort_id, trainer_id=trainer_id)
        return updated

    def delete_candidate(self, candidate_id: str) -> None:
        self._repository.delete_candidate(candidate_id)
        self._record({"event": "candidate.deleted", "candidate_id": candidate_id})

    # Helpers

    def _stamp(self, patch: CandidatePatch) -> CandidatePatch:
        data = patch.model_dump(exclude_unset=True)
        data["updated_at"] = self._now_provider()
        return CandidatePatch.model_validate(data)

    def _commit(
        self,
        candidate: Candidate,
        patch: CandidatePatch,
        event: str | None = None,
        **fields: Any,
    ) -> Candidate:
        if patch.is_empty():
            return candidate
        updated = self._repository.patch_candidate(candidate.id, self._stamp(patch))
        if event:
            self._logger.info(event, candidate_id=candidate.id, **fields)
        return updated

    def _commit_pair(
        self,
        cohort: Cohort,
        cohort_patch: CohortPatch,
        candidate: Candidate,
        candidate_patch: CandidatePatch,
        event: str,
    ) -> tuple[Cohort, Candidate]:
        updated_cohort = self._repository.patch_cohort(cohort.id, cohort_patch)
        updated_candidate = self._repository.patch_candidate(candidate.id, candidate_patch)
        self._record({"event": event, "cohort_id": cohort.id, "candidate_id": candidate.id})
        return updated_cohort, updated_candidate

    def _notify(self, candidate: Candidate, change: BackgroundCheckChange, now: datetime) -> None:
        notification = Notification(
            candidate_id=candidate.id,
            candidate_name=candidate.personal_info.name,
            previous_status=change.previous_status,
            new_status=change.new_status,
            ibr_id=candidate.background_check.ibr_id,
            message=notification_message(change.new_status),
            priority="high" if change.new_status == "Failed" else "normal",
            created_at=now,
        )
        self._repository.add_notification(notification)
        if self._notifier:
            self._notifier.notify(notification)

    def _record(self, record: dict[str, Any]) -> None:
        if self._audit:
            self._audit.append(record)
        event = record.pop("event")
        self._logger.info(event, **record)
