"""Persistence contract and an in-memory document store."""

from __future__ import annotations

from threading import RLock
from typing import Any, Iterable, Protocol, runtime_checkable

import structlog

from .core.errors import StaleOrMissingEntity
from .schemas import (
    Candidate,
    CandidatePatch,
    Cohort,
    CohortPatch,
    Notification,
    Trainer,
    apply_candidate_patch,
    apply_cohort_patch,
)


@runtime_checkable
class OnboardingRepository(Protocol):
    """Document store contract consumed by the onboarding service.

    Reads of unknown ids raise ``StaleOrMissingEntity``; writes are last-write-wins.
    """

    def get_candidate(self, candidate_id: str) -> Candidate:
        """Return the stored candidate or raise ``StaleOrMissingEntity``."""

    def list_candidates(self, **filters: Any) -> list[Candidate]:
        """Return candidates whose top-level fields equal every filter value."""

    def save_candidate(self, candidate: Candidate) -> None:
        """Insert or replace a candidate document."""

    def patch_candidate(self, candidate_id: str, patch: CandidatePatch) -> Candidate:
        """Merge a typed patch into a stored candidate and return the result."""

    def delete_candidate(self, candidate_id: str) -> None:
        """Remove a candidate with its notifications and offer documents."""

    def get_cohort(self, cohort_id: str) -> Cohort:
        """Return the stored cohort or raise ``StaleOrMissingEntity``."""

    def save_cohort(self, cohort: Cohort) -> None:
        """Insert or replace a cohort document."""

    def patch_cohort(self, cohort_id: str, patch: CohortPatch) -> Cohort:
        """Merge a typed patch into a stored cohort and return the result."""

    def get_trainer(self, trainer_id: str) -> Trainer:
        """Return the stored trainer or raise ``StaleOrMissingEntity``."""

    def add_notification(self, notification: Notification) -> None:
        """Append a recruiter notification."""


class InMemoryRepository:
    """Dictionary-backed store used by tests and the CLI."""

    def __init__(
        self,
        *,
        candidates: Iterable[Candidate] = (),
        cohorts: Iterable[Cohort] = (),
        trainers: Iterable[Trainer] = (),
    ) -> None:
        self._lock = RLock()
        self._candidates = {c.id: c for c in candidates}
        self._cohorts = {c.id: c for c in cohorts}
        self._trainers = {t.id: t for t in trainers}
        self._notifications: list[Notification] = []
        self._offer_documents: dict[str, dict[str, Any]] = {}
        self._logger = structlog.get_logger(__name__)

    def get_candidate(self, candidate_id: str) -> Candidate:
        try:
            return self._candidates[candidate_id]
        except KeyError as exc:
            raise StaleOrMissingEntity("candidate", candidate_id) from exc

    def list_candidates(self, **filters: Any) -> list[Candidate]:
        return [
            candidate
            for candidate in self._candidates.values()
            if all(getattr(candidate, key) == value for key, value in filters.items())
        ]

    def save_candidate(self, candidate: Candidate) -> None:
        with self._lock:
            self._candidates[candidate.id] = candidate

    def patch_candidate(self, candidate_id: str, patch: CandidatePatch) -> Candidate:
        with self._lock:
            updated = apply_candidate_patch(self.get_candidate(candidate_id), patch)
            self._candidates[candidate_id] = updated
        return updated

    def delete_candidate(self, candidate_id: str) -> None:
        with self._lock:
            self.get_candidate(candidate_id)
            del self._candidates[candidate_id]
            before = len(self._notifications)
            self._notifications = [
                n for n in self._notifications if n.candidate_id != candidate_id
            ]
            offer_removed = self._offer_documents.pop(candidate_id, None) is not None
            cohorts_pruned = []
            for cohort in list(self._cohorts.values()):
                if (
                    candidate_id not in cohort.participants
                    and candidate_id not in cohort.participant_progress
                ):
                    continue
                patch = CohortPatch(
                    participants=[pid for pid in cohort.participants if pid != candidate_id],
                    participant_progress={
                        pid: progress
                        for pid, progress in cohort.participant_progress.items()
                        if pid != candidate_id
                    },
                )
                self._cohorts[cohort.id] = apply_cohort_patch(cohort, patch)
                cohorts_pruned.append(cohort.id)
        self._logger.info(
            "candidate.deleted",
            candidate_id=candidate_id,
            cohorts_pruned=cohorts_pruned,
            notifications_removed=before - len(self._notifications),
            offer_removed=offer_removed,
        )

    def get_cohort(self, cohort_id: str) -> Cohort:
        try:
            return self._cohorts[cohort_id]
        except KeyError as exc:
            raise StaleOrMissingEntity("cohort", cohort_id) from exc

    def list_cohorts(self, **filters: Any) -> list[Cohort]:
        return [
            cohort
            for cohort in self._cohorts.values()
            if all(getattr(cohort, key) == value for key, value in filters.items())
        ]

    def save_cohort(self, cohort: Cohort) -> None:
        with self._lock:
            self._cohorts[cohort.id] = cohort

    def patch_cohort(self, cohort_id: str, patch: CohortPatch) -> Cohort:
        with self._lock:
            updated = apply_cohort_patch(self.get_cohort(cohort_id), patch)
            self._cohorts[cohort_id] = updated
        return updated

    def get_trainer(self, trainer_id: str) -> Trainer:
        try:
            return self._trainers[trainer_id]
        except KeyError as exc:
            raise StaleOrMissingEntity("trainer", trainer_id) from exc

    def save_trainer(self, trainer: Trainer) -> None:
        with self._lock:
            self._trainers[trainer.id] = trainer

    def add_notification(self, notification: Notification) -> None:
        with self._lock:
            self._notifications.append(notification)

    def list_notifications(self, candidate_id: str | None = None) -> list[Notification]:
        return [
            n
            for n in self._notifications
            if candidate_id is None or n.candidate_id == candidate_id
        ]

    def save_offer_document(self, candidate_id: str, document: dict[str, Any]) -> None:
        with self._lock:
            self._offer_documents[candidate_id] = dict(document)

    def get_offer_document(self, candidate_id: str) -> dict[str, Any] | None:
        return self._offer_documents.get(candidate_id)
