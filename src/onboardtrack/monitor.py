"""Background check polling with injectable, cancellable per-candidate tasks."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Protocol, runtime_checkable

import pendulum
import structlog

from .adapters import BackgroundCheckVendor, Notifier, VendorError
from .core.background import (
    TERMINAL_STATUSES,
    BackgroundCheckChange,
    apply_vendor_result,
    notification_message,
)
from .core.errors import StaleOrMissingEntity
from .pipeline import AuditLogger
from .repository import InMemoryRepository
from .schemas import Candidate, Notification

MAIN_TASK = "__all__"
DEFAULT_INTERVAL_SECONDS = 300.0


@runtime_checkable
class Scheduler(Protocol):
    def schedule(self, key: str, interval: float, callback: Callable[[], object]) -> None:
        """Run ``callback`` every ``interval`` seconds until ``key`` is cancelled."""

    def cancel(self, key: str) -> bool:
        """Stop the task registered under ``key``; return whether one existed."""

    def cancel_all(self) -> None:
        """Stop every task."""

    def is_scheduled(self, key: str) -> bool:
        """Return whether a task is registered under ``key``."""


class ManualScheduler:
    """Scheduler whose tasks only run when ``run_pending`` is called."""

    def __init__(self) -> None:
        self._tasks: dict[str, Callable[[], object]] = {}
        self.intervals: dict[str, float] = {}

    def schedule(self, key: str, interval: float, callback: Callable[[], object]) -> None:
        self._tasks[key] = callback
        self.intervals[key] = interval

    def cancel(self, key: str) -> bool:
        self.intervals.pop(key, None)
        return self._tasks.pop(key, None) is not None

    def cancel_all(self) -> None:
        self._tasks.clear()
        self.intervals.clear()

    def is_scheduled(self, key: str) -> bool:
        return key in self._tasks

    def run_pending(self) -> int:
        """Run every registered task once; tasks may cancel themselves while running."""
        ran = 0
        for key in list(self._tasks):
            callback = self._tasks.get(key)
            if callback is None:
                continue
            callback()
            ran += 1
        return ran


class ThreadingScheduler:
    """Repeating daemon timers, one per key.

    A task that raises is logged and re-armed; only ``cancel`` stops it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timers: dict[str, threading.Timer] = {}
        self._logger = structlog.get_logger(__name__)

    def schedule(self, key: str, interval: float, callback: Callable[[], object]) -> None:
        self.cancel(key)

        def tick() -> None:
            with self._lock:
                if key not in self._timers:
                    return
            try:
                callback()
            except Exception:
                self._logger.exception("monitor.task_failed", key=key)
            finally:
                with self._lock:
                    if key in self._timers:
                        self._arm(key, interval, tick)

        with self._lock:
            self._arm(key, interval, tick)

    def _arm(self, key: str, interval: float, tick: Callable[[], None]) -> None:
        timer = threading.Timer(interval, tick)
        timer.daemon = True
        self._timers[key] = timer
        timer.start()

    def cancel(self, key: str) -> bool:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def is_scheduled(self, key: str) -> bool:
        with self._lock:
            return key in self._timers


class BackgroundCheckMonitor:
    """Poll the vendor for open checks and persist the resulting status changes."""

    def __init__(
        self,
        *,
        repository: InMemoryRepository,
        vendor: BackgroundCheckVendor,
        scheduler: Scheduler,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        audit_logger: AuditLogger | None = None,
        notifier: Notifier | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._vendor = vendor
        self._scheduler = scheduler
        self._interval = interval_seconds
        self._audit = audit_logger
        self._notifier = notifier
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))
        self._logger = structlog.get_logger(__name__)

    def start(self) -> list[BackgroundCheckChange]:
        changes = self.check_pending()
        self._scheduler.schedule(MAIN_TASK, self._interval, self.check_pending)
        self._logger.info("monitor.started", interval_seconds=self._interval)
        return changes

    def stop(self) -> None:
        self._scheduler.cancel_all()
        self._logger.info("monitor.stopped")

    def watch(self, candidate_id: str) -> BackgroundCheckChange | None:
        self._scheduler.schedule(
            candidate_id, self._interval, lambda: self.check_candidate(candidate_id)
        )
        return self.check_candidate(candidate_id)

    def unwatch(self, candidate_id: str) -> None:
        if self._scheduler.cancel(candidate_id):
            self._logger.info("monitor.unwatched", candidate_id=candidate_id)

    def check_pending(self) -> list[BackgroundCheckChange]:
        pending = {
            candidate.background_check.ibr_id: candidate
            for candidate in self._repository.list_candidates()
            if candidate.background_check.initiated
            and candidate.background_check.ibr_id
            and candidate.background_check.status not in TERMINAL_STATUSES
        }
        if not pending:
            return []
        return self._poll(pending)

    def check_candidate(self, candidate_id: str) -> BackgroundCheckChange | None:
        try:
            candidate = self._repository.get_candidate(candidate_id)
        except StaleOrMissingEntity:
            self._logger.info("monitor.candidate_missing", candidate_id=candidate_id)
            self.unwatch(candidate_id)
            return None

        check = candidate.background_check
        if check.status in TERMINAL_STATUSES or not check.ibr_id:
            self.unwatch(candidate_id)
            return None

        changes = self._poll({check.ibr_id: candidate})
        if changes and changes[0].new_status in TERMINAL_STATUSES:
            self.unwatch(candidate_id)
        return changes[0] if changes else None

    def _poll(self, pending: dict[str, Candidate]) -> list[BackgroundCheckChange]:
        try:
            results = self._vendor.check_status(list(pending))
        except VendorError as exc:
            self._logger.warning(
                "monitor.poll_failed", error=str(exc), reference_ids=list(pending)
            )
            return []

        changes: list[BackgroundCheckChange] = []
        now = self._now_provider()
        for result in results:
            candidate = pending.get(result.id)
            if candidate is None:
                continue
            change = apply_vendor_result(candidate, result, now)
            if change is None:
                continue
            try:
                self._repository.patch_candidate(candidate.id, change.patch)
            except StaleOrMissingEntity:
                self._logger.info("monitor.candidate_missing", candidate_id=candidate.id)
                continue
            notification = Notification(
                candidate_id=candidate.id,
                candidate_name=candidate.personal_info.name,
                previous_status=change.previous_status,
                new_status=change.new_status,
                ibr_id=result.id,
                message=notification_message(change.new_status),
                priority="high" if change.new_status == "Failed" else "normal",
                created_at=now,
            )
            self._repository.add_notification(notification)
            if self._notifier:
                self._notifier.notify(notification)
            if self._audit:
                self._audit.append(change.audit_record())
            self._logger.info("background_check.status_changed", **change.audit_record())
            changes.append(change)
        return changes
