"""External collaborator contracts and local implementations."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence, runtime_checkable

from ..core.background import VendorStatusResult
from ..schemas import Candidate, Notification
from .notifier import LoggingNotifier
from .vendor import JsonFileVendor, VendorError


@runtime_checkable
class BackgroundCheckVendor(Protocol):
    """Background check vendor contract.

    Implementations raise ``VendorError`` for transient transport failures so
    the monitor can skip a poll cycle without losing its schedule.
    """

    def submit(self, candidate: Candidate, *, package: str | None = None) -> str:
        """Submit a check request and return the vendor reference id."""

    def check_status(self, reference_ids: Sequence[str]) -> list[VendorStatusResult]:
        """Return the current status row for each known reference id."""


@runtime_checkable
class CalendarClient(Protocol):
    """Interview calendar contract."""

    def create_event(
        self,
        *,
        candidate: Candidate,
        start: datetime,
        location: str,
        attendees: Sequence[str],
    ) -> str:
        """Create an interview event and return its id."""

    def delete_event(self, event_id: str) -> None:
        """Remove a previously created event."""


@runtime_checkable
class Notifier(Protocol):
    """Recruiter notification delivery contract."""

    def notify(self, notification: Notification) -> None:
        """Deliver a notification to its recipient role."""


__all__ = [
    "BackgroundCheckVendor",
    "CalendarClient",
    "JsonFileVendor",
    "LoggingNotifier",
    "Notifier",
    "VendorError",
]
