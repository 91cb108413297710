"""Background check status vocabulary and state changes.

Vendor status strings are translated through ``VENDOR_STATUS_MAP``. Lookups
are case-insensitive. A vendor status missing from the table maps to
``None``: the candidate record is left untouched and the caller is expected
to log the unrecognized value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Mapping

import structlog

from ..schemas import (
    BackgroundCheckPatch,
    Candidate,
    CandidatePatch,
    ExtendedStatuses,
    VendorTimestamps,
)

ChangeSource = Literal["automated", "manual"]

TERMINAL_STATUSES = frozenset({"Completed", "Failed"})
SECTION_STATUSES = frozenset({"Pass", "Fail", "Review"})

VENDOR_STATUS_MAP: dict[str, str] = {
    "pending": "In Progress",
    "processing": "In Progress",
    "complete": "Completed",
    "completed": "Completed",
    "pass": "Completed",
    "passed": "Completed",
    "fail": "Failed",
    "failed": "Failed",
    "cancelled": "Failed",
    "review": "Review",
    "review required": "Review",
}

NOTIFICATION_MESSAGES: dict[str, str] = {
    "In Progress": "Background check has started processing",
    "Completed": "Background check has been completed",
    "Failed": "Background check has failed or requires attention",
    "Review": "Background check requires manual review",
}

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class VendorStatusResult:
    """One status row returned by the background check vendor."""

    id: str
    status: str
    extended: dict[str, str] = field(default_factory=dict)
    report_url: str | None = None
    timestamps: dict[str, str] | None = None


@dataclass(slots=True)
class BackgroundCheckChange:
    """A background check status change, tagged with where it came from."""

    candidate_id: str
    previous_status: str | None
    new_status: str
    source: ChangeSource
    patch: CandidatePatch
    actor: str | None = None
    vendor_status: str | None = None

    def audit_record(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "previous_status": self.previous_status,
            "new_status": self.new_status,
            "source": self.source,
            "actor": self.actor,
            "vendor_status": self.vendor_status,
        }


def map_vendor_status(vendor_status: str) -> str | None:
    return VENDOR_STATUS_MAP.get(vendor_status.strip().lower())


def notification_message(status: str) -> str:
    return NOTIFICATION_MESSAGES.get(status, f"Status changed to {status}")


def initiate_background_check(
    candidate: Candidate,
    vendor_reference: str,
    now: datetime,
) -> CandidatePatch:
    if candidate.background_check.status in TERMINAL_STATUSES:
        raise ValueError(
            f"Background check already {candidate.background_check.status}"
        )
    if not vendor_reference:
        raise ValueError("Vendor reference id is required")
    return CandidatePatch(
        background_check=BackgroundCheckPatch(
            initiated=True,
            status="In Progress",
            ibr_id=vendor_reference,
            timestamps=VendorTimestamps(submitted=now.isoformat()),
            last_checked_at=now,
        )
    )


def apply_vendor_result(
    candidate: Candidate,
    result: VendorStatusResult,
    now: datetime,
) -> BackgroundCheckChange | None:
    """Translate a poll result into a change, or ``None`` when nothing changes.

    Terminal checks are never touched again, so repeated polls are idempotent.
    """
    previous = candidate.background_check.status
    if previous in TERMINAL_STATUSES:
        return None

    mapped = map_vendor_status(result.status)
    if mapped is None:
        logger.warning(
            "background_check.unknown_vendor_status",
            candidate_id=candidate.id,
            vendor_status=result.status,
        )
        return None

    sections = _sections(result.extended)
    has_fail = "Fail" in sections.values()
    if has_fail and mapped in ("Completed", "Review"):
        mapped = "Failed"

    if mapped == previous:
        return None

    patch_fields: dict[str, Any] = {
        "status": mapped,
        "last_checked_at": now,
    }
    if sections:
        patch_fields["extended_statuses"] = ExtendedStatuses(**sections)
    if result.report_url:
        patch_fields["report_url"] = result.report_url
    if result.timestamps:
        patch_fields["timestamps"] = VendorTimestamps(
            submitted=result.timestamps.get("submitted"),
            completed=result.timestamps.get("completed"),
        )

    if mapped == "Completed":
        patch_fields.update(passed=True, passed_at=now, completed_at=now)
    elif mapped == "Failed":
        patch_fields.update(passed=False, failed_at=now)

    return BackgroundCheckChange(
        candidate_id=candidate.id,
        previous_status=previous,
        new_status=mapped,
        source="automated",
        patch=CandidatePatch(background_check=BackgroundCheckPatch(**patch_fields)),
        vendor_status=result.status,
    )


def override_background_check(
    candidate: Candidate,
    *,
    passed: bool,
    actor: str,
    now: datetime,
    notes: str | None = None,
) -> BackgroundCheckChange:
    """Privileged manual decision that bypasses vendor polling."""
    if not actor:
        raise ValueError("Manual background check override requires an actor")

    new_status = "Completed" if passed else "Failed"
    patch_fields: dict[str, Any] = {
        "initiated": True,
        "status": new_status,
        "passed": passed,
    }
    if passed:
        patch_fields.update(completed_at=now, passed_at=now)
    else:
        patch_fields["failed_at"] = now
    if notes is not None:
        patch_fields["notes"] = notes

    return BackgroundCheckChange(
        candidate_id=candidate.id,
        previous_status=candidate.background_check.status,
        new_status=new_status,
        source="manual",
        patch=CandidatePatch(background_check=BackgroundCheckPatch(**patch_fields)),
        actor=actor,
    )


def _sections(extended: Mapping[str, str] | None) -> dict[str, str]:
    if not extended:
        return {}
    known = ExtendedStatuses.model_fields
    return {
        key: value
        for key, value in extended.items()
        if key in known and value in SECTION_STATUSES
    }
