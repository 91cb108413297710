from __future__ import annotations

import pendulum
import pytest

from onboardtrack.core.background import (
    VendorStatusResult,
    apply_vendor_result,
    initiate_background_check,
    map_vendor_status,
    notification_message,
    override_background_check,
)
from onboardtrack.schemas import Candidate, apply_candidate_patch

NOW = pendulum.datetime(2025, 9, 10, 8, 30, tz="UTC")


def build_candidate(**background) -> Candidate:
    check = {"initiated": True, "status": "In Progress", "ibr_id": "IBR-1"}
    check.update(background)
    return Candidate.model_validate(
        {"id": "cand-1", "call_center": "ATX", "background_check": check}
    )


@pytest.mark.parametrize(
    "vendor_status,expected",
    [
        ("Pending", "In Progress"),
        ("processing", "In Progress"),
        ("PASS", "Completed"),
        ("Complete", "Completed"),
        ("Fail", "Failed"),
        ("Cancelled", "Failed"),
        ("Review Required", "Review"),
        (" review ", "Review"),
        ("Escalated", None),
    ],
)
def test_vendor_status_mapping_table(vendor_status, expected):
    assert map_vendor_status(vendor_status) == expected


def test_initiate_sets_reference_and_in_progress():
    candidate = Candidate.model_validate({"id": "c", "call_center": "CLT"})

    updated = apply_candidate_patch(candidate, initiate_background_check(candidate, "IBR-9", NOW))

    assert updated.background_check.initiated is True
    assert updated.background_check.status == "In Progress"
    assert updated.background_check.ibr_id == "IBR-9"


def test_initiate_refuses_terminal_or_missing_reference():
    with pytest.raises(ValueError):
        initiate_background_check(build_candidate(status="Completed"), "IBR-2", NOW)
    with pytest.raises(ValueError):
        initiate_background_check(build_candidate(), "", NOW)


def test_passing_result_completes_check():
    candidate = build_candidate()
    result = VendorStatusResult(
        id="IBR-1",
        status="Pass",
        extended={"credit": "Pass", "federal": "Pass", "unknown_section": "Pass"},
        report_url="https://reports.example/IBR-1",
        timestamps={"submitted": "2025-09-01", "completed": "2025-09-09"},
    )

    change = apply_vendor_result(candidate, result, NOW)
    updated = apply_candidate_patch(candidate, change.patch)

    assert change.source == "automated"
    assert change.previous_status == "In Progress"
    assert change.new_status == "Completed"
    assert updated.background_check.passed is True
    assert updated.background_check.passed_at == NOW
    assert updated.background_check.extended_statuses.reported() == {
        "credit": "Pass",
        "federal": "Pass",
    }
    assert updated.background_check.timestamps.completed == "2025-09-09"


def test_failed_section_overrides_completed_status():
    candidate = build_candidate()
    result = VendorStatusResult(id="IBR-1", status="Complete", extended={"drug": "Fail"})

    change = apply_vendor_result(candidate, result, NOW)

    assert change.new_status == "Failed"
    assert apply_candidate_patch(candidate, change.patch).background_check.passed is False


def test_unknown_vendor_status_changes_nothing():
    change = apply_vendor_result(build_candidate(), VendorStatusResult(id="IBR-1", status="Escalated"), NOW)

    assert change is None


def test_same_status_is_not_a_change():
    result = VendorStatusResult(id="IBR-1", status="Processing")

    assert apply_vendor_result(build_candidate(), result, NOW) is None


@pytest.mark.parametrize("terminal", ["Completed", "Failed"])
def test_terminal_checks_are_never_repolled(terminal):
    result = VendorStatusResult(id="IBR-1", status="Review")

    assert apply_vendor_result(build_candidate(status=terminal), result, NOW) is None


def test_manual_override_is_tagged_and_requires_actor():
    candidate = build_candidate(status="Review")

    change = override_background_check(
        candidate, passed=False, actor="recruiter@example.com", now=NOW, notes="Adjudicated"
    )
    updated = apply_candidate_patch(candidate, change.patch)

    assert change.source == "manual"
    assert change.audit_record()["actor"] == "recruiter@example.com"
    assert updated.background_check.status == "Failed"
    assert updated.background_check.notes == "Adjudicated"

    with pytest.raises(ValueError):
        override_background_check(candidate, passed=True, actor="", now=NOW)


def test_notification_messages():
    assert notification_message("Completed") == "Background check has been completed"
    assert notification_message("Mystery") == "Status changed to Mystery"


@pytest.mark.parametrize("vendor_status", ["Pass", "Passed", "Complete", "completed"])
def test_every_completed_vendor_status_records_a_pass(vendor_status):
    candidate = build_candidate()

    change = apply_vendor_result(candidate, VendorStatusResult(id="IBR-1", status=vendor_status), NOW)
    updated = apply_candidate_patch(candidate, change.patch)

    assert updated.background_check.status == "Completed"
    assert updated.background_check.passed is True
    assert updated.background_check.passed_at == NOW
    assert updated.background_check.failed_at is None
