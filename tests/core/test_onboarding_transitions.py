from __future__ import annotations

from datetime import date

import pendulum
import pytest

from onboardtrack.core.errors import IneligibleAssignment
from onboardtrack.core.onboarding import (
    add_participant_patches,
    mark_licensed,
    mark_training_complete,
    record_exam_attempt,
    remove_participant_patches,
    send_offer,
    sign_offer,
    update_checklist,
)
from onboardtrack.schemas import (
    Candidate,
    Cohort,
    apply_candidate_patch,
    apply_cohort_patch,
)

NOW = pendulum.datetime(2025, 9, 15, 12, 0, tz="UTC")


def build_candidate(**fields) -> Candidate:
    data = {
        "id": "cand-1",
        "call_center": "CLT",
        "background_check": {"initiated": True, "status": "Completed", "passed": True},
    }
    data.update(fields)
    return Candidate.model_validate(data)


def build_cohort(**fields) -> Cohort:
    data = {
        "id": "cohort-1",
        "call_center": "CLT",
        "class_type": "UNL",
        "start_date": date(2025, 10, 6),
    }
    data.update(fields)
    return Cohort.model_validate(data)


def test_pre_license_offer_requires_completed_background_check():
    with pytest.raises(ValueError):
        send_offer(build_candidate(background_check={"status": "In Progress"}), "pre_license_offer", NOW)

    updated = apply_candidate_patch(
        build_candidate(), send_offer(build_candidate(), "pre_license_offer", NOW)
    )
    assert updated.offers.pre_license_offer.sent is True
    assert updated.offers.pre_license_offer.sent_at == NOW


def test_full_agent_offer_requires_license():
    with pytest.raises(ValueError):
        send_offer(build_candidate(), "full_agent_offer", NOW)

    licensed = build_candidate(license_status="Licensed")
    assert send_offer(licensed, "full_agent_offer", NOW).offers.full_agent_offer.sent


def test_offer_must_be_sent_before_signing():
    with pytest.raises(ValueError):
        sign_offer(build_candidate(), "pre_license_offer", NOW)

    sent = build_candidate(offers={"pre_license_offer": {"sent": True}})
    signed = apply_candidate_patch(sent, sign_offer(sent, "pre_license_offer", NOW))

    assert signed.offers.pre_license_offer.signed is True
    assert sign_offer(signed, "pre_license_offer", NOW).is_empty()


def test_unknown_offer_kind_is_rejected():
    with pytest.raises(ValueError):
        sign_offer(build_candidate(), "bonus_offer", NOW)  # type: ignore[arg-type]


def test_training_completion_prerequisites():
    unsigned = build_candidate(class_assignment={"start_date": date(2025, 10, 6)})
    with pytest.raises(ValueError):
        mark_training_complete(unsigned, NOW)

    unassigned = build_candidate(offers={"pre_license_offer": {"sent": True, "signed": True}})
    with pytest.raises(ValueError):
        mark_training_complete(unassigned, NOW)

    ready = build_candidate(
        offers={"pre_license_offer": {"sent": True, "signed": True}},
        class_assignment={"start_date": date(2025, 10, 6)},
    )
    updated = apply_candidate_patch(ready, mark_training_complete(ready, NOW))
    assert updated.class_assignment.training_completed is True


def test_mark_licensed_graduates_trained_candidate():
    trained = build_candidate(class_assignment={"training_completed": True})

    updated = apply_candidate_patch(trained, mark_licensed(trained, NOW))

    assert updated.license_status == "Licensed"
    assert updated.licensing.license_passed is True
    assert updated.licensing.license_passed_at == NOW
    assert updated.class_assignment.graduated_to_licensing is True
    assert mark_licensed(updated, NOW).is_empty()


def test_exam_attempts_increment():
    candidate = build_candidate(licensing={"exam_attempts": 1})

    updated = apply_candidate_patch(candidate, record_exam_attempt(candidate))

    assert updated.licensing.exam_attempts == 2


def test_checklist_derives_ready_to_go():
    candidate = build_candidate(
        class_assignment={"start_date": date(2025, 10, 6), "start_confirmed": True}
    )

    partial = apply_candidate_patch(
        candidate, update_checklist(candidate, badge_received=True, it_request_completed=True)
    )
    assert partial.ready_to_go is False

    complete = apply_candidate_patch(
        partial,
        update_checklist(
            partial, pre_start_call_completed=True, background_disclosure_completed=True
        ),
    )
    assert complete.ready_to_go is True

    reopened = apply_candidate_patch(complete, update_checklist(complete, badge_received=False))
    assert reopened.ready_to_go is False


def test_checklist_rejects_unknown_items():
    with pytest.raises(ValueError):
        update_checklist(build_candidate(), laptop_shipped=True)


def test_add_participant_updates_both_documents():
    candidate = build_candidate(offers={"pre_license_offer": {"sent": True, "signed": True}})
    cohort = build_cohort()

    cohort_patch, candidate_patch = add_participant_patches(candidate, cohort, NOW)
    updated_cohort = apply_cohort_patch(cohort, cohort_patch)
    updated_candidate = apply_candidate_patch(candidate, candidate_patch)

    assert updated_cohort.participants == ["cand-1"]
    assert updated_cohort.participant_progress["cand-1"].current_stage == "START"
    assert updated_candidate.class_assignment.start_date == date(2025, 10, 6)
    assert updated_candidate.class_assignment.start_confirmed is True
    assert updated_candidate.class_assignment.class_type == "UNL"


def test_add_participant_refuses_ineligible_candidate():
    with pytest.raises(IneligibleAssignment) as exc:
        add_participant_patches(build_candidate(), build_cohort(), NOW)

    assert exc.value.reasons == ["Pre-license offer must be signed for UNL class"]


def test_remove_participant_clears_assignment():
    candidate = build_candidate(
        class_assignment={"start_date": date(2025, 10, 6), "start_confirmed": True}
    )
    cohort = build_cohort(participants=["cand-1", "cand-2"])

    cohort_patch, candidate_patch = remove_participant_patches(candidate, cohort, NOW)

    assert apply_cohort_patch(cohort, cohort_patch).participants == ["cand-2"]
    cleared = apply_candidate_patch(candidate, candidate_patch)
    assert cleared.class_assignment.start_date is None
    assert cleared.class_assignment.start_confirmed is False
