from __future__ import annotations

from datetime import date

import pytest

from onboardtrack.core.eligibility import (
    EligibilityResolver,
    check_trainer_assignment,
    filter_candidates_for_bulk_actions,
)
from onboardtrack.core.errors import IneligibleAssignment
from onboardtrack.schemas import Candidate, Cohort, Trainer

COHORT_START = date(2025, 10, 6)


def build_cohort(**fields) -> Cohort:
    data = {
        "id": "cohort-unl-oct",
        "name": "October UNL",
        "call_center": "CLT",
        "class_type": "UNL",
        "start_date": COHORT_START,
    }
    data.update(fields)
    return Cohort.model_validate(data)


def build_candidate(**fields) -> Candidate:
    data = {
        "id": "cand-1",
        "call_center": "CLT",
        "license_status": "Unlicensed",
        "personal_info": {"name": "Jordan Reyes"},
        "background_check": {"initiated": True, "status": "Completed", "passed": True},
        "offers": {"pre_license_offer": {"sent": True, "signed": True}},
    }
    data.update(fields)
    return Candidate.model_validate(data)


def test_ready_unlicensed_candidate_is_eligible_for_unl_cohort():
    result = EligibilityResolver().check(build_candidate(), build_cohort())

    assert result.is_eligible is True
    assert result.reasons == []


def test_unsigned_pre_license_offer_is_the_single_reason():
    candidate = build_candidate(offers={"pre_license_offer": {"sent": True, "signed": False}})

    result = EligibilityResolver().check(candidate, build_cohort())

    assert result.is_eligible is False
    assert result.reasons == ["Pre-license offer must be signed for UNL class"]


def test_every_violated_rule_is_reported():
    candidate = build_candidate(
        call_center="ATX",
        status="On Hold",
        background_check={"initiated": True, "status": "In Progress"},
    )

    result = EligibilityResolver().check(candidate, build_cohort())

    assert result.is_eligible is False
    assert len(result.reasons) == 3
    assert result.reasons[0].startswith("Call center mismatch")
    assert "On Hold" in result.reasons[1]
    assert result.reasons[2] == "Background check status is In Progress, must be Completed"


def test_unqueued_background_check_reads_as_not_started():
    candidate = build_candidate(background_check={})

    result = EligibilityResolver().check(candidate, build_cohort())

    assert result.reasons == ["Background check status is Not Started, must be Completed"]


def test_existing_participant_is_rejected_unless_validating_roster():
    resolver = EligibilityResolver()
    cohort = build_cohort(participants=["cand-1"])

    assert resolver.check(build_candidate(), cohort).reasons == [
        "Candidate is already a participant in this cohort"
    ]
    assert resolver.check(build_candidate(), cohort, existing_participant=True).is_eligible


def test_confirmed_for_another_start_date_is_rejected():
    candidate = build_candidate(
        class_assignment={"start_date": date(2025, 11, 3), "start_confirmed": True}
    )

    result = EligibilityResolver().check(candidate, build_cohort())

    assert result.reasons == [
        "Candidate is already confirmed for a different cohort starting 2025-11-03"
    ]


def test_confirmed_for_same_start_date_is_allowed():
    candidate = build_candidate(
        class_assignment={"start_date": COHORT_START, "start_confirmed": True}
    )

    assert EligibilityResolver().check(candidate, build_cohort()).is_eligible


def test_unconfirmed_other_start_date_is_allowed():
    candidate = build_candidate(class_assignment={"start_date": date(2025, 11, 3)})

    assert EligibilityResolver().check(candidate, build_cohort()).is_eligible


def test_agent_cohort_requires_license_but_not_pre_license_offer():
    cohort = build_cohort(id="cohort-agent", class_type="AGENT")
    licensed = build_candidate(license_status="Licensed", offers={})
    unlicensed = build_candidate(offers={})

    assert EligibilityResolver().check(licensed, cohort).is_eligible
    assert EligibilityResolver().check(unlicensed, cohort).reasons == [
        "Class type is AGENT but candidate license status is Unlicensed"
    ]


def test_unl_cohort_rejects_licensed_candidate():
    result = EligibilityResolver().check(build_candidate(license_status="Licensed"), build_cohort())

    assert result.reasons == ["Class type is UNL but candidate license status is Licensed"]


def test_require_eligible_raises_with_all_reasons():
    candidate = build_candidate(call_center="ATX", status="Dropped")

    with pytest.raises(IneligibleAssignment) as exc:
        EligibilityResolver().require_eligible(candidate, build_cohort())

    assert len(exc.value.reasons) == 2
    assert exc.value.cohort_id == "cohort-unl-oct"
    assert "Dropped" in str(exc.value)


def test_assignable_candidates_uses_the_resolver_rules():
    ready = build_candidate(id="ready")
    unsigned = build_candidate(id="unsigned", offers={})
    other_site = build_candidate(id="atx", call_center="ATX")

    assignable = EligibilityResolver().assignable_candidates(
        [ready, unsigned, other_site], build_cohort()
    )

    assert [c.id for c in assignable] == ["ready"]


def test_roster_validation_reports_issues_and_warnings():
    cohort = build_cohort(participants=["ok", "bad", "lic"])
    roster = [
        build_candidate(id="ok"),
        build_candidate(id="bad", personal_info={"name": "Sam Lee"}, status="Dropped"),
        build_candidate(id="lic", license_status="Licensed"),
    ]

    validation = EligibilityResolver().validate_cohort_participants(cohort, roster)

    assert validation.is_valid is False
    assert validation.issues[0].startswith("Sam Lee: Candidate status is Dropped")
    assert len(validation.issues) == 2
    assert any("Mixed license types" in warning for warning in validation.warnings)


def test_empty_roster_is_valid_with_warning():
    validation = EligibilityResolver().validate_cohort_participants(build_cohort(), [])

    assert validation.is_valid is True
    assert validation.warnings == ["Cohort has no participants assigned"]


def test_bulk_filter_selects_ready_unassigned_candidates():
    candidates = [
        build_candidate(id="a"),
        build_candidate(id="b", call_center="ATX"),
        build_candidate(id="c", offers={}),
        build_candidate(
            id="d", class_assignment={"start_date": COHORT_START, "start_confirmed": True}
        ),
    ]

    selected = filter_candidates_for_bulk_actions(
        candidates, call_center="CLT", ready_for_class=True, unassigned=True
    )

    assert [c.id for c in selected] == ["a"]


def build_trainer(**fields) -> Trainer:
    data = {
        "id": "tr-1",
        "name": "Dana Cole",
        "type": "SSS",
        "call_center": "CLT",
        "max_capacity": 2,
    }
    data.update(fields)
    return Trainer.model_validate(data)


def test_trainer_assignment_checks_activity_site_and_capacity():
    cohort = build_cohort()

    assert check_trainer_assignment(build_trainer(), cohort).is_eligible
    assert check_trainer_assignment(build_trainer(call_center="Both"), cohort).is_eligible

    busy = build_trainer(is_active=False, call_center="ATX", current_assignments=["x", "y"])
    result = check_trainer_assignment(busy, cohort)

    assert result.is_eligible is False
    assert len(result.reasons) == 3


def test_trainer_already_on_cohort_does_not_count_against_capacity():
    trainer = build_trainer(max_capacity=1, current_assignments=["cohort-unl-oct"])

    assert check_trainer_assignment(trainer, build_cohort()).is_eligible
