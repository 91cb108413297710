from __future__ import annotations

from datetime import date

import pytest

from onboardtrack.core.errors import StaleOrMissingEntity
from onboardtrack.core.progress import cohort_statistics
from onboardtrack.repository import InMemoryRepository, OnboardingRepository
from onboardtrack.schemas import Candidate, CandidatePatch, Cohort, Notification


def build_candidate(candidate_id: str = "cand-1", **fields) -> Candidate:
    data = {"id": candidate_id, "call_center": "CLT"}
    data.update(fields)
    return Candidate.model_validate(data)


def test_in_memory_repository_satisfies_protocol():
    assert isinstance(InMemoryRepository(), OnboardingRepository)


def test_missing_entities_raise():
    repo = InMemoryRepository()

    with pytest.raises(StaleOrMissingEntity) as exc:
        repo.get_candidate("ghost")
    assert exc.value.kind == "candidate"

    with pytest.raises(LookupError):
        repo.get_cohort("ghost")
    with pytest.raises(StaleOrMissingEntity):
        repo.patch_candidate("ghost", CandidatePatch(notes="x"))


def test_patch_and_filtered_listing():
    repo = InMemoryRepository(
        candidates=[build_candidate("a"), build_candidate("b", call_center="ATX")]
    )

    updated = repo.patch_candidate("a", CandidatePatch(status="On Hold"))

    assert updated.status == "On Hold"
    assert repo.get_candidate("a").status == "On Hold"
    assert [c.id for c in repo.list_candidates(call_center="ATX")] == ["b"]


def test_delete_cascades_to_notifications_and_offer_documents():
    repo = InMemoryRepository(candidates=[build_candidate("a"), build_candidate("b")])
    for candidate_id in ("a", "b"):
        repo.add_notification(
            Notification(candidate_id=candidate_id, new_status="Completed", message="done")
        )
    repo.save_offer_document("a", {"kind": "pre_license_offer"})

    repo.delete_candidate("a")

    assert [c.id for c in repo.list_candidates()] == ["b"]
    assert [n.candidate_id for n in repo.list_notifications()] == ["b"]
    assert repo.get_offer_document("a") is None
    with pytest.raises(StaleOrMissingEntity):
        repo.delete_candidate("a")


def test_delete_prunes_candidate_from_cohort_rosters():
    cohort = Cohort(
        id="K-1",
        call_center="CLT",
        class_type="UNL",
        start_date=date(2025, 10, 6),
        participants=["a", "b"],
        participant_progress={
            "a": {"participant_id": "a", "overall_progress": 20},
            "b": {"participant_id": "b", "overall_progress": 40},
        },
    )
    untouched = Cohort(
        id="K-2", call_center="CLT", class_type="UNL", start_date=date(2025, 11, 3)
    )
    repo = InMemoryRepository(
        candidates=[build_candidate("a"), build_candidate("b")],
        cohorts=[cohort, untouched],
    )

    repo.delete_candidate("a")

    pruned = repo.get_cohort("K-1")
    assert pruned.participants == ["b"]
    assert list(pruned.participant_progress) == ["b"]
    stats = cohort_statistics(pruned)
    assert stats.total_participants == 1
    assert stats.average_progress == 40
    assert repo.get_cohort("K-2") == untouched
