"""Pydantic schema definitions for onboarding entities and patches."""

from __future__ import annotations

from .candidate import (
    BackgroundCheckRecord,
    Candidate,
    ClassAssignment,
    EvaluationScores,
    ExtendedStatuses,
    InterviewEvaluation,
    InterviewRecord,
    Licensing,
    OfferRecord,
    Offers,
    PersonalInfo,
    VendorTimestamps,
)
from .cohort import (
    Cohort,
    Milestone,
    ParticipantProgress,
    StageProgress,
    Trainer,
    TrainerRef,
)
from .notification import Notification
from .patches import (
    BackgroundCheckPatch,
    CandidatePatch,
    ClassAssignmentPatch,
    CohortPatch,
    InterviewPatch,
    LicensingPatch,
    OfferPatch,
    OffersPatch,
    apply_candidate_patch,
    apply_cohort_patch,
)

__all__ = [
    "BackgroundCheckPatch",
    "BackgroundCheckRecord",
    "Candidate",
    "CandidatePatch",
    "ClassAssignment",
    "ClassAssignmentPatch",
    "Cohort",
    "CohortPatch",
    "EvaluationScores",
    "ExtendedStatuses",
    "InterviewEvaluation",
    "InterviewPatch",
    "InterviewRecord",
    "Licensing",
    "LicensingPatch",
    "Milestone",
    "Notification",
    "OfferPatch",
    "OfferRecord",
    "Offers",
    "OffersPatch",
    "ParticipantProgress",
    "PersonalInfo",
    "StageProgress",
    "Trainer",
    "TrainerRef",
    "VendorTimestamps",
    "apply_candidate_patch",
    "apply_cohort_patch",
]
