"""Onboarding decision engine components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .background import (
    BackgroundCheckChange,
    VendorStatusResult,
    apply_vendor_result,
    initiate_background_check,
    map_vendor_status,
    override_background_check,
)
from .calendar import CohortCalendar
from .eligibility import (
    EligibilityResolver,
    EligibilityResult,
    check_trainer_assignment,
    filter_candidates_for_bulk_actions,
)
from .errors import (
    EvaluationRequired,
    IneligibleAssignment,
    InvalidTransition,
    OnboardingError,
    StaleOrMissingEntity,
)
from .interview import InterviewConfig, InterviewStateMachine
from .progress import (
    COHORT_STAGES,
    ProgressConfig,
    calculate_participant_progress,
    cohort_statistics,
    is_participant_on_track,
)
from .scoring import (
    PASSING_SCORE,
    build_evaluation,
    composite_score,
    meets_hiring_criteria,
    mean_score,
)
from .stages import (
    OnboardingPlan,
    OnboardingStep,
    StageDeriver,
    candidates_awaiting_background_check,
    onboarding_funnel,
)

__all__ = [
    "COHORT_STAGES",
    "PASSING_SCORE",
    "BackgroundCheckChange",
    "CohortCalendar",
    "EligibilityResolver",
    "EligibilityResult",
    "EvaluationRequired",
    "IneligibleAssignment",
    "InterviewConfig",
    "InterviewStateMachine",
    "InvalidTransition",
    "OnboardingError",
    "OnboardingPlan",
    "OnboardingStep",
    "ProgressConfig",
    "StageDeriver",
    "StaleOrMissingEntity",
    "VendorStatusResult",
    "apply_vendor_result",
    "build_evaluation",
    "calculate_participant_progress",
    "candidates_awaiting_background_check",
    "check_trainer_assignment",
    "cohort_statistics",
    "composite_score",
    "filter_candidates_for_bulk_actions",
    "initiate_background_check",
    "is_participant_on_track",
    "map_vendor_status",
    "mean_score",
    "meets_hiring_criteria",
    "onboarding_funnel",
    "override_background_check",
]
