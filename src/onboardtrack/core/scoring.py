"""Interview scorecard aggregation."""

from __future__ import annotations

from typing import Any, Iterable

from ..schemas import EvaluationScores, InterviewEvaluation, InterviewRecord

PASSING_SCORE = 4.0


def build_evaluation(
    *,
    communication: int,
    technical_skills: int,
    customer_service: int,
    problem_solving: int,
    culture_fit: int,
    recommendation: str,
    **details: Any,
) -> InterviewEvaluation:
    """Create a scorecard with its average derived from the sub-scores."""
    scores = EvaluationScores(
        communication=communication,
        technical_skills=technical_skills,
        customer_service=customer_service,
        problem_solving=problem_solving,
        culture_fit=culture_fit,
    )
    return InterviewEvaluation(scores=scores, recommendation=recommendation, **details)


def mean_score(evaluations: Iterable[InterviewEvaluation]) -> float:
    """Unrounded mean of each scorecard's own average; 0 when there are none.

    Averages are summed as whole tenths so the threshold comparison is exact.
    """
    tenths = [round(evaluation.average_score * 10) for evaluation in evaluations]
    if not tenths:
        return 0.0
    return sum(tenths) / (10 * len(tenths))


def composite_score(evaluations: Iterable[InterviewEvaluation]) -> float:
    """Display value of ``mean_score``, rounded to two decimals."""
    return round(mean_score(evaluations), 2)


def meets_hiring_criteria(
    interview: InterviewRecord | None,
    *,
    passing_score: float = PASSING_SCORE,
) -> bool:
    if interview is None or interview.status != "Completed":
        return False
    if interview.evaluations:
        return passes(mean_score(interview.evaluations), passing_score=passing_score)
    return passes(interview.composite_score or 0.0, passing_score=passing_score)


def passes(score: float, *, passing_score: float = PASSING_SCORE) -> bool:
    return score >= passing_score
