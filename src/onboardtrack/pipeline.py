"""Batch onboarding report assembly and execution."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pendulum
import structlog
from pydantic import ValidationError

from . import __version__
from .core.calendar import CohortCalendar
from .core.eligibility import EligibilityResolver
from .core.progress import (
    ProgressConfig,
    cohort_statistics,
    refresh_participant_progress,
    stage_display_name,
)
from .core.scoring import composite_score
from .core.stages import OnboardingPlan, StageDeriver, onboarding_funnel
from .schemas import Candidate, Cohort


class CandidateLoadError(ValueError):
    """Raised when candidate loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[Candidate]):
        super().__init__("Candidate loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Candidate loading failed: {self.errors}"


class CandidateLoader:
    """Load candidate documents from JSON lines."""

    def load(self, path: Path) -> list[Candidate]:
        candidates: list[Candidate] = []
        errors: list[str] = []
        seen: set[str] = set()
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                if not isinstance(record, dict):
                    errors.append(f"line {idx}: expected a JSON object")
                    continue
                try:
                    candidate = Candidate.model_validate(record)
                except ValidationError as exc:
                    errors.append(f"line {idx}: {exc}")
                    continue
                if candidate.id in seen:
                    errors.append(f"line {idx}: duplicate candidate id '{candidate.id}'")
                    continue
                seen.add(candidate.id)
                candidates.append(candidate)
        if errors:
            raise CandidateLoadError(errors, candidates)
        return candidates


class CohortLoader:
    """Load a cohort document."""

    def load(self, path: Path) -> Cohort:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid cohort JSON: {exc}") from exc
        return Cohort.model_validate(data)


class OutputWriter:
    """Persist report payloads."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=_json_default))
            handle.write("\n")


class OnboardingReportPipeline:
    """Derive onboarding plans for a batch of candidates and write a report."""

    def __init__(
        self,
        *,
        deriver: StageDeriver,
        resolver: EligibilityResolver,
        calendar: CohortCalendar,
        progress_config: ProgressConfig | None = None,
        candidate_loader: CandidateLoader | None = None,
        cohort_loader: CohortLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._deriver = deriver
        self._resolver = resolver
        self._calendar = calendar
        self._progress_config = progress_config or ProgressConfig()
        self._candidates = candidate_loader or CandidateLoader()
        self._cohorts = cohort_loader or CohortLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def load_candidates(self, path: Path) -> tuple[list[Candidate], list[str]]:
        try:
            return self._candidates.load(path), []
        except CandidateLoadError as exc:
            self._logger.warning("candidates.partial_load", errors=exc.errors)
            return exc.partial, list(exc.errors)

    def load_cohort(self, path: Path) -> Cohort:
        return self._cohorts.load(path)

    def run(
        self,
        *,
        candidates_path: Path,
        output_path: Path,
        cohort_path: Path | None = None,
        as_of: date | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> list[dict]:
        as_of = as_of or pendulum.today("UTC").date()
        candidates, load_errors = self.load_candidates(candidates_path)
        cohort = self.load_cohort(cohort_path) if cohort_path else None

        results: list[dict] = []
        plans: list[OnboardingPlan] = []
        for candidate in candidates:
            plan = self._deriver.derive(candidate)
            plans.append(plan)
            entry = self._candidate_entry(candidate, plan, as_of)

            if cohort is not None:
                verdict = self._resolver.check(
                    candidate,
                    cohort,
                    existing_participant=candidate.id in cohort.participants,
                )
                entry["eligibility"] = {
                    "cohort_id": cohort.id,
                    "is_eligible": verdict.is_eligible,
                    "reasons": verdict.reasons,
                }

            results.append(entry)

            if audit_logger:
                audit_logger.append(
                    {
                        "candidate_id": candidate.id,
                        "active_step": entry["active_step"],
                        "progress_percent": plan.progress_percent,
                        "eligibility": entry.get("eligibility"),
                        "as_of": as_of,
                    }
                )

            self._logger.info(
                "onboarding.plan",
                candidate_id=candidate.id,
                track=plan.track,
                active_step=entry["active_step"],
                progress_percent=plan.progress_percent,
            )

        metadata = {
            "candidate_count": len(candidates),
            "cohort_id": cohort.id if cohort else None,
            "as_of": as_of.isoformat(),
            "funnel": onboarding_funnel(candidates, self._deriver),
            "errors": load_errors,
            "timestamp": pendulum.now().to_iso8601_string(),
            "app_version": __version__,
        }
        self._writer.write(output_path, {"metadata": metadata, "results": results})
        return results

    def progress_report(self, cohort: Cohort, as_of: date) -> dict[str, Any]:
        """Refresh every participant's progress and summarize the cohort."""
        refreshed = {
            pid: refresh_participant_progress(
                cohort, progress, as_of, config=self._progress_config
            )
            for pid, progress in cohort.participant_progress.items()
        }
        cohort = cohort.model_copy(update={"participant_progress": refreshed})
        stats = cohort_statistics(cohort)
        return {
            "cohort_id": cohort.id,
            "name": cohort.name,
            "current_stage": cohort.current_stage,
            "current_stage_name": stage_display_name(cohort.current_stage),
            "as_of": as_of.isoformat(),
            "statistics": asdict(stats),
            "participants": [
                {
                    "participant_id": pid,
                    "current_stage": progress.current_stage,
                    "overall_progress": progress.overall_progress,
                    "is_on_track": progress.is_on_track,
                    "flagged_concerns": list(progress.flagged_concerns),
                }
                for pid, progress in refreshed.items()
            ],
        }

    def _candidate_entry(
        self,
        candidate: Candidate,
        plan: OnboardingPlan,
        as_of: date,
    ) -> dict[str, Any]:
        active = plan.active_step
        interview = candidate.interview
        return {
            "candidate_id": candidate.id,
            "name": candidate.personal_info.name,
            "track": plan.track,
            "progress_percent": plan.progress_percent,
            "completed_steps": plan.completed_steps,
            "total_steps": plan.total_steps,
            "active_step": active.id if active else None,
            "next_action": asdict(active.action) if active and active.action else None,
            "steps": [
                {
                    "id": step.id,
                    "title": step.title,
                    "description": step.description,
                    "is_complete": step.is_complete,
                    "is_active": step.is_active,
                    "is_locked": step.is_locked,
                }
                for step in plan.steps
            ],
            "interview": {
                "status": interview.status,
                "result": interview.result,
                "composite_score": composite_score(interview.evaluations),
            },
            "projected_start_date": self._calendar.projected_start_date(
                candidate, as_of
            ).isoformat(),
        }


def _json_default(value: Any) -> Any:
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
