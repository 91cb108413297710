"""Typer CLI entrypoint for onboarding reports."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, Optional

import pendulum
import typer
from pydantic import ValidationError

from .config import load_yaml
from .container import OnboardingContainer, create_container
from .core import candidates_awaiting_background_check, onboarding_funnel
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas.config import load_config

app = typer.Typer(help="Candidate onboarding tracking CLI.")

CandidatesOption = typer.Option(
    ..., exists=True, readable=True, dir_okay=False, help="Candidates JSONL path."
)
ConfigOption = typer.Option(
    None, exists=True, readable=True, dir_okay=False, help="YAML config path."
)
LogLevelOption = typer.Option("INFO", help="Log level for structured logging.")


def _build_container(config: Optional[Path], log_level: str) -> OnboardingContainer:
    settings: dict[str, Any] = {}
    if config:
        try:
            settings = load_config(load_yaml(config)).to_settings()
        except (ValueError, ValidationError) as exc:
            raise typer.BadParameter(str(exc), param_name="config") from exc
    configure_logging(log_level)
    return create_container(settings=settings)


def _parse_as_of(value: Optional[str]) -> date | None:
    if value is None:
        return None
    try:
        return pendulum.parse(value).date()
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid date {value!r}", param_name="as_of") from exc


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


@app.command()
def stages(
    candidates: Path = CandidatesOption,
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    cohort: Optional[Path] = typer.Option(
        None, exists=True, readable=True, dir_okay=False, help="Cohort JSON to check eligibility against."
    ),
    as_of: Optional[str] = typer.Option(None, help="Reference date (YYYY-MM-DD) for start-date projection."),
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Derive onboarding steps for every candidate and write a report."""
    container = _build_container(config, log_level)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    results = pipeline.run(
        candidates_path=candidates,
        output_path=output,
        cohort_path=cohort,
        as_of=_parse_as_of(as_of),
        audit_logger=audit_logger,
    )
    typer.echo(f"Processed {len(results)} candidates. Results saved to {output}.")


@app.command()
def eligibility(
    candidates: Path = CandidatesOption,
    cohort: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Cohort JSON path."),
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """List which candidates may join a cohort, with every failed rule."""
    container = _build_container(config, log_level)
    pipeline = container.pipeline()
    resolver = container.resolver()

    loaded, errors = pipeline.load_candidates(candidates)
    target = pipeline.load_cohort(cohort)
    results = []
    for candidate in loaded:
        verdict = resolver.check(candidate, target)
        results.append(
            {
                "candidate_id": candidate.id,
                "name": candidate.personal_info.name,
                "is_eligible": verdict.is_eligible,
                "reasons": verdict.reasons,
            }
        )
    roster = resolver.validate_cohort_participants(
        target, [c for c in loaded if c.id in target.participants]
    )
    _echo_json(
        {
            "cohort_id": target.id,
            "assignable": [c.id for c in resolver.assignable_candidates(loaded, target)],
            "results": results,
            "roster": asdict(roster),
            "errors": errors,
        }
    )


@app.command()
def progress(
    cohort: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Cohort JSON path."),
    as_of: Optional[str] = typer.Option(None, help="Reference date (YYYY-MM-DD); defaults to today."),
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Summarize cohort progress and on-track status per participant."""
    container = _build_container(config, log_level)
    pipeline = container.pipeline()
    report = pipeline.progress_report(
        pipeline.load_cohort(cohort),
        _parse_as_of(as_of) or pendulum.today("UTC").date(),
    )
    _echo_json(report)


@app.command()
def funnel(
    candidates: Path = CandidatesOption,
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Count candidates by onboarding step and list those awaiting a background check."""
    container = _build_container(config, log_level)
    loaded, errors = container.pipeline().load_candidates(candidates)
    _echo_json(
        {
            "candidate_count": len(loaded),
            "funnel": onboarding_funnel(loaded, container.deriver()),
            "awaiting_background_check": [
                c.id
                for c in candidates_awaiting_background_check(
                    loaded, passing_score=container.interview_config().passing_score
                )
            ],
            "errors": errors,
        }
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
