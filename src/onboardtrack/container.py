"""Dependency injection container for onboarding tracking."""

from __future__ import annotations

from datetime import date

from dependency_injector import containers, providers

from .adapters import LoggingNotifier
from .core import (
    CohortCalendar,
    EligibilityResolver,
    InterviewConfig,
    InterviewStateMachine,
    ProgressConfig,
    StageDeriver,
)
from .monitor import DEFAULT_INTERVAL_SECONDS, BackgroundCheckMonitor, ManualScheduler
from .pipeline import OnboardingReportPipeline
from .repository import InMemoryRepository
from .service import OnboardingService


class OnboardingContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    interview_config = providers.Singleton(InterviewConfig)
    progress_config = providers.Singleton(ProgressConfig)
    cohort_calendar = providers.Singleton(CohortCalendar)

    state_machine = providers.Singleton(InterviewStateMachine, config=interview_config)
    resolver = providers.Singleton(EligibilityResolver)
    deriver = providers.Singleton(StageDeriver)

    repository = providers.Singleton(InMemoryRepository)
    scheduler = providers.Singleton(ManualScheduler)
    notifier = providers.Singleton(LoggingNotifier)
    vendor = providers.Object(None)
    audit_logger = providers.Object(None)
    monitor_interval = providers.Object(DEFAULT_INTERVAL_SECONDS)

    service = providers.Factory(
        OnboardingService,
        repository=repository,
        machine=state_machine,
        resolver=resolver,
        deriver=deriver,
        vendor=vendor,
        notifier=notifier,
        audit_logger=audit_logger,
    )

    monitor = providers.Singleton(
        BackgroundCheckMonitor,
        repository=repository,
        vendor=vendor,
        scheduler=scheduler,
        interval_seconds=monitor_interval,
        audit_logger=audit_logger,
        notifier=notifier,
    )

    pipeline = providers.Factory(
        OnboardingReportPipeline,
        deriver=deriver,
        resolver=resolver,
        calendar=cohort_calendar,
        progress_config=progress_config,
    )


def create_container(*, settings: dict | None = None) -> OnboardingContainer:
    """Instantiate container with optional overrides."""

    container = OnboardingContainer()

    if not settings:
        return container

    container.config.override(settings)

    core_settings = settings.get("core", {}) if isinstance(settings, dict) else {}

    if "passing_score" in core_settings:
        container.interview_config.override(
            providers.Singleton(
                InterviewConfig, passing_score=float(core_settings["passing_score"])
            )
        )

    progress_fields = {
        key: core_settings[key]
        for key in ("program_days", "on_track_tolerance")
        if key in core_settings
    }
    if progress_fields:
        container.progress_config.override(
            providers.Singleton(ProgressConfig, **progress_fields)
        )

    calendar_settings = settings.get("calendar", {}) if isinstance(settings, dict) else {}
    if calendar_settings.get("start_dates"):
        start_dates = {
            class_type: [_as_date(value) for value in values]
            for class_type, values in calendar_settings["start_dates"].items()
        }
        container.cohort_calendar.override(
            providers.Singleton(CohortCalendar, start_dates=start_dates)
        )

    monitor_settings = settings.get("monitor", {}) if isinstance(settings, dict) else {}
    if "interval_seconds" in monitor_settings:
        container.monitor_interval.override(
            providers.Object(float(monitor_settings["interval_seconds"]))
        )

    return container


def _as_date(value: date | str) -> date:
    return value if isinstance(value, date) else date.fromisoformat(value)
