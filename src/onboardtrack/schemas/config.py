"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, ValidationError


class CoreConfig(BaseModel):
    passing_score: float | None = None
    program_days: int | None = None
    on_track_tolerance: float | None = None


class CalendarConfig(BaseModel):
    start_dates: dict[str, list[date]] | None = None


class MonitorConfig(BaseModel):
    interval_seconds: float | None = None


class AppConfig(BaseModel):
    core: CoreConfig = Field(default_factory=CoreConfig)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        core_settings = self.core.model_dump(exclude_none=True)
        if core_settings:
            settings["core"] = core_settings
        calendar_settings = self.calendar.model_dump(exclude_none=True)
        if calendar_settings:
            settings["calendar"] = calendar_settings
        monitor_settings = self.monitor.model_dump(exclude_none=True)
        if monitor_settings:
            settings["monitor"] = monitor_settings
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
