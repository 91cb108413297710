"""Configuration management utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ..schemas.config import AppConfig, load_config


class ConfigManager:
    """YAML-backed configuration loader."""

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path)

    def load(self, name: str) -> dict[str, Any]:
        """Load a YAML configuration by name without file extension."""
        return load_yaml(self._base_path / f"{name}.yaml")

    def load_app_config(self, name: str = "onboardtrack") -> AppConfig:
        return load_config(self.load(name))


def load_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; an empty file yields an empty mapping."""
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {path} must be a YAML mapping")
    return loaded


__all__ = ["ConfigManager", "load_yaml"]
