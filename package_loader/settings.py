"""Settings for package-loader.

Scope priority (most specific wins):
1. local (.package-loader/settings.local.yaml) - machine-specific
2. project (.package-loader/settings.yaml) - shared with the project
3. global (~/.package-loader/settings.yaml) - user defaults

Malformed files are logged and skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator

from .enumerator import DEFAULT_SUFFIX

logger = logging.getLogger(__name__)


class LoaderSettings(BaseModel):
    """Validated package-loader settings."""

    entry_suffix: str = Field(DEFAULT_SUFFIX, description="File suffix that marks a loadable module")
    recursive: bool = Field(True, description="Include sub-packages by default")
    roots: list[str] = Field(default_factory=list, description="Extra roots used by the CLI")
    log_level: str = Field("WARNING", description="Console log level")
    log_path: str | None = Field(None, description="JSONL log file (disabled when unset)")

    @field_validator("entry_suffix")
    @classmethod
    def _suffix_starts_with_dot(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError(f"entry_suffix must look like '.py', got {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return value


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path
    local_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        return cls(
            global_settings=Path.home() / ".package-loader" / "settings.yaml",
            project_settings=Path.cwd() / ".package-loader" / "settings.yaml",
            local_settings=Path.cwd() / ".package-loader" / "settings.local.yaml",
        )


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dicts, overlay wins."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def read_merged_settings(paths: SettingsPaths | None = None) -> dict[str, Any]:
    """Load and merge raw settings from all scopes."""
    paths = paths or SettingsPaths.default()
    result: dict[str, Any] = {}
    for path in [paths.global_settings, paths.project_settings, paths.local_settings]:
        if not path.exists():
            continue
        try:
            with open(path, encoding="utf-8") as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            continue
        if not isinstance(content, dict):
            logger.warning(f"Ignoring {path}: expected a mapping at top level")
            continue
        result = _deep_merge(result, content)
    return result


def load_settings(paths: SettingsPaths | None = None) -> LoaderSettings:
    """Build validated settings from all scopes.

    Raises:
        pydantic.ValidationError: Merged settings have invalid values
    """
    return LoaderSettings.model_validate(read_merged_settings(paths))
