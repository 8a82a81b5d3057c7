"""YAML configuration loader with env var interpolation and CLI overrides."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

from atosym.config.defaults import CONFIG_FILE_NAMES, CONFIG_SEARCH_PATHS
from atosym.config.models import AtosConfig

_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)(?::([^}]*))?\}")


def _interpolate_env(value: str) -> str:
    """Replace ${VAR} or ${VAR:default} with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        default = match.group(2)
        return os.environ.get(match.group(1), default if default is not None else "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _walk_and_interpolate(obj: object) -> object:
    if isinstance(obj, str):
        return _interpolate_env(obj)
    if isinstance(obj, dict):
        return {k: _walk_and_interpolate(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_interpolate(item) for item in obj]
    return obj


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overrides* into *base*; None values are ignored."""
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict):
            existing = merged.get(key)
            merged[key] = _merge(existing if isinstance(existing, dict) else {}, value)
        else:
            merged[key] = value
    return merged


def find_config_file(explicit_path: str | Path | None = None) -> Path | None:
    """Locate an atosym config file, returning the first found or None."""
    if explicit_path is not None:
        p = Path(explicit_path)
        return p if p.is_file() else None

    for search_dir in CONFIG_SEARCH_PATHS:
        for name in CONFIG_FILE_NAMES:
            candidate = search_dir / name
            if candidate.is_file():
                return candidate
    return None


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> AtosConfig:
    """Load and validate configuration, falling back to defaults.

    *overrides* (typically CLI flags) win over file values, section by section.
    """
    raw: dict[str, Any] = {}
    config_path = find_config_file(path)
    if config_path is not None:
        loaded = yaml.safe_load(config_path.read_text()) or {}
        raw = _walk_and_interpolate(loaded)  # type: ignore[assignment]

    if overrides:
        raw = _merge(raw, overrides)
    return AtosConfig.model_validate(raw)
