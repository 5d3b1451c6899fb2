"""Loading of reporting configuration from YAML or JSON files."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from bdd_telemetry.errors import ConfigurationError
from bdd_telemetry.models.config import PRESETS, ReportingConfig
from bdd_telemetry.models.events import describe_errors

log = logging.getLogger(__name__)

CONFIG_FILE_NAMES = (
    "bdd-telemetry.yaml",
    "bdd-telemetry.yml",
    "bdd-telemetry.json",
    ".bdd-telemetry.yaml",
)


def find_config_file(start_dir: Path) -> Path | None:
    """Find the nearest configuration file in ``start_dir`` or its parents."""
    for directory in (start_dir.resolve(), *start_dir.resolve().parents):
        for file_name in CONFIG_FILE_NAMES:
            candidate = directory / file_name
            if candidate.is_file():
                return candidate
    return None


def resolve_preset(preset: str | None) -> ReportingConfig:
    """Return the named preset, or the defaults when no preset is given."""
    if preset is None:
        return ReportingConfig()
    try:
        return PRESETS[preset]
    except KeyError:
        raise ConfigurationError(
            f"Unknown preset '{preset}'. Available presets: {sorted(PRESETS)}"
        ) from None


def load_reporting_config(
    path: Path | None = None,
    *,
    preset: str | None = None,
    start_dir: Path | None = None,
) -> ReportingConfig:
    """Load the reporting configuration.

    Values come from, in increasing priority: defaults, the preset (the
    ``preset`` argument, else the file's ``preset`` key), and the file's
    ``reporting`` section. Without an explicit ``path`` the file is searched
    for from ``start_dir`` (default: the working directory) upwards.

    Raises:
        ConfigurationError: If the file is unreadable, not a mapping, names
            an unknown preset, or holds invalid values.

    """
    if path is None:
        path = find_config_file(start_dir or Path.cwd())
    elif not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    data: Mapping[str, Any] = {}
    if path is not None:
        log.info("Loading configuration from %s", path)
        data = _read_config_file(path)
    else:
        log.debug("No configuration file found, using defaults")

    base = resolve_preset(preset or data.get("preset"))
    overrides = data.get("reporting") or {}
    if not isinstance(overrides, Mapping):
        raise ConfigurationError(f"'reporting' must be a mapping in {path}")

    merged = _deep_merge(base.model_dump(), _snake_keys(overrides))
    try:
        return ReportingConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid reporting configuration in {path}: {describe_errors(exc)}"
        ) from exc


def _read_config_file(path: Path) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid configuration {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration {path} must contain a mapping")
    return data


def _snake_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {
        to_snake(str(key)): _snake_keys(value) if isinstance(value, Mapping) else value
        for key, value in data.items()
    }


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
