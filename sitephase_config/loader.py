"""
Settings loader (``sitephase_config.loader``).

Responsibility
--------------
Read the packaged defaults, overlay an optional user YAML file, apply
environment overrides and turn the result into a validated, frozen
``Settings`` instance.

Precedence (last wins)
----------------------
1. ``sitephase_config/defaults/settings.yaml``
2. user file (explicit path, else ``SITEPHASE_CONFIG``)
3. ``SITEPHASE_DATABASE_URL`` / ``SITEPHASE_LOG_LEVEL``

Failure modes
-------------
* Missing user file  -> ``ConfigurationError``.
* Malformed YAML  -> ``ConfigurationError`` wrapping ``yaml.YAMLError``.
* Out-of-range or unknown values  -> ``ConfigurationError`` naming the key.
"""

from __future__ import annotations

import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping

import yaml

from sitephase_config.schema import (
    ActivitySettings,
    PaymentSettings,
    ProgressionSettings,
    Settings,
)
from sitephase_kernel.domain.types import ProjectStatus
from sitephase_kernel.exceptions import ConfigurationError

DEFAULTS_PATH = Path(__file__).parent / "defaults" / "settings.yaml"

ENV_CONFIG_PATH = "SITEPHASE_CONFIG"
ENV_DATABASE_URL = "SITEPHASE_DATABASE_URL"
ENV_LOG_LEVEL = "SITEPHASE_LOG_LEVEL"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        ConfigurationError: if the file is missing, unreadable, not valid
            YAML, or its top level is not a mapping.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as exc:
        raise ConfigurationError(str(path), "settings file not found") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(str(path), f"invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    return data


def merge_settings(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Recursive key-by-key merge; nested mappings merge, everything else replaces."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(data: Mapping[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    result = dict(data)
    if environ.get(ENV_DATABASE_URL):
        result["database_url"] = environ[ENV_DATABASE_URL]
    if environ.get(ENV_LOG_LEVEL):
        result["log_level"] = environ[ENV_LOG_LEVEL]
    return result


# ---------------------------------------------------------------------------
# Parsing + validation
# ---------------------------------------------------------------------------


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(key, "must be a mapping")
    return value


def parse_log_level(value: Any) -> str:
    level = str(value).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError("log_level", f"unknown logging level {value!r}")
    return level


def parse_progression(data: Mapping[str, Any]) -> ProgressionSettings:
    defaults = ProgressionSettings()
    statuses = data.get("eligible_statuses", defaults.eligible_statuses)
    if isinstance(statuses, str) or not statuses:
        raise ConfigurationError(
            "progression.eligible_statuses", "must be a non-empty list",
        )
    known = {s.value for s in ProjectStatus}
    for status in statuses:
        if status not in known:
            raise ConfigurationError(
                "progression.eligible_statuses",
                f"unknown project status {status!r}; expected one of {sorted(known)}",
            )
    terminal = str(data.get("terminal_phase", defaults.terminal_phase))
    return ProgressionSettings(
        eligible_statuses=tuple(statuses),
        terminal_phase=terminal,
    )


def parse_payments(data: Mapping[str, Any]) -> PaymentSettings:
    schedule = data.get("tranche_schedule", PaymentSettings().tranche_schedule)
    key = "payments.tranche_schedule"
    if isinstance(schedule, str) or not schedule:
        raise ConfigurationError(key, "must be a non-empty list of percentages")
    parsed: list[int] = []
    for pct in schedule:
        if isinstance(pct, bool) or not isinstance(pct, int):
            raise ConfigurationError(key, f"percentage {pct!r} is not a whole number")
        if not 0 <= pct <= 100:
            raise ConfigurationError(key, f"percentage {pct} outside [0, 100]")
        parsed.append(pct)
    if sum(Decimal(p) for p in parsed) != 100:
        raise ConfigurationError(key, f"percentages sum to {sum(parsed)}, not 100")
    return PaymentSettings(tranche_schedule=tuple(parsed))


def parse_activity(data: Mapping[str, Any]) -> ActivitySettings:
    defaults = ActivitySettings()
    activity_type = str(data.get("type") or defaults.type)
    title = str(data.get("title") or defaults.title)
    return ActivitySettings(type=activity_type, title=title)


def parse_settings(data: Mapping[str, Any]) -> Settings:
    """Build a validated ``Settings`` from merged raw data."""
    database_url = data.get("database_url")
    if not database_url or not isinstance(database_url, str):
        raise ConfigurationError("database_url", "must be a non-empty string")
    return Settings(
        database_url=database_url,
        log_level=parse_log_level(data.get("log_level", "INFO")),
        progression=parse_progression(_section(data, "progression")),
        payments=parse_payments(_section(data, "payments")),
        activity=parse_activity(_section(data, "activity")),
    )


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load defaults, overlay the user file and environment, then validate."""
    env = os.environ if environ is None else environ
    data = load_yaml_file(DEFAULTS_PATH)

    user_path = path or env.get(ENV_CONFIG_PATH)
    if user_path:
        data = merge_settings(data, load_yaml_file(Path(user_path)))

    return parse_settings(apply_env_overrides(data, env))
