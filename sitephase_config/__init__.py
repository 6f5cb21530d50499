"""
sitephase_config -- single public entrypoint for runtime settings.

Responsibility:
    ``get_settings()`` is the only way services, the orchestrator and the
    command line obtain configuration.  Nothing else reads settings files or
    SITEPHASE_* environment variables.

Architecture position:
    Sits above ``sitephase_kernel`` and below ``sitephase_batch``.  The
    kernel never imports from this package; the orchestrator passes the
    relevant values into kernel services as plain arguments.
"""

from __future__ import annotations

from pathlib import Path

from sitephase_config.loader import load_settings
from sitephase_config.schema import (
    ActivitySettings,
    PaymentSettings,
    ProgressionSettings,
    Settings,
)
from sitephase_kernel.logging_config import get_logger

_logger = get_logger("config")

__all__ = [
    "get_settings",
    "Settings",
    "ProgressionSettings",
    "PaymentSettings",
    "ActivitySettings",
]


def get_settings(path: str | Path | None = None) -> Settings:
    """
    Load and validate settings.

    Args:
        path: Optional user settings file overlaid on the packaged defaults.
            When omitted, ``SITEPHASE_CONFIG`` is consulted.

    Raises:
        ConfigurationError: on a missing file, invalid YAML or invalid values.
    """
    settings = load_settings(path)
    _logger.debug(
        "settings_loaded",
        extra={
            "log_level": settings.log_level,
            "eligible_statuses": list(settings.progression.eligible_statuses),
            "tranche_count": len(settings.payments.tranche_schedule),
        },
    )
    return settings
