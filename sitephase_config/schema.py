"""
Settings schema (``sitephase_config.schema``).

Frozen dataclasses describing every runtime setting.  Instances are built
by ``sitephase_config.loader`` from merged YAML and environment data and
are never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProgressionSettings:
    """Which projects the phase progression job looks at."""

    eligible_statuses: tuple[str, ...] = ("Planning", "Active", "In Progress")
    terminal_phase: str = "Final"


@dataclass(frozen=True)
class PaymentSettings:
    """Fallback payment model used when invoice data is not visible."""

    tranche_schedule: tuple[int, ...] = (20, 20, 15, 15, 15, 10, 5)


@dataclass(frozen=True)
class ActivitySettings:
    """Type and title written on automatic phase transition entries."""

    type: str = "phase_update"
    title: str = "Automatic Phase Progression"


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///sitephase.db"
    log_level: str = "INFO"
    progression: ProgressionSettings = field(default_factory=ProgressionSettings)
    payments: PaymentSettings = field(default_factory=PaymentSettings)
    activity: ActivitySettings = field(default_factory=ActivitySettings)
