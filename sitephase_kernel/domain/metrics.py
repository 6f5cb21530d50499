"""
Progress & payment metrics -- pure, read-only display figures for a project.

Progress is a chain of independent tiers, first present result wins:

    1. schedule   position of today inside the dated schedule entries
    2. stored     ``project.progress`` when it is a number >= 0
    3. time       elapsed fraction of start_date -> estimated_completion

Payment figures come from paid invoices when invoice data is visible
(``invoices`` is not None, even if empty).  Without invoice visibility a
fixed tranche schedule over the budget is applied instead: tranche 0 is the
always-paid deposit, tranche i (i > 0) is paid once stored progress reaches
``i / (N - 1) * 100``.

``compute_project_metrics`` never raises.  A tier that fails is logged and
the chain falls through to the next one.

Rounding of percentages is half-up to whole numbers.  Amounts are Decimal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence
from uuid import UUID

from sitephase_kernel.domain.phases import PLANNING_AND_PERMITS, normalize_phase_label
from sitephase_kernel.domain.schedule import Schedule, ScheduleEntry
from sitephase_kernel.domain.types import InvoiceInfo, InvoiceStatus, ProjectInfo
from sitephase_kernel.logging_config import get_logger

logger = get_logger("domain.metrics")

# Percent of budget per tranche, Draw 1 .. Draw 7.
DEFAULT_TRANCHE_SCHEDULE: tuple[int, ...] = (20, 20, 15, 15, 15, 10, 5)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")


class ProgressSource(str, Enum):
    SCHEDULE = "schedule"
    STORED = "stored"
    TIME = "time"
    NONE = "none"


class PaymentSource(str, Enum):
    INVOICES = "invoices"
    TRANCHE_FALLBACK = "tranche_fallback"


@dataclass(frozen=True)
class ScheduleProgress:
    """Result of the schedule tier: a percentage and the phase it implies."""

    percent: int
    phase: str


@dataclass(frozen=True)
class PaymentData:
    project_id: UUID
    total_paid: Decimal
    total_budget: Decimal
    remaining_balance: Decimal
    payment_progress: Decimal


@dataclass(frozen=True)
class ConstructionMetrics:
    duration_days: int
    elapsed_days: int


@dataclass(frozen=True)
class ProjectMetrics:
    """Everything a list or detail view shows for one project."""

    project_id: UUID
    phase: str
    phase_label: str
    progress_percent: int
    progress_source: ProgressSource
    payment_data: PaymentData
    payment_source: PaymentSource
    construction_metrics: ConstructionMetrics

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_id": str(self.project_id),
            "phase": self.phase,
            "phase_label": self.phase_label,
            "progress_percent": self.progress_percent,
            "progress_source": self.progress_source.value,
            "payment_source": self.payment_source.value,
            "payment_data": {
                "total_paid": str(self.payment_data.total_paid),
                "total_budget": str(self.payment_data.total_budget),
                "remaining_balance": str(self.payment_data.remaining_balance),
                "payment_progress": str(self.payment_data.payment_progress),
            },
            "construction_metrics": {
                "duration_days": self.construction_metrics.duration_days,
                "elapsed_days": self.construction_metrics.elapsed_days,
            },
        }


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp(value, low, high):
    return max(low, min(value, high))


# =============================================================================
# Progress tiers
# =============================================================================


def schedule_progress(schedule: Schedule, today: date) -> ScheduleProgress | None:
    """Tier 1.  None when the schedule has no dated entries.

    Inside a window: ``round((idx + frac) / N * 100)``.  Before the first
    window: 0.  Any other day outside every window, including gaps between
    windows, reports 100 against the last entry.
    """
    items = schedule.dated_entries()
    if not items:
        return None
    total = len(items)

    hit = schedule.window_containing(today)
    if hit is not None:
        index, entry = hit
        span = max(1, (entry.end_date - entry.start_date).days)
        elapsed = _clamp((today - entry.start_date).days, 0, span)
        percent = Decimal(index * span + elapsed) * _HUNDRED / Decimal(span * total)
        return ScheduleProgress(_clamp(round_half_up(percent), 0, 100), entry.name)

    if today < items[0].start_date:
        return ScheduleProgress(0, items[0].name)

    return ScheduleProgress(100, items[-1].name)


def stored_progress(project: ProjectInfo) -> int | None:
    """Tier 2.  Stored progress clamped to [0, 100], None if unset or negative."""
    value = project.progress
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, Decimal)) or value < 0:
        return None
    return int(min(100, value))


def _span_days(project: ProjectInfo) -> int | None:
    if project.start_date is None or project.estimated_completion is None:
        return None
    return (project.estimated_completion - project.start_date).days


def time_based_progress(project: ProjectInfo, today: date) -> int | None:
    """Tier 3.  Elapsed share of the planned construction window."""
    span = _span_days(project)
    if span is None:
        return None
    elapsed = (today - project.start_date).days
    if span <= 0:
        return 100 if elapsed > 0 else 0
    fraction = Decimal(_clamp(elapsed, 0, span)) / Decimal(span)
    return round_half_up(fraction * _HUNDRED)


def construction_metrics(project: ProjectInfo, today: date) -> ConstructionMetrics:
    """Planned duration (at least one day) and elapsed days.

    Zeros when either date is missing.
    """
    span = _span_days(project)
    if span is None:
        return ConstructionMetrics(duration_days=0, elapsed_days=0)
    duration = max(1, span)
    elapsed = _clamp((today - project.start_date).days, 0, duration)
    return ConstructionMetrics(duration_days=duration, elapsed_days=elapsed)


# =============================================================================
# Payment
# =============================================================================


def _budget(project: ProjectInfo) -> Decimal:
    return Decimal(project.budget) if project.budget is not None else _ZERO


def payment_from_invoices(
    project: ProjectInfo,
    invoices: Iterable[InvoiceInfo],
) -> PaymentData:
    budget = _budget(project)
    total_paid = sum(
        (
            Decimal(inv.total or 0)
            for inv in invoices
            if inv.project_id == project.project_id
            and inv.status == InvoiceStatus.PAID.value
        ),
        _ZERO,
    )
    if budget > 0:
        progress = min(_HUNDRED, total_paid / budget * _HUNDRED)
    else:
        progress = _ZERO
    return PaymentData(
        project_id=project.project_id,
        total_paid=total_paid,
        total_budget=budget,
        remaining_balance=max(_ZERO, budget - total_paid),
        payment_progress=progress.quantize(_CENT, rounding=ROUND_HALF_UP),
    )


def payment_from_tranches(
    project: ProjectInfo,
    tranche_schedule: Sequence[int | Decimal] = DEFAULT_TRANCHE_SCHEDULE,
) -> PaymentData:
    budget = _budget(project)
    if budget <= 0:
        return PaymentData(project.project_id, _ZERO, _ZERO, _ZERO, _ZERO)

    progress = Decimal(stored_progress(project) or 0)
    steps = max(1, len(tranche_schedule) - 1)
    total_paid = _ZERO
    for index, pct in enumerate(tranche_schedule):
        threshold = Decimal(index) * _HUNDRED / Decimal(steps)
        if index == 0 or progress >= threshold:
            total_paid += budget * Decimal(pct) / _HUNDRED

    share = _clamp(total_paid / budget * _HUNDRED, _ZERO, _HUNDRED)
    return PaymentData(
        project_id=project.project_id,
        total_paid=total_paid.quantize(_CENT, rounding=ROUND_HALF_UP),
        total_budget=budget,
        remaining_balance=max(_ZERO, budget - total_paid).quantize(
            _CENT, rounding=ROUND_HALF_UP,
        ),
        payment_progress=share.quantize(_CENT, rounding=ROUND_HALF_UP),
    )


# =============================================================================
# Entry point
# =============================================================================


def _coerce_schedule(schedule_entries: Any, project_id: Any) -> Schedule:
    if schedule_entries is None:
        return Schedule()
    if isinstance(schedule_entries, Schedule):
        return schedule_entries
    items = list(schedule_entries)
    if all(isinstance(e, ScheduleEntry) for e in items):
        return Schedule(items)
    return Schedule.from_snapshot(
        [e for e in items if isinstance(e, Mapping)], project_id=project_id,
    )


def compute_project_metrics(
    project: ProjectInfo,
    schedule_entries: Schedule | Iterable[ScheduleEntry | Mapping[str, Any]] | None = None,
    invoices: Iterable[InvoiceInfo] | None = None,
    *,
    today: date,
    tranche_schedule: Sequence[int | Decimal] = DEFAULT_TRANCHE_SCHEDULE,
) -> ProjectMetrics:
    """Combine schedule, stored progress and invoices into display metrics.

    Args:
        project: The project snapshot.
        schedule_entries: Latest schedule (``Schedule``, entries, or raw blob
            elements).  None means no schedule data.
        invoices: The project's invoices, or None when invoice data is not
            visible (payment falls back to the tranche schedule).
        today: Day being evaluated.
        tranche_schedule: Percent of budget per tranche for the fallback.
    """
    log_extra = {"project_id": str(project.project_id)}

    from_schedule: ScheduleProgress | None = None
    try:
        schedule = _coerce_schedule(schedule_entries, project.project_id)
        from_schedule = schedule_progress(schedule, today)
    except Exception:
        logger.warning("metrics_schedule_tier_failed", extra=log_extra, exc_info=True)

    if from_schedule is not None:
        percent, source = from_schedule.percent, ProgressSource.SCHEDULE
    else:
        stored = stored_progress(project)
        if stored is not None:
            percent, source = stored, ProgressSource.STORED
        else:
            timed = time_based_progress(project, today)
            if timed is not None:
                percent, source = timed, ProgressSource.TIME
            else:
                percent, source = 0, ProgressSource.NONE

    if from_schedule is not None:
        phase = from_schedule.phase
    else:
        phase = project.phase or PLANNING_AND_PERMITS

    payment_source = PaymentSource.TRANCHE_FALLBACK
    payment: PaymentData | None = None
    if invoices is not None:
        try:
            payment = payment_from_invoices(project, invoices)
            payment_source = PaymentSource.INVOICES
        except Exception:
            logger.warning("metrics_invoice_payment_failed", extra=log_extra, exc_info=True)
    if payment is None:
        payment = payment_from_tranches(project, tranche_schedule)

    return ProjectMetrics(
        project_id=project.project_id,
        phase=phase,
        phase_label=normalize_phase_label(phase),
        progress_percent=percent,
        progress_source=source,
        payment_data=payment,
        payment_source=payment_source,
        construction_metrics=construction_metrics(project, today),
    )
