"""
Draw milestones -- where each payment draw's due date comes from.

Responsibility:
    Define the fixed set of schedule-driven draws, identify which invoices
    belong to each draw, and compute each draw's due date from a schedule.
    Pure; ``sitephase_kernel.services.draw_sync_service`` does the writes.

Milestones:
    Draw 1  Permit Approved      permit approval day
    Draw 4  Dried-In             end of the "framing crew" entry
    Draw 5  Rough-Ins Complete   one day before the "insulation" entry starts
    Draw 6  Drywall Installed    end of the "drywall" entry
    Draw 7  Project Completion   latest end date across the schedule

Invoice identity:
    Draw ordinals are read from ``invoice_number`` with a word-bounded
    pattern, so "Draw 10" is draw 10 and never draw 1.  Draw 1 also rejects
    invoices that reference draw 2, keeping combined "Draw 1 / Draw 2"
    invoices out of the permit milestone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from sitephase_kernel.domain.schedule import Schedule, TradeAnchor, to_day


class DueDateRule(str, Enum):
    """How a milestone's due date is derived."""

    PERMIT_APPROVAL = "permit_approval"
    ANCHOR_END = "anchor_end"
    DAY_BEFORE_ANCHOR_START = "day_before_anchor_start"
    SCHEDULE_END = "schedule_end"


@dataclass(frozen=True)
class DrawMilestone:
    """One schedule-driven payment draw."""

    ordinal: int
    label: str
    rule: DueDateRule
    anchor: TradeAnchor | None = None
    excluded_ordinals: frozenset[int] = field(default_factory=frozenset)

    @property
    def title(self) -> str:
        return f"Draw {self.ordinal}"


DRAW_MILESTONES: tuple[DrawMilestone, ...] = (
    DrawMilestone(
        ordinal=1,
        label="Permit Approved",
        rule=DueDateRule.PERMIT_APPROVAL,
        excluded_ordinals=frozenset({2}),
    ),
    DrawMilestone(
        ordinal=4,
        label="Dried-In",
        rule=DueDateRule.ANCHOR_END,
        anchor=TradeAnchor.FRAMING_CREW,
    ),
    DrawMilestone(
        ordinal=5,
        label="Rough-Ins Complete",
        rule=DueDateRule.DAY_BEFORE_ANCHOR_START,
        anchor=TradeAnchor.INSULATION,
    ),
    DrawMilestone(
        ordinal=6,
        label="Drywall Installed",
        rule=DueDateRule.ANCHOR_END,
        anchor=TradeAnchor.DRYWALL,
    ),
    DrawMilestone(
        ordinal=7,
        label="Project Completion",
        rule=DueDateRule.SCHEDULE_END,
    ),
)

_DRAW_PATTERN = re.compile(r"\bdraw\s*[#\-]?\s*(\d+)\b", re.IGNORECASE)


def draw_numbers(invoice_number: str | None) -> frozenset[int]:
    """Every draw ordinal referenced by an invoice number."""
    if not invoice_number:
        return frozenset()
    return frozenset(int(m) for m in _DRAW_PATTERN.findall(invoice_number))


def milestone_matches(milestone: DrawMilestone, invoice_number: str | None) -> bool:
    numbers = draw_numbers(invoice_number)
    if milestone.ordinal not in numbers:
        return False
    return not (numbers & milestone.excluded_ordinals)


@dataclass(frozen=True)
class MilestoneDueDate:
    """Resolved due date for one milestone, or the reason there is none."""

    milestone: DrawMilestone
    due_date: date | None
    missing_reason: str | None = None

    @property
    def has_source(self) -> bool:
        return self.due_date is not None


def resolve_milestone_due_date(
    milestone: DrawMilestone,
    schedule: Schedule,
    permit_approved_at: datetime | date | None,
) -> MilestoneDueDate:
    """Compute one milestone's due date.  Never raises."""
    if milestone.rule is DueDateRule.PERMIT_APPROVAL:
        if permit_approved_at is None:
            return MilestoneDueDate(milestone, None, "permit_not_approved")
        return MilestoneDueDate(milestone, to_day(permit_approved_at))

    if milestone.rule is DueDateRule.SCHEDULE_END:
        end = schedule.latest_end_date()
        if end is None:
            return MilestoneDueDate(milestone, None, "schedule_has_no_end_dates")
        return MilestoneDueDate(milestone, end)

    entry = schedule.find_anchor(milestone.anchor) if milestone.anchor else None
    if entry is None:
        return MilestoneDueDate(milestone, None, "anchor_not_in_schedule")

    if milestone.rule is DueDateRule.DAY_BEFORE_ANCHOR_START:
        return MilestoneDueDate(milestone, entry.start_date - timedelta(days=1))

    if entry.end_date is None:
        return MilestoneDueDate(milestone, None, "anchor_has_no_end_date")
    return MilestoneDueDate(milestone, entry.end_date)


def resolve_draw_due_dates(
    schedule: Schedule,
    permit_approved_at: datetime | date | None,
    milestones: tuple[DrawMilestone, ...] = DRAW_MILESTONES,
) -> tuple[MilestoneDueDate, ...]:
    """Resolve every milestone independently, in milestone order."""
    return tuple(
        resolve_milestone_due_date(m, schedule, permit_approved_at)
        for m in milestones
    )


# =============================================================================
# Synchronization report
# =============================================================================


class SyncOutcome(str, Enum):
    """What happened to one milestone during a synchronization run."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    NO_SOURCE = "no_source"
    NO_INVOICES = "no_invoices"
    FAILED = "failed"


@dataclass(frozen=True)
class MilestoneSyncResult:
    ordinal: int
    outcome: SyncOutcome
    due_date: date | None = None
    invoices_matched: int = 0
    invoices_updated: int = 0
    detail: str | None = None


@dataclass(frozen=True)
class DrawSyncReport:
    """Per-milestone outcomes of one ``synchronize`` call."""

    project_id: str
    milestones: tuple[MilestoneSyncResult, ...] = ()
    error: str | None = None

    @property
    def invoices_updated(self) -> int:
        return sum(m.invoices_updated for m in self.milestones)

    @property
    def failed(self) -> tuple[MilestoneSyncResult, ...]:
        return tuple(m for m in self.milestones if m.outcome is SyncOutcome.FAILED)

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failed

    def outcome_for(self, ordinal: int) -> MilestoneSyncResult | None:
        for result in self.milestones:
            if result.ordinal == ordinal:
                return result
        return None

    def to_dict(self) -> dict:
        return {
            "project_id": self.project_id,
            "error": self.error,
            "invoices_updated": self.invoices_updated,
            "milestones": [
                {
                    "draw": m.ordinal,
                    "outcome": m.outcome.value,
                    "due_date": m.due_date.isoformat() if m.due_date else None,
                    "invoices_matched": m.invoices_matched,
                    "invoices_updated": m.invoices_updated,
                    "detail": m.detail,
                }
                for m in self.milestones
            ],
        }
