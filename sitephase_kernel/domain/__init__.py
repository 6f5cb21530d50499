"""Pure domain core: taxonomy, schedule, progression, draws, metrics."""

from sitephase_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from sitephase_kernel.domain.draws import (
    DRAW_MILESTONES,
    DrawMilestone,
    DrawSyncReport,
    MilestoneDueDate,
    MilestoneSyncResult,
    SyncOutcome,
    draw_numbers,
    milestone_matches,
    resolve_draw_due_dates,
)
from sitephase_kernel.domain.metrics import (
    DEFAULT_TRANCHE_SCHEDULE,
    PaymentSource,
    ProgressSource,
    ProjectMetrics,
    compute_project_metrics,
)
from sitephase_kernel.domain.phases import (
    PHASE_TAXONOMY,
    PhaseDefinition,
    get_phase,
    percentage_for,
)
from sitephase_kernel.domain.progression import (
    DecisionReason,
    PhaseDecision,
    decide_next_phase,
)
from sitephase_kernel.domain.schedule import Schedule, ScheduleEntry, TradeAnchor
from sitephase_kernel.domain.schedule_changes import describe_schedule_changes
from sitephase_kernel.domain.types import (
    ActivityRecord,
    InvoiceInfo,
    InvoiceStatus,
    ProjectInfo,
    ProjectStatus,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "PhaseDefinition",
    "PHASE_TAXONOMY",
    "get_phase",
    "percentage_for",
    "Schedule",
    "ScheduleEntry",
    "TradeAnchor",
    "DecisionReason",
    "PhaseDecision",
    "decide_next_phase",
    "DrawMilestone",
    "DRAW_MILESTONES",
    "MilestoneDueDate",
    "draw_numbers",
    "milestone_matches",
    "resolve_draw_due_dates",
    "SyncOutcome",
    "MilestoneSyncResult",
    "DrawSyncReport",
    "DEFAULT_TRANCHE_SCHEDULE",
    "ProgressSource",
    "PaymentSource",
    "ProjectMetrics",
    "compute_project_metrics",
    "describe_schedule_changes",
    "ProjectInfo",
    "ProjectStatus",
    "InvoiceInfo",
    "InvoiceStatus",
    "ActivityRecord",
]
