"""
sitephase_batch.domain.types -- Pure frozen dataclasses for batch runs.

ZERO I/O.  Frozen dataclasses with enum status fields and tuples for
immutable collections.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from sitephase_kernel.domain.draws import DrawSyncReport


# =============================================================================
# Status enums
# =============================================================================


class BatchRunStatus(str, Enum):
    """Run-level outcome."""

    COMPLETED = "completed"  # No item failed
    FAILED = "failed"  # Every item failed
    PARTIALLY_COMPLETED = "partially_completed"  # Some items failed


class BatchItemStatus(str, Enum):
    """Per-item outcome within a run."""

    SUCCEEDED = "succeeded"  # Item wrote its change
    SKIPPED = "skipped"  # Nothing to do (logged no-op)
    FAILED = "failed"  # Item raised or reported failure; SAVEPOINT rolled back


# =============================================================================
# Result DTOs
# =============================================================================


@dataclass(frozen=True)
class BatchItemResult:
    """Immutable result of processing a single batch item."""

    item_index: int
    item_key: str  # Business identifier (project id)
    status: BatchItemStatus
    error_code: str | None = None
    error_message: str | None = None
    result_data: dict[str, Any] | None = None
    duration_ms: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class BatchRunResult:
    """Immutable result of executing one task over all of its items."""

    task_type: str
    status: BatchRunStatus
    total_items: int
    succeeded: int
    failed: int
    skipped: int
    item_results: tuple[BatchItemResult, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    correlation_id: str | None = None

    @property
    def failures(self) -> tuple[BatchItemResult, ...]:
        return tuple(r for r in self.item_results if r.status is BatchItemStatus.FAILED)


@dataclass(frozen=True)
class ProjectError:
    """One isolated per-project failure."""

    project_id: str
    error: str
    error_code: str | None = None


@dataclass(frozen=True)
class PhaseProgressionResult:
    """Summary returned by ``run_phase_progression``."""

    today: date
    projects_checked: int
    projects_updated: int
    per_project_errors: tuple[ProjectError, ...] = ()

    @classmethod
    def from_run(cls, today: date, run: BatchRunResult) -> PhaseProgressionResult:
        return cls(
            today=today,
            projects_checked=run.total_items,
            projects_updated=run.succeeded,
            per_project_errors=tuple(
                ProjectError(
                    project_id=r.item_key,
                    error=r.error_message or "",
                    error_code=r.error_code,
                )
                for r in run.failures
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": self.today.isoformat(),
            "projects_checked": self.projects_checked,
            "projects_updated": self.projects_updated,
            "per_project_errors": [
                {"project_id": e.project_id, "error": e.error, "error_code": e.error_code}
                for e in self.per_project_errors
            ],
        }


@dataclass(frozen=True)
class ScheduleChangeReport:
    """Outcome of handling one schedule change.

    ``changes`` are human-readable descriptions for the notification layer;
    they are not written to the activity log.
    """

    project_id: str
    draw_report: DrawSyncReport
    changes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_id": self.project_id,
            "changes": list(self.changes),
            "draws": self.draw_report.to_dict(),
        }
