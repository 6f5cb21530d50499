"""
Batch task: bulk draw due-date resynchronization.

One item per project that has at least one schedule snapshot.  Per-project
synchronization is normally triggered by a schedule change; this task is
the catch-up path for resyncing everything.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from sitephase_batch.domain.types import BatchItemStatus
from sitephase_batch.tasks.base import BatchItemInput, BatchTaskResult
from sitephase_kernel.domain.clock import Clock, SystemClock
from sitephase_kernel.logging_config import LogContext
from sitephase_kernel.selectors.schedule_selector import ScheduleSelector
from sitephase_kernel.services.draw_sync_service import DrawDueDateSyncService


class DrawDueDateSyncTask:
    """Recompute draw due dates for every scheduled project."""

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()

    @property
    def task_type(self) -> str:
        return "draws.sync_due_dates"

    @property
    def description(self) -> str:
        return "Resynchronize draw invoice due dates with project schedules"

    def prepare_items(
        self,
        parameters: dict[str, Any],
        session: Session,
        as_of: date,
    ) -> tuple[BatchItemInput, ...]:
        project_ids = ScheduleSelector(session).projects_with_schedule()
        return tuple(
            BatchItemInput(item_index=i, item_key=str(pid))
            for i, pid in enumerate(project_ids)
        )

    def execute_item(
        self,
        item: BatchItemInput,
        parameters: dict[str, Any],
        session: Session,
        as_of: date,
    ) -> BatchTaskResult:
        with LogContext.bind(project_id=item.item_key):
            report = DrawDueDateSyncService(session, clock=self._clock).synchronize(
                UUID(item.item_key),
            )

        if report.error is not None:
            return BatchTaskResult(
                status=BatchItemStatus.FAILED,
                error_code="DRAW_SYNC_FAILED",
                error_message=report.error,
                result_data=report.to_dict(),
            )
        # Milestone-level failures are already isolated by the service's own
        # SAVEPOINTs; keep the milestones that did succeed.
        return BatchTaskResult(
            status=BatchItemStatus.SUCCEEDED,
            result_data=report.to_dict(),
        )
