"""
DrawDueDateSyncService -- keep draw invoice due dates in step with the schedule.

Responsibility:
    Resolve each milestone's due date from the project's effective schedule
    (``domain.draws.resolve_draw_due_dates``) and overwrite ``due_date`` on
    the project's invoices that belong to that milestone.

Architecture position:
    Kernel > Services -- imperative shell around ``domain/draws.py``.

Invariants enforced:
    - Milestones are independent: each is applied inside its own SAVEPOINT,
      and a missing source date or a failed write affects that milestone
      only.
    - Idempotent: due dates are plain overwrites; an invoice already
      carrying the resolved date is left untouched.
    - Only ``due_date`` is ever written.

Failure modes:
    ``synchronize()`` never raises.  Store failures are logged and reported
    per milestone (``SyncOutcome.FAILED``) or, when the project or its
    schedule cannot be read at all, in ``DrawSyncReport.error``.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sitephase_kernel.domain.clock import Clock, SystemClock
from sitephase_kernel.domain.draws import (
    DRAW_MILESTONES,
    DrawMilestone,
    DrawSyncReport,
    MilestoneDueDate,
    MilestoneSyncResult,
    SyncOutcome,
    milestone_matches,
    resolve_draw_due_dates,
)
from sitephase_kernel.domain.schedule import Schedule
from sitephase_kernel.exceptions import SitePhaseError
from sitephase_kernel.logging_config import get_logger
from sitephase_kernel.models.invoice import InvoiceModel
from sitephase_kernel.selectors.project_selector import ProjectSelector
from sitephase_kernel.selectors.schedule_selector import ScheduleSelector
from sitephase_kernel.services.base import BaseService

logger = get_logger("services.draw_sync")


class DrawDueDateSyncService(BaseService[InvoiceModel]):
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        milestones: tuple[DrawMilestone, ...] = DRAW_MILESTONES,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._milestones = milestones
        self._projects = ProjectSelector(session)
        self._schedules = ScheduleSelector(session)

    def synchronize(self, project_id: UUID) -> DrawSyncReport:
        """Recompute every milestone's due date for one project.  Never raises."""
        try:
            project = self._projects.get_or_raise(project_id)
            schedule = self._schedules.latest_schedule(project_id) or Schedule()
        except SitePhaseError as exc:
            logger.error(
                "draw_sync_load_failed",
                extra={"project_id": str(project_id)},
                exc_info=True,
            )
            return DrawSyncReport(project_id=str(project_id), error=str(exc))

        resolved = resolve_draw_due_dates(
            schedule, project.permit_approved_at, self._milestones,
        )
        results = tuple(self._apply_milestone(project_id, r) for r in resolved)
        report = DrawSyncReport(project_id=str(project_id), milestones=results)

        logger.info(
            "draw_due_dates_updated",
            extra={
                "project_id": str(project_id),
                "invoices_updated": report.invoices_updated,
                "outcomes": {str(r.ordinal): r.outcome.value for r in results},
            },
        )
        return report

    def _apply_milestone(
        self,
        project_id: UUID,
        resolved: MilestoneDueDate,
    ) -> MilestoneSyncResult:
        milestone = resolved.milestone
        if not resolved.has_source:
            logger.info(
                "draw_due_date_no_source",
                extra={
                    "project_id": str(project_id),
                    "draw": milestone.ordinal,
                    "reason": resolved.missing_reason,
                },
            )
            return MilestoneSyncResult(
                ordinal=milestone.ordinal,
                outcome=SyncOutcome.NO_SOURCE,
                detail=resolved.missing_reason,
            )

        savepoint = self.session.begin_nested()
        try:
            invoices = self.session.execute(
                select(InvoiceModel).where(InvoiceModel.project_id == project_id)
            ).scalars().all()
            matched = [
                inv for inv in invoices
                if milestone_matches(milestone, inv.invoice_number)
            ]
            changed = [inv for inv in matched if inv.due_date != resolved.due_date]
            for invoice in changed:
                invoice.due_date = resolved.due_date
                invoice.updated_at = self._clock.now()
            self.session.flush()
            savepoint.commit()
        except SQLAlchemyError as exc:
            savepoint.rollback()
            logger.warning(
                "draw_due_date_update_failed",
                extra={"project_id": str(project_id), "draw": milestone.ordinal},
                exc_info=True,
            )
            return MilestoneSyncResult(
                ordinal=milestone.ordinal,
                outcome=SyncOutcome.FAILED,
                due_date=resolved.due_date,
                detail=str(exc),
            )

        if not matched:
            outcome = SyncOutcome.NO_INVOICES
        elif changed:
            outcome = SyncOutcome.UPDATED
        else:
            outcome = SyncOutcome.UNCHANGED

        return MilestoneSyncResult(
            ordinal=milestone.ordinal,
            outcome=outcome,
            due_date=resolved.due_date,
            invoices_matched=len(matched),
            invoices_updated=len(changed),
        )
