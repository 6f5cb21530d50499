"""
SitePhaseOrchestrator -- DI container and public entry point of the engine.

Contract:
    Wires settings, the clock, the task registry and the executor, and
    exposes the engine's operations:

    - ``run_phase_progression(today)``        batch; only enumeration failure raises
    - ``synchronize_draw_due_dates(project)`` best effort; never raises
    - ``compute_project_metrics(project, ...)`` pure; never raises
    - ``project_metrics(project_id)``         store-backed metrics for one project
    - ``handle_schedule_change(project_id)``  draw resync + change descriptions
    - ``resync_all_draws()``                  bulk draw resync batch

Invariants enforced:
    - Clock injection: every service and task receives the same Clock.
    - The orchestrator never commits; the caller owns the transaction
      (``session_scope()`` in the command line).
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping
from uuid import UUID

from sqlalchemy.orm import Session

from sitephase_batch.domain.types import (
    BatchRunResult,
    PhaseProgressionResult,
    ScheduleChangeReport,
)
from sitephase_batch.services.executor import BatchExecutor
from sitephase_batch.tasks.base import TaskRegistry
from sitephase_batch.tasks.draw_tasks import DrawDueDateSyncTask
from sitephase_batch.tasks.progression_tasks import PhaseProgressionTask
from sitephase_config.schema import Settings
from sitephase_kernel.domain.clock import Clock, SystemClock
from sitephase_kernel.domain.draws import DrawSyncReport
from sitephase_kernel.domain.metrics import ProjectMetrics, compute_project_metrics
from sitephase_kernel.domain.schedule import Schedule, ScheduleEntry
from sitephase_kernel.domain.schedule_changes import (
    GENERIC_CHANGE_DESCRIPTION,
    describe_schedule_changes,
)
from sitephase_kernel.domain.types import InvoiceInfo, ProjectInfo
from sitephase_kernel.exceptions import TransientStoreError
from sitephase_kernel.logging_config import LogContext, get_logger
from sitephase_kernel.selectors.invoice_selector import InvoiceSelector
from sitephase_kernel.selectors.project_selector import ProjectSelector
from sitephase_kernel.selectors.schedule_selector import ScheduleSelector
from sitephase_kernel.services.draw_sync_service import DrawDueDateSyncService

logger = get_logger("batch.orchestrator")

PHASE_PROGRESSION = "phases.progression"
DRAW_SYNC = "draws.sync_due_dates"


def default_task_registry(settings: Settings, clock: Clock) -> TaskRegistry:
    """Create a TaskRegistry pre-loaded with the engine's tasks."""
    registry = TaskRegistry()
    registry.register(
        PhaseProgressionTask(
            clock=clock,
            eligible_statuses=settings.progression.eligible_statuses,
            terminal_phase=settings.progression.terminal_phase,
            activity_type=settings.activity.type,
            activity_title=settings.activity.title,
        )
    )
    registry.register(DrawDueDateSyncTask(clock=clock))
    return registry


class SitePhaseOrchestrator:
    """DI container for the reconciliation engine.

    Non-goals:
        - Does NOT manage session lifecycle -- caller controls commits.
        - Does NOT schedule itself -- an external scheduler calls
          ``run_phase_progression`` and guarantees one run at a time.
    """

    def __init__(
        self,
        session: Session,
        settings: Settings,
        task_registry: TaskRegistry,
        clock: Clock | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._task_registry = task_registry
        self._clock = clock or SystemClock()
        self._executor = BatchExecutor(session, task_registry, self._clock)

    @classmethod
    def from_session(
        cls,
        session: Session,
        settings: Settings | None = None,
        clock: Clock | None = None,
        task_registry: TaskRegistry | None = None,
    ) -> SitePhaseOrchestrator:
        """Create a fully wired orchestrator from a session.

        Args:
            session: SQLAlchemy session for persistence.
            settings: Validated settings; defaults when omitted.
            clock: Optional clock for deterministic testing.
            task_registry: Optional pre-configured registry.
        """
        effective_settings = settings or Settings()
        effective_clock = clock or SystemClock()
        registry = (
            task_registry
            if task_registry is not None
            else default_task_registry(effective_settings, effective_clock)
        )
        return cls(
            session=session,
            settings=effective_settings,
            task_registry=registry,
            clock=effective_clock,
        )

    # -------------------------------------------------------------------------
    # Phase progression
    # -------------------------------------------------------------------------

    def run_phase_progression(self, today: date | None = None) -> PhaseProgressionResult:
        """Advance every eligible project's phase for ``today``.

        Raises:
            ProjectEnumerationError: the candidate projects could not be
                listed.  Per-project failures are reported, not raised.
        """
        day = today or self._clock.today()
        run = self._executor.run(PHASE_PROGRESSION, as_of=day)
        result = PhaseProgressionResult.from_run(day, run)
        logger.info(
            "phase_progression_completed",
            extra={
                "today": day,
                "projects_checked": result.projects_checked,
                "projects_updated": result.projects_updated,
                "error_count": len(result.per_project_errors),
            },
        )
        return result

    # -------------------------------------------------------------------------
    # Draws
    # -------------------------------------------------------------------------

    def synchronize_draw_due_dates(self, project_id: UUID) -> DrawSyncReport:
        """Recompute draw due dates for one project.  Never raises."""
        with LogContext.bind(project_id=str(project_id)):
            return DrawDueDateSyncService(self._session, clock=self._clock).synchronize(
                project_id,
            )

    def resync_all_draws(self, today: date | None = None) -> BatchRunResult:
        return self._executor.run(DRAW_SYNC, as_of=today or self._clock.today())

    def handle_schedule_change(self, project_id: UUID) -> ScheduleChangeReport:
        """React to a saved schedule: resync draws and describe what changed."""
        draw_report = self.synchronize_draw_due_dates(project_id)

        changes: list[str] = []
        try:
            previous, latest = ScheduleSelector(self._session).latest_raw_pair(project_id)
        except TransientStoreError:
            logger.warning(
                "schedule_change_read_failed",
                extra={"project_id": str(project_id)},
                exc_info=True,
            )
        else:
            if previous is not None and latest is not None:
                changes = describe_schedule_changes(previous, latest)

        if not changes:
            changes = [GENERIC_CHANGE_DESCRIPTION]

        logger.info(
            "schedule_change_handled",
            extra={
                "project_id": str(project_id),
                "change_count": len(changes),
                "invoices_updated": draw_report.invoices_updated,
            },
        )
        return ScheduleChangeReport(
            project_id=str(project_id),
            draw_report=draw_report,
            changes=tuple(changes),
        )

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------

    def compute_project_metrics(
        self,
        project: ProjectInfo,
        schedule_entries: Schedule | Iterable[ScheduleEntry | Mapping[str, Any]] | None = None,
        invoices: Iterable[InvoiceInfo] | None = None,
        today: date | None = None,
    ) -> ProjectMetrics:
        """Pure metrics for an already loaded project.  Never raises."""
        return compute_project_metrics(
            project,
            schedule_entries,
            invoices,
            today=today or self._clock.today(),
            tranche_schedule=self._settings.payments.tranche_schedule,
        )

    def project_metrics(self, project_id: UUID, today: date | None = None) -> ProjectMetrics:
        """Load a project with its schedule and invoices and compute metrics.

        Schedule or invoice read failures degrade to the next fallback tier.

        Raises:
            ProjectNotFoundError: no such project.
            TransientStoreError: the project itself could not be read.
        """
        project = ProjectSelector(self._session).get_or_raise(project_id)

        schedule: Schedule | None = None
        try:
            schedule = ScheduleSelector(self._session).latest_schedule(project_id)
        except TransientStoreError:
            logger.warning(
                "metrics_schedule_read_failed",
                extra={"project_id": str(project_id)},
                exc_info=True,
            )

        invoices: tuple[InvoiceInfo, ...] | None = None
        try:
            invoices = InvoiceSelector(self._session).for_project(project_id)
        except TransientStoreError:
            logger.warning(
                "metrics_invoice_read_failed",
                extra={"project_id": str(project_id)},
                exc_info=True,
            )

        return self.compute_project_metrics(project, schedule, invoices, today)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def task_registry(self) -> TaskRegistry:
        return self._task_registry

    @property
    def executor(self) -> BatchExecutor:
        return self._executor
