"""
Batch task: automatic phase progression.

One item per eligible project (eligible status, phase not terminal).  Each
item evaluates ``decide_next_phase`` for the run's day and, on a
transition, writes the new phase/progress plus one activity entry.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from sitephase_batch.domain.types import BatchItemStatus
from sitephase_batch.tasks.base import BatchItemInput, BatchTaskResult
from sitephase_kernel.domain.clock import Clock, SystemClock
from sitephase_kernel.domain.phases import TERMINAL_PHASE
from sitephase_kernel.domain.progression import decide_next_phase
from sitephase_kernel.domain.types import ELIGIBLE_PROJECT_STATUSES
from sitephase_kernel.exceptions import SitePhaseError
from sitephase_kernel.logging_config import LogContext, get_logger
from sitephase_kernel.selectors.project_selector import ProjectSelector
from sitephase_kernel.selectors.schedule_selector import ScheduleSelector
from sitephase_kernel.services.phase_transition_service import (
    DEFAULT_ACTIVITY_TITLE,
    DEFAULT_ACTIVITY_TYPE,
    PhaseTransitionService,
)

logger = get_logger("batch.tasks.progression")


class PhaseProgressionTask:
    """Advance project phases from the schedule."""

    def __init__(
        self,
        clock: Clock | None = None,
        eligible_statuses: Iterable[str] | None = None,
        terminal_phase: str = TERMINAL_PHASE,
        activity_type: str = DEFAULT_ACTIVITY_TYPE,
        activity_title: str = DEFAULT_ACTIVITY_TITLE,
    ):
        self._clock = clock or SystemClock()
        self._statuses = tuple(
            eligible_statuses
            if eligible_statuses is not None
            else (s.value for s in ELIGIBLE_PROJECT_STATUSES)
        )
        self._terminal_phase = terminal_phase
        self._activity_type = activity_type
        self._activity_title = activity_title

    @property
    def task_type(self) -> str:
        return "phases.progression"

    @property
    def description(self) -> str:
        return "Advance project phases as scheduled work starts"

    def prepare_items(
        self,
        parameters: dict[str, Any],
        session: Session,
        as_of: date,
    ) -> tuple[BatchItemInput, ...]:
        projects = ProjectSelector(session).list_progression_candidates(
            self._statuses, self._terminal_phase,
        )
        logger.info(
            "phase_progression_candidates",
            extra={"count": len(projects), "today": as_of},
        )
        return tuple(
            BatchItemInput(
                item_index=i,
                item_key=str(p.project_id),
                payload={"name": p.name, "phase": p.phase},
            )
            for i, p in enumerate(projects)
        )

    def execute_item(
        self,
        item: BatchItemInput,
        parameters: dict[str, Any],
        session: Session,
        as_of: date,
    ) -> BatchTaskResult:
        project_id = UUID(item.item_key)
        with LogContext.bind(project_id=item.item_key):
            try:
                return self._evaluate(project_id, session, as_of)
            except SitePhaseError as exc:
                logger.warning("phase_progression_item_failed", exc_info=True)
                return BatchTaskResult(
                    status=BatchItemStatus.FAILED,
                    error_code=exc.code,
                    error_message=str(exc),
                )

    def _evaluate(self, project_id: UUID, session: Session, as_of: date) -> BatchTaskResult:
        project = ProjectSelector(session).get(project_id)
        if project is None:
            logger.info("phase_progression_noop", extra={"reason": "project_missing"})
            return BatchTaskResult(
                status=BatchItemStatus.SKIPPED,
                result_data={"reason": "project_missing"},
            )

        schedule = ScheduleSelector(session).latest_schedule(project_id)
        decision = decide_next_phase(project, schedule, as_of)

        if not decision.is_transition:
            logger.info(
                "phase_progression_noop",
                extra={"phase": project.phase, "reason": decision.reason.value},
            )
            return BatchTaskResult(
                status=BatchItemStatus.SKIPPED,
                result_data={"phase": project.phase, "reason": decision.reason.value},
            )

        service = PhaseTransitionService(
            session,
            clock=self._clock,
            activity_type=self._activity_type,
            activity_title=self._activity_title,
        )
        activity = service.apply(project_id, decision)
        return BatchTaskResult(
            status=BatchItemStatus.SUCCEEDED,
            result_data={
                "from_phase": decision.current_phase,
                "to_phase": decision.next_phase,
                "progress": decision.next_progress,
                "reason": decision.reason.value,
                "activity_id": str(activity.activity_id) if activity else None,
            },
        )
