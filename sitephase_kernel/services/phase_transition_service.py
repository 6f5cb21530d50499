"""
PhaseTransitionService -- persist one automatic phase transition.

Responsibility:
    Given a ``PhaseDecision`` that is a transition, write the project's new
    ``phase``, ``progress`` and ``updated_at`` and append exactly one
    activity entry describing the change.  These two writes are the only
    side effects of the progression job.

Architecture position:
    Kernel > Services -- imperative shell around
    ``sitephase_kernel.domain.progression``.

Concurrency:
    The read-then-write is not compare-and-swap protected.  At most one
    progression run may execute at a time (external scheduler lock).

Failure modes:
    - ProjectNotFoundError: the project row disappeared between enumeration
      and the write.
    - TransientStoreError: the update or the activity insert failed.  The
      batch executor rolls back the project's SAVEPOINT, so a phase change
      is never persisted without its activity entry.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from sitephase_kernel.domain.clock import Clock, SystemClock
from sitephase_kernel.domain.progression import PhaseDecision
from sitephase_kernel.domain.types import ActivityRecord
from sitephase_kernel.exceptions import ProjectNotFoundError
from sitephase_kernel.logging_config import get_logger
from sitephase_kernel.models.project import ProjectModel
from sitephase_kernel.services.activity_service import ActivityLogService
from sitephase_kernel.services.base import BaseService

logger = get_logger("services.phase_transition")

DEFAULT_ACTIVITY_TYPE = "phase_update"
DEFAULT_ACTIVITY_TITLE = "Automatic Phase Progression"


class PhaseTransitionService(BaseService[ProjectModel]):
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        activity_service: ActivityLogService | None = None,
        activity_type: str = DEFAULT_ACTIVITY_TYPE,
        activity_title: str = DEFAULT_ACTIVITY_TITLE,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._activity = activity_service or ActivityLogService(session)
        self._activity_type = activity_type
        self._activity_title = activity_title

    def apply(self, project_id: UUID, decision: PhaseDecision) -> ActivityRecord | None:
        """
        Persist ``decision`` if it is a transition.

        Returns:
            The appended activity entry, or None when the decision is a no-op.
        """
        if not decision.is_transition:
            return None

        with self._writing("project.load"):
            project = self.session.get(ProjectModel, project_id)
        if project is None:
            raise ProjectNotFoundError(str(project_id))

        now = self._clock.now()
        previous_phase = project.phase
        with self._writing("project.update_phase"):
            project.phase = decision.next_phase
            project.progress = decision.next_progress or 0
            project.updated_at = now
            self.session.flush()

        activity = self._activity.record(
            project_id=project.id,
            project_name=project.name,
            activity_type=self._activity_type,
            title=self._activity_title,
            description=f"Project automatically advanced to {decision.next_phase} phase",
            occurred_at=now,
        )

        logger.info(
            "phase_transition_applied",
            extra={
                "project_id": str(project_id),
                "from_phase": previous_phase,
                "to_phase": decision.next_phase,
                "progress": project.progress,
                "reason": decision.reason.value,
            },
        )
        return activity
