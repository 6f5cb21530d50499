"""
ActivityLogService -- append-only sink for project activity entries.

Responsibility:
    Insert activity rows.  There is no update or delete path; the ORM
    listeners in ``db/immutability.py`` reject both.

Architecture position:
    Kernel > Services.  Called only by ``PhaseTransitionService``.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select

from sitephase_kernel.domain.types import ActivityRecord
from sitephase_kernel.logging_config import get_logger
from sitephase_kernel.models.activity import ActivityModel
from sitephase_kernel.services.base import BaseService

logger = get_logger("services.activity")


class ActivityLogService(BaseService[ActivityModel]):
    """Append activity entries within the caller's transaction."""

    def record(
        self,
        *,
        project_id: UUID,
        activity_type: str,
        title: str,
        description: str,
        occurred_at: datetime,
        project_name: str | None = None,
    ) -> ActivityRecord:
        """
        Append one entry and flush.

        Raises:
            TransientStoreError: the insert failed.
        """
        model = ActivityModel(
            project_id=project_id,
            project_name=project_name,
            activity_type=activity_type,
            title=title,
            description=description,
            occurred_at=occurred_at,
        )
        with self._writing("activity.insert"):
            self.session.add(model)
            self.session.flush()

        logger.debug(
            "activity_recorded",
            extra={
                "activity_id": str(model.id),
                "project_id": str(project_id),
                "activity_type": activity_type,
            },
        )
        return model.to_dto()

    def for_project(self, project_id: UUID) -> tuple[ActivityRecord, ...]:
        """Entries for one project, oldest first."""
        stmt = (
            select(ActivityModel)
            .where(ActivityModel.project_id == project_id)
            .order_by(ActivityModel.occurred_at, ActivityModel.id)
        )
        with self._writing("activity.read"):
            models = self.session.execute(stmt).scalars().all()
        return tuple(m.to_dto() for m in models)
