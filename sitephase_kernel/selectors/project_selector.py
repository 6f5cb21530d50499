"""
Module: sitephase_kernel.selectors.project_selector
Responsibility: Read-only queries over projects -- single lookups and the
    candidate set for the phase progression job.
Architecture position: Kernel > Selectors.
"""

from __future__ import annotations

from typing import Iterable
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from sitephase_kernel.domain.phases import TERMINAL_PHASE
from sitephase_kernel.domain.types import ELIGIBLE_PROJECT_STATUSES, ProjectInfo
from sitephase_kernel.exceptions import ProjectEnumerationError, ProjectNotFoundError
from sitephase_kernel.models.project import ProjectModel
from sitephase_kernel.selectors.base import BaseSelector


class ProjectSelector(BaseSelector[ProjectModel]):
    """Read-only project queries returning ``ProjectInfo`` DTOs."""

    def get(self, project_id: UUID) -> ProjectInfo | None:
        with self._reading("project.get"):
            model = self.session.get(ProjectModel, project_id)
        return model.to_dto() if model is not None else None

    def get_or_raise(self, project_id: UUID) -> ProjectInfo:
        """
        Raises:
            ProjectNotFoundError: no project with ``project_id``.
            TransientStoreError: the read failed.
        """
        project = self.get(project_id)
        if project is None:
            raise ProjectNotFoundError(str(project_id))
        return project

    def list_progression_candidates(
        self,
        statuses: Iterable[str] | None = None,
        terminal_phase: str = TERMINAL_PHASE,
    ) -> tuple[ProjectInfo, ...]:
        """Projects in an eligible status whose phase is not terminal.

        Projects with no phase yet are included; the decision step treats
        them as a no-op.

        Raises:
            ProjectEnumerationError: the candidate set could not be listed.
        """
        wanted = [
            getattr(s, "value", s)
            for s in (statuses if statuses is not None else ELIGIBLE_PROJECT_STATUSES)
        ]
        stmt = (
            select(ProjectModel)
            .where(ProjectModel.status.in_(wanted))
            .where(
                or_(
                    ProjectModel.phase.is_(None),
                    ProjectModel.phase != terminal_phase,
                )
            )
            .order_by(ProjectModel.created_at, ProjectModel.id)
        )
        try:
            models = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise ProjectEnumerationError(str(exc)) from exc
        return tuple(m.to_dto() for m in models)
