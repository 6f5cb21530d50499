"""
Module: sitephase_kernel.models.project
Responsibility: ORM persistence for construction projects.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/types.py only.

Mutation rules:
    - ``phase``, ``progress`` and ``updated_at`` are written by the phase
      progression job (PhaseTransitionService).
    - Every other column belongs to the project-management screens.
    - ``permit_approved_at`` is set externally when the permit clears; the
      draw synchronizer reads it as the Draw 1 due date.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from sitephase_kernel.db.base import TrackedBase
from sitephase_kernel.domain.types import ProjectInfo, ProjectStatus


class ProjectModel(TrackedBase):
    """A construction project and its automation-owned phase state."""

    __tablename__ = "projects"

    __table_args__ = (
        Index("idx_project_status_phase", "status", "phase"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=ProjectStatus.PLANNING.value,
    )

    # Taxonomy phase name; NULL or "" before the project enters the taxonomy
    phase: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Stored completion percentage 0-100
    progress: Mapped[int | None] = mapped_column(Integer, nullable=True)

    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    estimated_completion: Mapped[date | None] = mapped_column(Date, nullable=True)

    budget: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0"),
    )

    permit_approved_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Project {self.name} status={self.status} phase={self.phase}>"

    def to_dto(self) -> ProjectInfo:
        """Convert ORM model to frozen domain DTO."""
        return ProjectInfo(
            project_id=self.id,
            name=self.name,
            status=self.status,
            phase=self.phase,
            progress=self.progress,
            start_date=self.start_date,
            estimated_completion=self.estimated_completion,
            budget=self.budget if self.budget is not None else Decimal("0"),
            permit_approved_at=self.permit_approved_at,
        )
