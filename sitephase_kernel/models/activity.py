"""
Module: sitephase_kernel.models.activity
Responsibility: ORM persistence for the project activity log.
Architecture position: Kernel > Models.

Invariants enforced:
    - Append-only: no UPDATE or DELETE (ORM listeners in
      db/immutability.py raise ImmutabilityViolationError).
    - Rows are only created as a side effect of a phase transition.

Consumers:
    The notification layer reads new rows; nothing in this package does.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sitephase_kernel.db.base import Base, UUIDString
from sitephase_kernel.domain.types import ActivityRecord


class ActivityModel(Base):
    """One immutable activity log entry."""

    __tablename__ = "activities"

    __table_args__ = (
        Index("idx_activity_project_time", "project_id", "occurred_at"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=False,
    )

    # Denormalized for the notification layer
    project_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Activity {self.activity_type} project={self.project_id}>"

    def to_dto(self) -> ActivityRecord:
        """Convert ORM model to frozen domain DTO."""
        return ActivityRecord(
            activity_id=self.id,
            project_id=self.project_id,
            activity_type=self.activity_type,
            title=self.title,
            description=self.description,
            occurred_at=self.occurred_at,
            project_name=self.project_name,
        )
