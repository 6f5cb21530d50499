"""
Module: sitephase_kernel.models.schedule_snapshot
Responsibility: ORM persistence for project schedule snapshots.
Architecture position: Kernel > Models.

Each save of a project's schedule appends a new snapshot row carrying the
whole entry list as a JSON blob.  Snapshots are never edited in place.

Invariants enforced:
    - (project_id, revision) is unique; revisions increase by one per save.
    - The effective schedule is the snapshot with the highest revision.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from sitephase_kernel.db.base import Base, UUIDString
from sitephase_kernel.domain.schedule import Schedule


class ScheduleSnapshotModel(Base):
    """One saved version of a project's schedule."""

    __tablename__ = "project_schedules"

    __table_args__ = (
        UniqueConstraint("project_id", "revision", name="uq_schedule_revision"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=False,
        index=True,
    )

    revision: Mapped[int] = mapped_column(Integer, nullable=False)

    # List of entry objects: name, startDate/endDate (or start_date/end_date),
    # workdays (or duration_days)
    schedule_data: Mapped[list[Any]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ScheduleSnapshot project={self.project_id} rev={self.revision}>"

    def to_schedule(self) -> Schedule:
        """Validated, start-date ordered view of this snapshot."""
        return Schedule.from_snapshot(self.schedule_data, project_id=self.project_id)
