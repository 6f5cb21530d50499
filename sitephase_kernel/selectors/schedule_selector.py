"""
Module: sitephase_kernel.selectors.schedule_selector
Responsibility: Load a project's effective schedule -- the snapshot with the
    highest revision -- as a validated, start-date ordered ``Schedule``.
Architecture position: Kernel > Selectors.

A project without any snapshot has no schedule; ``latest_schedule`` returns
None rather than raising.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import distinct, select

from sitephase_kernel.domain.schedule import Schedule, ScheduleEntry
from sitephase_kernel.models.schedule_snapshot import ScheduleSnapshotModel
from sitephase_kernel.selectors.base import BaseSelector


class ScheduleSelector(BaseSelector[ScheduleSnapshotModel]):
    """Read access to schedule snapshots."""

    def _latest_snapshots(self, project_id: UUID, limit: int) -> list[ScheduleSnapshotModel]:
        stmt = (
            select(ScheduleSnapshotModel)
            .where(ScheduleSnapshotModel.project_id == project_id)
            .order_by(ScheduleSnapshotModel.revision.desc())
            .limit(limit)
        )
        with self._reading("schedule.latest"):
            return list(self.session.execute(stmt).scalars().all())

    def latest_schedule(self, project_id: UUID) -> Schedule | None:
        snapshots = self._latest_snapshots(project_id, 1)
        if not snapshots:
            return None
        return snapshots[0].to_schedule()

    def entries(self, project_id: UUID) -> tuple[ScheduleEntry, ...]:
        """Ordered entries of the effective schedule; empty when none exists."""
        schedule = self.latest_schedule(project_id)
        return schedule.entries if schedule is not None else ()

    def latest_raw_pair(
        self, project_id: UUID,
    ) -> tuple[list[Any] | None, list[Any] | None]:
        """Raw blobs of the previous and latest snapshots, oldest first."""
        snapshots = self._latest_snapshots(project_id, 2)
        latest = snapshots[0].schedule_data if snapshots else None
        previous = snapshots[1].schedule_data if len(snapshots) > 1 else None
        return previous, latest

    def latest_revision(self, project_id: UUID) -> int:
        snapshots = self._latest_snapshots(project_id, 1)
        return snapshots[0].revision if snapshots else 0

    def projects_with_schedule(self) -> tuple[UUID, ...]:
        stmt = select(distinct(ScheduleSnapshotModel.project_id)).order_by(
            ScheduleSnapshotModel.project_id,
        )
        with self._reading("schedule.projects"):
            return tuple(self.session.execute(stmt).scalars().all())
