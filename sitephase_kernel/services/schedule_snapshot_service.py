"""
ScheduleSnapshotService -- append a new revision of a project's schedule.

Responsibility:
    Storage seam for the external schedule builder.  Each call writes a new
    snapshot row with the next revision number; earlier snapshots stay as
    they are so schedule changes can be described later.

Architecture position:
    Kernel > Services.  The service does not validate trade content --
    schedule authoring is external.  Invalid entries are stored verbatim and
    skipped when the schedule is read.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Mapping
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from sitephase_kernel.domain.clock import Clock, SystemClock
from sitephase_kernel.domain.schedule import ScheduleEntry
from sitephase_kernel.logging_config import get_logger
from sitephase_kernel.models.schedule_snapshot import ScheduleSnapshotModel
from sitephase_kernel.services.base import BaseService

logger = get_logger("services.schedule_snapshot")


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def entry_to_blob(entry: ScheduleEntry | Mapping[str, Any]) -> dict[str, Any]:
    """Snapshot blob form of an entry (dates as ISO strings)."""
    if isinstance(entry, ScheduleEntry):
        return {
            "name": entry.name,
            "start_date": entry.start_date.isoformat(),
            "end_date": entry.end_date.isoformat() if entry.end_date else None,
            "duration_days": entry.duration_days,
        }
    return {str(k): _jsonable(v) for k, v in entry.items()}


class ScheduleSnapshotService(BaseService[ScheduleSnapshotModel]):
    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def record_snapshot(
        self,
        project_id: UUID,
        entries: Iterable[ScheduleEntry | Mapping[str, Any]],
    ) -> int:
        """
        Store ``entries`` as the project's newest schedule.

        Returns:
            The new revision number (1 for the first snapshot).

        Raises:
            TransientStoreError: the read of the current revision or the
                insert failed.
        """
        blob = [entry_to_blob(e) for e in entries]
        with self._writing("schedule_snapshot.insert"):
            current = self.session.execute(
                select(func.max(ScheduleSnapshotModel.revision)).where(
                    ScheduleSnapshotModel.project_id == project_id,
                )
            ).scalar_one_or_none()
            revision = (current or 0) + 1
            self.session.add(
                ScheduleSnapshotModel(
                    project_id=project_id,
                    revision=revision,
                    schedule_data=blob,
                    created_at=self._clock.now(),
                )
            )
            self.session.flush()

        logger.info(
            "schedule_snapshot_recorded",
            extra={
                "project_id": str(project_id),
                "revision": revision,
                "entry_count": len(blob),
            },
        )
        return revision
