"""Write-side kernel services.  Services flush; callers commit."""

from sitephase_kernel.services.activity_service import ActivityLogService
from sitephase_kernel.services.base import BaseService
from sitephase_kernel.services.draw_sync_service import DrawDueDateSyncService
from sitephase_kernel.services.phase_transition_service import PhaseTransitionService
from sitephase_kernel.services.schedule_snapshot_service import ScheduleSnapshotService

__all__ = [
    "BaseService",
    "ActivityLogService",
    "ScheduleSnapshotService",
    "PhaseTransitionService",
    "DrawDueDateSyncService",
]
