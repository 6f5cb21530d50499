"""ORM models for the sitephase kernel."""

from sitephase_kernel.models.activity import ActivityModel
from sitephase_kernel.models.invoice import InvoiceModel
from sitephase_kernel.models.project import ProjectModel
from sitephase_kernel.models.schedule_snapshot import ScheduleSnapshotModel

__all__ = [
    "ProjectModel",
    "ScheduleSnapshotModel",
    "InvoiceModel",
    "ActivityModel",
]
