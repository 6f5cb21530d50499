"""Batch task protocol, registry and task implementations."""

from sitephase_batch.tasks.base import (
    BatchItemInput,
    BatchTask,
    BatchTaskResult,
    TaskRegistry,
)
from sitephase_batch.tasks.draw_tasks import DrawDueDateSyncTask
from sitephase_batch.tasks.progression_tasks import PhaseProgressionTask

__all__ = [
    "BatchItemInput",
    "BatchTask",
    "BatchTaskResult",
    "TaskRegistry",
    "PhaseProgressionTask",
    "DrawDueDateSyncTask",
]
