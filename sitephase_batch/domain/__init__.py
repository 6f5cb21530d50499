"""Frozen batch DTOs."""

from sitephase_batch.domain.types import (
    BatchItemResult,
    BatchItemStatus,
    BatchRunResult,
    BatchRunStatus,
    PhaseProgressionResult,
    ProjectError,
    ScheduleChangeReport,
)

__all__ = [
    "BatchItemStatus",
    "BatchRunStatus",
    "BatchItemResult",
    "BatchRunResult",
    "ProjectError",
    "PhaseProgressionResult",
    "ScheduleChangeReport",
]
