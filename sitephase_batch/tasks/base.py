"""
BatchTask protocol, supporting types, and TaskRegistry.

Contract:
    ``BatchTask`` defines the interface every batch task must implement.
    ``TaskRegistry`` stores registered tasks keyed by ``task_type``.

Invariants enforced:
    - One task per ``task_type`` string.
    - Tasks never commit; the executor owns the SAVEPOINT around each item.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol, runtime_checkable

from sqlalchemy.orm import Session

from sitephase_batch.domain.types import BatchItemStatus
from sitephase_kernel.exceptions import TaskNotRegisteredError


# =============================================================================
# Supporting DTOs
# =============================================================================


@dataclass(frozen=True)
class BatchItemInput:
    """Input specification for a single batch item.

    Created by ``BatchTask.prepare_items()``.
    """

    item_index: int
    item_key: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchTaskResult:
    """Result returned by ``BatchTask.execute_item()``."""

    status: BatchItemStatus
    result_data: dict[str, Any] | None = None
    error_code: str | None = None
    error_message: str | None = None


# =============================================================================
# BatchTask Protocol
# =============================================================================


@runtime_checkable
class BatchTask(Protocol):
    """Protocol defining the interface for batch task implementations.

    Contract:
        - ``task_type``: unique string key registered in TaskRegistry.
        - ``description``: human-readable label.
        - ``prepare_items()``: lists the items; a failure here is fatal to
          the run.
        - ``execute_item()``: processes ONE item within a SAVEPOINT.

    Non-goals:
        - Does NOT manage transactions -- the executor owns SAVEPOINTs.
        - Does NOT retry -- the caller may rerun the whole task.
    """

    @property
    def task_type(self) -> str: ...

    @property
    def description(self) -> str: ...

    def prepare_items(
        self,
        parameters: dict[str, Any],
        session: Session,
        as_of: date,
    ) -> tuple[BatchItemInput, ...]:
        """Query eligible items for this run.

        Args:
            parameters: Run-level parameters.
            session: Database session for querying eligible records.
            as_of: The day being evaluated (injected, never a wall clock read).
        """
        ...

    def execute_item(
        self,
        item: BatchItemInput,
        parameters: dict[str, Any],
        session: Session,
        as_of: date,
    ) -> BatchTaskResult:
        """Execute a single item within a SAVEPOINT."""
        ...


# =============================================================================
# TaskRegistry
# =============================================================================


class TaskRegistry:
    """Registry mapping task_type strings to BatchTask implementations.

    Contract:
        - ``register()`` adds a task; raises ValueError on duplicate.
        - ``get()`` retrieves by task_type; raises TaskNotRegisteredError if
          missing.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, BatchTask] = {}

    def register(self, task: BatchTask) -> None:
        """Register a batch task implementation.

        Raises:
            ValueError: If a task with the same task_type is already registered.
        """
        if task.task_type in self._tasks:
            raise ValueError(
                f"Task type '{task.task_type}' is already registered"
            )
        self._tasks[task.task_type] = task

    def get(self, task_type: str) -> BatchTask:
        try:
            return self._tasks[task_type]
        except KeyError:
            raise TaskNotRegisteredError(task_type, self.list_tasks()) from None

    def list_tasks(self) -> tuple[str, ...]:
        """Return all registered task_type strings, sorted."""
        return tuple(sorted(self._tasks.keys()))

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_type: str) -> bool:
        return task_type in self._tasks
