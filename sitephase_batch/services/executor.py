"""
BatchExecutor -- SAVEPOINT-per-item batch execution.

Contract:
    ``run()`` resolves a registered task, lists its items, and executes each
    item inside its own SAVEPOINT, collecting one ``BatchItemResult`` per
    item.

Invariants enforced:
    - SAVEPOINT isolation per item: one failure neither aborts the run nor
      leaves a partial write behind.
    - Only a failure to list the items is fatal; it propagates to the
      caller unchanged (``ProjectEnumerationError`` for the progression
      task).
    - The evaluated day is injected; timestamps come from the Clock.

Concurrency:
    No locking.  The scheduler invoking the executor guarantees at most one
    concurrent run per task.
"""

from __future__ import annotations

import time
from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from sitephase_batch.domain.types import (
    BatchItemResult,
    BatchItemStatus,
    BatchRunResult,
    BatchRunStatus,
)
from sitephase_batch.tasks.base import BatchItemInput, BatchTask, TaskRegistry
from sitephase_kernel.domain.clock import Clock, SystemClock
from sitephase_kernel.exceptions import SitePhaseError
from sitephase_kernel.logging_config import LogContext, get_logger

logger = get_logger("batch.executor")


class BatchExecutor:
    """Batch execution engine with SAVEPOINT-per-item isolation.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT retry items -- the caller may rerun the whole task.
    """

    def __init__(
        self,
        session: Session,
        task_registry: TaskRegistry,
        clock: Clock | None = None,
    ):
        self._session = session
        self._task_registry = task_registry
        self._clock = clock or SystemClock()

    def run(
        self,
        task_type: str,
        as_of: date,
        parameters: dict[str, Any] | None = None,
        correlation_id: str | None = None,
    ) -> BatchRunResult:
        """Execute ``task_type`` for the day ``as_of``.

        Raises:
            TaskNotRegisteredError: If task_type is not registered.
            Exception: whatever ``prepare_items`` raised (fatal).
        """
        task = self._task_registry.get(task_type)
        params = parameters or {}

        with LogContext.bind(
            job_name=task_type, correlation_id=correlation_id, as_of=as_of,
        ):
            return self._run(task, as_of, params, correlation_id)

    def _run(
        self,
        task: BatchTask,
        as_of: date,
        params: dict[str, Any],
        correlation_id: str | None,
    ) -> BatchRunResult:
        start_time = time.monotonic()
        started_at = self._clock.now()

        logger.info("batch_run_started", extra={"task_type": task.task_type})

        try:
            items = task.prepare_items(
                parameters=params, session=self._session, as_of=as_of,
            )
        except Exception:
            logger.error(
                "batch_prepare_failed",
                extra={"task_type": task.task_type},
                exc_info=True,
            )
            raise

        succeeded = 0
        failed = 0
        skipped = 0
        item_results: list[BatchItemResult] = []

        for batch_item in items:
            result = self._execute_item(task, batch_item, params, as_of)
            if result.status == BatchItemStatus.SUCCEEDED:
                succeeded += 1
            elif result.status == BatchItemStatus.SKIPPED:
                skipped += 1
            else:
                failed += 1
            item_results.append(result)

        if failed == 0:
            status = BatchRunStatus.COMPLETED
        elif succeeded == 0 and skipped == 0:
            status = BatchRunStatus.FAILED
        else:
            status = BatchRunStatus.PARTIALLY_COMPLETED

        completed_at = self._clock.now()
        total_duration = int((time.monotonic() - start_time) * 1000)

        logger.info(
            "batch_run_completed",
            extra={
                "task_type": task.task_type,
                "status": status.value,
                "total_items": len(items),
                "succeeded": succeeded,
                "failed": failed,
                "skipped": skipped,
                "duration_ms": total_duration,
            },
        )

        return BatchRunResult(
            task_type=task.task_type,
            status=status,
            total_items=len(items),
            succeeded=succeeded,
            failed=failed,
            skipped=skipped,
            item_results=tuple(item_results),
            started_at=started_at,
            completed_at=completed_at,
            duration_ms=total_duration,
            correlation_id=correlation_id,
        )

    def _execute_item(
        self,
        task: BatchTask,
        batch_item: BatchItemInput,
        params: dict[str, Any],
        as_of: date,
    ) -> BatchItemResult:
        item_start = time.monotonic()
        item_started_at = self._clock.now()

        savepoint = self._session.begin_nested()
        try:
            result = task.execute_item(
                item=batch_item,
                parameters=params,
                session=self._session,
                as_of=as_of,
            )
        except Exception as exc:
            savepoint.rollback()
            logger.error(
                "batch_item_failed",
                extra={"item_key": batch_item.item_key},
                exc_info=True,
            )
            return BatchItemResult(
                item_index=batch_item.item_index,
                item_key=batch_item.item_key,
                status=BatchItemStatus.FAILED,
                error_code=(
                    exc.code if isinstance(exc, SitePhaseError) else "UNHANDLED_EXCEPTION"
                ),
                error_message=str(exc),
                duration_ms=int((time.monotonic() - item_start) * 1000),
                started_at=item_started_at,
                completed_at=self._clock.now(),
            )

        if result.status == BatchItemStatus.SUCCEEDED:
            savepoint.commit()
        else:
            savepoint.rollback()
            if result.status == BatchItemStatus.FAILED:
                logger.warning(
                    "batch_item_failed",
                    extra={
                        "item_key": batch_item.item_key,
                        "error_code": result.error_code,
                    },
                )

        return BatchItemResult(
            item_index=batch_item.item_index,
            item_key=batch_item.item_key,
            status=result.status,
            error_code=result.error_code,
            error_message=result.error_message,
            result_data=result.result_data,
            duration_ms=int((time.monotonic() - item_start) * 1000),
            started_at=item_started_at,
            completed_at=self._clock.now(),
        )
