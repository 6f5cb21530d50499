"""Batch execution services."""

from sitephase_batch.services.executor import BatchExecutor

__all__ = ["BatchExecutor"]
