"""Every sitephase error carries a stable code and its structured fields."""

import pytest

from sitephase_kernel.exceptions import (
    BatchError,
    ConfigurationError,
    ImmutabilityViolationError,
    ProjectEnumerationError,
    ProjectNotFoundError,
    ScheduleEntryInvariantError,
    SitePhaseError,
    StoreError,
    TaskNotRegisteredError,
    TransientStoreError,
)


@pytest.mark.parametrize(
    "exc, code, parent",
    [
        (ScheduleEntryInvariantError("Paint", "end before start"), "SCHEDULE_ENTRY_INVARIANT", SitePhaseError),
        (TransientStoreError("projects.get", "locked"), "TRANSIENT_STORE_ERROR", StoreError),
        (ProjectEnumerationError("db down"), "PROJECT_ENUMERATION_FAILED", StoreError),
        (ProjectNotFoundError("p-1"), "PROJECT_NOT_FOUND", StoreError),
        (ImmutabilityViolationError("Activity", "a-1", "append-only"), "IMMUTABILITY_VIOLATION", SitePhaseError),
        (TaskNotRegisteredError("x", ("a", "b")), "TASK_NOT_REGISTERED", BatchError),
        (ConfigurationError("log_level", "unknown"), "CONFIGURATION_ERROR", SitePhaseError),
    ],
)
def test_codes_and_hierarchy(exc, code, parent):
    assert exc.code == code
    assert isinstance(exc, parent)
    assert isinstance(exc, SitePhaseError)


def test_messages_carry_fields():
    assert "Paint" in str(ScheduleEntryInvariantError("Paint", "end before start"))
    assert "a, b" in str(TaskNotRegisteredError("x", ("a", "b")))
    assert "(none)" in str(TaskNotRegisteredError("x"))
    assert ProjectNotFoundError("p-1").project_id == "p-1"
