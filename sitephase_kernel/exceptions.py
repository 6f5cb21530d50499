"""
Typed exception hierarchy for the sitephase engine.

Every error carries a machine-readable ``code`` class attribute and the
structured fields that produced it, so callers catch by type and log by
field rather than parsing messages.

    SitePhaseError (base)
    |
    +-- ScheduleError
    |   +-- ScheduleEntryInvariantError
    |
    +-- StoreError
    |   +-- TransientStoreError
    |   +-- ProjectEnumerationError
    |   +-- ProjectNotFoundError
    |
    +-- ImmutabilityViolationError
    |
    +-- BatchError
    |   +-- TaskNotRegisteredError
    |
    +-- ConfigurationError

Absent schedules, unknown phase names and similar gaps are NOT exceptions.
They are logged no-ops reported through result objects.  Only
``ProjectEnumerationError`` is allowed to escape a batch run.
"""


class SitePhaseError(Exception):
    """
    Base exception for all sitephase errors.

    All subclasses must have a `code` class attribute.
    """

    code: str = "SITEPHASE_ERROR"


# Schedule-related exceptions


class ScheduleError(SitePhaseError):
    """Base exception for schedule data errors."""

    code: str = "SCHEDULE_ERROR"


class ScheduleEntryInvariantError(ScheduleError):
    """A schedule entry violates a structural invariant (e.g. end before start)."""

    code: str = "SCHEDULE_ENTRY_INVARIANT"

    def __init__(self, entry_name: str, reason: str):
        self.entry_name = entry_name
        self.reason = reason
        super().__init__(f"Invalid schedule entry {entry_name!r}: {reason}")


# Store-related exceptions


class StoreError(SitePhaseError):
    """Base exception for datastore failures."""

    code: str = "STORE_ERROR"


class TransientStoreError(StoreError):
    """A read or write against the datastore failed; the caller may retry."""

    code: str = "TRANSIENT_STORE_ERROR"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Store operation {operation} failed: {detail}")


class ProjectEnumerationError(StoreError):
    """The candidate project set could not be listed at all."""

    code: str = "PROJECT_ENUMERATION_FAILED"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Could not enumerate projects: {detail}")


class ProjectNotFoundError(StoreError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


# Persistence rules


class ImmutabilityViolationError(SitePhaseError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Batch exceptions


class BatchError(SitePhaseError):
    """Base exception for batch processing errors."""

    code: str = "BATCH_ERROR"


class TaskNotRegisteredError(BatchError):
    """Requested task type is not in the task registry."""

    code: str = "TASK_NOT_REGISTERED"

    def __init__(self, task_type: str, available: tuple[str, ...] = ()):
        self.task_type = task_type
        self.available = available
        super().__init__(
            f"Task type not registered: {task_type}. "
            f"Available: {', '.join(available) or '(none)'}"
        )


# Configuration


class ConfigurationError(SitePhaseError):
    """Settings file or settings values are invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for {key}: {reason}")
