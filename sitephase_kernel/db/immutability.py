"""
ORM-level append-only enforcement for the activity log.

Activity entries are written once by the phase progression job and are
consumed by the notification layer.  They are never edited or deleted.
SQLAlchemy fires ``before_update`` / ``before_delete`` mapper events before
the SQL reaches the database; the listeners below raise
``ImmutabilityViolationError`` there, which aborts the flush.

    session.flush()
         |
         v
    [before_update] --> _check_activity_immutability() --> ImmutabilityViolationError
    [before_delete] --> _check_activity_delete() ---------> ImmutabilityViolationError

Bulk ``session.execute(update(...))`` statements bypass mapper events; the
services never issue them against the activity table.
"""

from sqlalchemy import event

from sitephase_kernel.exceptions import ImmutabilityViolationError
from sitephase_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_activity_immutability(mapper, connection, target):
    """Prevent any updates to ActivityModel records."""
    from sitephase_kernel.models.activity import ActivityModel

    if not isinstance(target, ActivityModel):
        return

    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "Activity",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="Activity",
        entity_id=str(target.id),
        reason="Activity log entries are append-only and cannot be modified",
    )


def _check_activity_delete(mapper, connection, target):
    """Prevent deletion of ActivityModel records."""
    from sitephase_kernel.models.activity import ActivityModel

    if not isinstance(target, ActivityModel):
        return

    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "Activity",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="Activity",
        entity_id=str(target.id),
        reason="Activity log entries cannot be deleted",
    )


def register_immutability_listeners():
    """
    Register append-only enforcement listeners.

    Call during application initialization, after models are imported and
    before any database operations begin.  Safe to call more than once.
    """
    from sitephase_kernel.models.activity import ActivityModel

    if not event.contains(ActivityModel, "before_update", _check_activity_immutability):
        event.listen(ActivityModel, "before_update", _check_activity_immutability)
    if not event.contains(ActivityModel, "before_delete", _check_activity_delete):
        event.listen(ActivityModel, "before_delete", _check_activity_delete)


def unregister_immutability_listeners():
    """
    Remove the append-only listeners.

    WARNING: Only use this in tests.
    """
    from sitephase_kernel.models.activity import ActivityModel

    for event_name, listener_fn in (
        ("before_update", _check_activity_immutability),
        ("before_delete", _check_activity_delete),
    ):
        if event.contains(ActivityModel, event_name, listener_fn):
            event.remove(ActivityModel, event_name, listener_fn)
