"""
sitephase_kernel.domain.types -- Frozen DTOs for projects, invoices and activities.

ZERO I/O.  ORM rows convert to these via ``to_dto()``; every pure function in
the domain layer takes and returns these types, never ORM instances.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class ProjectStatus(str, Enum):
    """Project lifecycle status as stored by the project-management screens."""

    PLANNING = "Planning"
    ACTIVE = "Active"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# Statuses the phase progression job considers.
ELIGIBLE_PROJECT_STATUSES: tuple[ProjectStatus, ...] = (
    ProjectStatus.PLANNING,
    ProjectStatus.ACTIVE,
    ProjectStatus.IN_PROGRESS,
)


class InvoiceStatus(str, Enum):
    """Invoice status values the engine reads.  Other values pass through."""

    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"


@dataclass(frozen=True)
class ProjectInfo:
    """Immutable snapshot of a project row.

    ``phase`` is None or "" for a project that has not entered the taxonomy
    yet.  ``progress`` is the stored integer 0-100 or None when unset.
    """

    project_id: UUID
    name: str
    status: str
    phase: str | None = None
    progress: int | None = None
    start_date: date | None = None
    estimated_completion: date | None = None
    budget: Decimal = Decimal("0")
    permit_approved_at: datetime | None = None


@dataclass(frozen=True)
class InvoiceInfo:
    """Immutable snapshot of an invoice (draw) row."""

    invoice_id: UUID
    project_id: UUID
    invoice_number: str
    status: str
    total: Decimal = Decimal("0")
    due_date: date | None = None


@dataclass(frozen=True)
class ActivityRecord:
    """Immutable snapshot of an activity log entry."""

    activity_id: UUID
    project_id: UUID
    activity_type: str
    title: str
    description: str
    occurred_at: datetime
    project_name: str | None = None
