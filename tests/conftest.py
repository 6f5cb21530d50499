"""
Pytest fixtures for the sitephase test suite.

Provides:
- In-memory SQLite sessions with every table created (SAVEPOINT-capable)
- A DeterministicClock
- Project / schedule / invoice builders
- Structured log capture
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from io import StringIO
from typing import Any, Iterable
from uuid import UUID

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from sitephase_kernel.db.base import Base
from sitephase_kernel.db.engine import enable_sqlite_savepoints
from sitephase_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from sitephase_kernel.domain.clock import DeterministicClock
from sitephase_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from sitephase_kernel.models import (
    ActivityModel,
    InvoiceModel,
    ProjectModel,
    ScheduleSnapshotModel,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture sitephase logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.run_phase_progression(date(2024, 1, 2))
            logs = captured_logs()
            assert any(r["message"] == "phase_transition_applied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("sitephase")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables."""
    eng = create_engine("sqlite:///:memory:")
    enable_sqlite_savepoints(eng)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    db = SessionLocal()
    register_immutability_listeners()
    try:
        yield db
    finally:
        db.rollback()
        db.close()
        unregister_immutability_listeners()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(fixed_time=datetime(2024, 1, 2, 6, 0, 0))


# =============================================================================
# Builders
# =============================================================================


@pytest.fixture
def make_project(session):
    """Insert a project and return its id."""

    def _make(
        *,
        name: str = "Smith Residence",
        status: str = "Active",
        phase: str | None = "Framing Crew",
        progress: int | None = None,
        start_date: date | None = date(2024, 1, 1),
        estimated_completion: date | None = date(2024, 7, 1),
        budget: Decimal | str = Decimal("100000"),
        permit_approved_at: datetime | None = None,
    ) -> UUID:
        project = ProjectModel(
            name=name,
            status=status,
            phase=phase,
            progress=progress,
            start_date=start_date,
            estimated_completion=estimated_completion,
            budget=Decimal(budget),
            permit_approved_at=permit_approved_at,
        )
        session.add(project)
        session.flush()
        return project.id

    return _make


@pytest.fixture
def add_schedule(session):
    """Append a raw schedule snapshot for a project and return its revision."""

    def _add(project_id: UUID, entries: Iterable[dict[str, Any]], revision: int | None = None) -> int:
        if revision is None:
            existing = (
                session.query(ScheduleSnapshotModel)
                .filter(ScheduleSnapshotModel.project_id == project_id)
                .count()
            )
            revision = existing + 1
        session.add(
            ScheduleSnapshotModel(
                project_id=project_id,
                revision=revision,
                schedule_data=list(entries),
                created_at=datetime(2024, 1, 1, 8, 0, 0),
            )
        )
        session.flush()
        return revision

    return _add


@pytest.fixture
def make_invoice(session):
    """Insert an invoice and return its id."""

    def _make(
        project_id: UUID,
        invoice_number: str,
        *,
        status: str = "Sent",
        total: Decimal | str = Decimal("1000"),
        due_date: date | None = None,
    ) -> UUID:
        invoice = InvoiceModel(
            project_id=project_id,
            invoice_number=invoice_number,
            status=status,
            total=Decimal(total),
            due_date=due_date,
        )
        session.add(invoice)
        session.flush()
        return invoice.id

    return _make


@pytest.fixture
def activities(session):
    """Return the activity rows for a project, oldest first."""

    def _get(project_id: UUID) -> list[ActivityModel]:
        return (
            session.query(ActivityModel)
            .filter(ActivityModel.project_id == project_id)
            .order_by(ActivityModel.occurred_at)
            .all()
        )

    return _get


def entry(name: str, start: str, end: str | None = None, workdays: int | None = None) -> dict:
    """Schedule blob element in the schedule builder's camelCase form."""
    raw: dict[str, Any] = {"name": name, "startDate": start}
    if end is not None:
        raw["endDate"] = end
    if workdays is not None:
        raw["workdays"] = workdays
    return raw
