"""
Module: sitephase_kernel.models.invoice
Responsibility: ORM persistence for project invoices (payment draws).
Architecture position: Kernel > Models.

Invoices are created by the external invoicing flow.  The draw synchronizer
mutates ``due_date`` only; every other column is read-only here.  Draw
identity lives in ``invoice_number`` (e.g. "INV-0042 Draw 4").
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from sitephase_kernel.db.base import TrackedBase, UUIDString
from sitephase_kernel.domain.types import InvoiceInfo, InvoiceStatus


class InvoiceModel(TrackedBase):
    """A draw invoice belonging to one project."""

    __tablename__ = "invoices"

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=False,
        index=True,
    )

    invoice_number: Mapped[str] = mapped_column(String(100), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=InvoiceStatus.DRAFT.value,
    )

    total: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0"),
    )

    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<Invoice {self.invoice_number} status={self.status} due={self.due_date}>"

    def to_dto(self) -> InvoiceInfo:
        """Convert ORM model to frozen domain DTO."""
        return InvoiceInfo(
            invoice_id=self.id,
            project_id=self.project_id,
            invoice_number=self.invoice_number,
            status=self.status,
            total=self.total if self.total is not None else Decimal("0"),
            due_date=self.due_date,
        )
