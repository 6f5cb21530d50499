"""
Module: sitephase_kernel.selectors.invoice_selector
Responsibility: Read-only invoice queries for the metrics calculator.
Architecture position: Kernel > Selectors.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from sitephase_kernel.domain.types import InvoiceInfo
from sitephase_kernel.models.invoice import InvoiceModel
from sitephase_kernel.selectors.base import BaseSelector


class InvoiceSelector(BaseSelector[InvoiceModel]):
    def for_project(self, project_id: UUID) -> tuple[InvoiceInfo, ...]:
        stmt = (
            select(InvoiceModel)
            .where(InvoiceModel.project_id == project_id)
            .order_by(InvoiceModel.invoice_number)
        )
        with self._reading("invoice.for_project"):
            models = self.session.execute(stmt).scalars().all()
        return tuple(m.to_dto() for m in models)
