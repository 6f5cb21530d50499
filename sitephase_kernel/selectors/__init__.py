"""Read-only selectors (query side)."""

from sitephase_kernel.selectors.base import BaseSelector
from sitephase_kernel.selectors.invoice_selector import InvoiceSelector
from sitephase_kernel.selectors.project_selector import ProjectSelector
from sitephase_kernel.selectors.schedule_selector import ScheduleSelector

__all__ = [
    "BaseSelector",
    "ProjectSelector",
    "ScheduleSelector",
    "InvoiceSelector",
]
