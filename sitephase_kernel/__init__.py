"""
sitephase kernel

Schedule-driven construction phase and payment-milestone reconciliation:
- Phase taxonomy and forward-only phase progression
- Draw (payment milestone) due dates kept in step with the work schedule
- Read-only progress and payment metrics
- Append-only activity log for automatic phase transitions
"""

__version__ = "0.1.0"
