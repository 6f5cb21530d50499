"""
sitephase_batch -- per-item isolated batch runs and the engine's public entry point.

``SitePhaseOrchestrator`` exposes the phase progression job, draw due-date
synchronization and the metrics calculator.
"""

from sitephase_batch.orchestrator import SitePhaseOrchestrator

__all__ = ["SitePhaseOrchestrator"]
