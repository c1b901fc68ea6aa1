"""DuckDB view layer: stage orchestrators and the pipeline orchestrator."""

from .orchestrator import SQLOrchestrator, STAGES

__all__ = ["SQLOrchestrator", "STAGES"]
