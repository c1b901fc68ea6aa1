"""
NSSP - Syndromic surveillance views

Descriptive statistics over NSSP emergency-department records (date,
pathogen, state, percent of ED visits): daily and period prevalence, burden
rankings, and state vs national comparisons, built as DuckDB views for a BI
dashboard and as polars engines for in-process analysis.

Usage:
    from nssp import SQLOrchestrator, engines, load_config, load_observations

    config = load_config("nssp.yaml")
    observations = load_observations(config)

    with SQLOrchestrator() as orchestrator:
        orchestrator.load_observations(observations)
        orchestrator.run_all()
        top = orchestrator.query("v_top_pathogen_daily_national")

    national = engines.daily_national(observations)
"""

__version__ = "0.1.0"

from . import engines
from .config import NsspConfig, SourceConfig, ExportConfig, load_config
from .exceptions import NsspError, IngestError, StageError, UnknownViewError
from .ingest import load_observations, normalize, read_source
from .sql import SQLOrchestrator, STAGES
from .validation import reconcile, ReconcileResult

__all__ = [
    "__version__",
    "engines",
    "NsspConfig",
    "SourceConfig",
    "ExportConfig",
    "load_config",
    "NsspError",
    "IngestError",
    "StageError",
    "UnknownViewError",
    "load_observations",
    "normalize",
    "read_source",
    "SQLOrchestrator",
    "STAGES",
    "reconcile",
    "ReconcileResult",
]
