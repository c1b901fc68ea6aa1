"""
SQL / Engine Reconciliation

Recompute the core views with the polars engines and compare them with the
DuckDB views built from the same observations.

Usage:
    results = reconcile(orchestrator, observations)
    failed = [r for r in results if not r.ok]
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import polars as pl

from nssp.engines import VIEW_BUILDERS

logger = logging.getLogger(__name__)

# Absolute tolerance on averaged prevalence
ATOL = 1e-9


@dataclass
class ReconcileResult:
    view: str
    ok: bool
    rows: int
    detail: str = ""


def compare_frames(sql: pl.DataFrame, engine: pl.DataFrame) -> Optional[str]:
    """
    Compare two relations as row sets.

    Returns None when they match, otherwise a short description.
    """
    if sql.columns != engine.columns:
        return f"columns differ: sql={sql.columns} engine={engine.columns}"
    if sql.height != engine.height:
        return f"row counts differ: sql={sql.height} engine={engine.height}"

    # Order-independent: both sides sorted on every column
    sql = sql.sort(sql.columns)
    engine = engine.sort(engine.columns)
    for name in sql.columns:
        left, right = sql[name], engine[name]
        if left.dtype.is_float() or right.dtype.is_float():
            if not left.is_null().equals(right.is_null()):
                return f"{name}: null positions differ"
            diff = (left.cast(pl.Float64) - right.cast(pl.Float64)).abs().max()
            if diff is not None and diff > ATOL:
                return f"{name}: max abs difference {diff}"
        elif not left.equals(right, check_dtypes=False):
            return f"{name}: values differ"
    return None


def reconcile(orchestrator, observations: pl.DataFrame, views: Optional[List[str]] = None) -> List[ReconcileResult]:
    """
    Compare SQL views with their engine counterparts.

    Args:
        orchestrator: SQLOrchestrator with all stages run over `observations`
        observations: Normalized observations frame
        views: Views to check (default: every view with an engine builder)

    Returns:
        One ReconcileResult per view
    """
    results = []
    for view in views or list(VIEW_BUILDERS):
        sql = orchestrator.query(view)
        engine = VIEW_BUILDERS[view](observations)
        detail = compare_frames(sql, engine)
        result = ReconcileResult(view=view, ok=detail is None, rows=sql.height, detail=detail or "")
        if result.ok:
            logger.info(f"{view}: {result.rows:,} rows match")
        else:
            logger.warning(f"{view}: {detail}")
        results.append(result)
    return results
