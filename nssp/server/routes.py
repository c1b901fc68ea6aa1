"""
NSSP API Routes
===============

Read-only HTTP endpoints over a DuckDB database built by `nssp run`.

    uvicorn nssp.server.routes:app        # NSSP_DATABASE=nssp.duckdb
"""

import os

from fastapi import FastAPI, HTTPException, Query
from typing import Optional

from nssp import __version__
from nssp.exceptions import UnknownViewError
from nssp.sql.orchestrator import STAGES, SQLOrchestrator
from nssp.sql.stages import select_view

DEFAULT_DATABASE = "nssp.duckdb"
MAX_ROWS = 10000


def create_app(database: str) -> FastAPI:
    """
    Build the API for one database file.

    The database is opened read-only on first use; each request reads
    through its own cursor.
    """
    app = FastAPI(
        title="NSSP",
        description="Syndromic surveillance prevalence and ranking views",
        version=__version__,
    )
    app.state.database = database
    app.state.orchestrator = None

    def orchestrator() -> SQLOrchestrator:
        if app.state.orchestrator is None:
            if not os.path.exists(app.state.database):
                raise HTTPException(status_code=503, detail=f"Database not found: {app.state.database}")
            app.state.orchestrator = SQLOrchestrator(app.state.database, read_only=True)
        return app.state.orchestrator

    @app.get("/health")
    def health():
        """Health check."""
        return {
            "status": "ok",
            "version": __version__,
            "database": app.state.database,
        }

    @app.get("/views")
    def list_views():
        """Views per stage."""
        return {name: stage_class.VIEWS for name, stage_class in STAGES if stage_class.VIEWS}

    @app.get("/summary")
    def summary():
        """Row count, date range and cardinalities of the base table."""
        orch = orchestrator()
        rows = select_view(orch.conn.cursor(), "v_dataset_summary").to_dicts()
        return rows[0] if rows else {}

    @app.get("/views/{view_name}")
    def read_view(
        view_name: str,
        pathogen: Optional[str] = None,
        state: Optional[str] = None,
        limit: int = Query(default=1000, ge=1, le=MAX_ROWS),
    ):
        """
        Rows of one view, ordered by all columns.

        Query:
            pathogen: Keep one pathogen
            state: Keep one state (top_state for the top-pathogen view)
            limit: Maximum rows
        """
        orch = orchestrator()
        try:
            orch.stage_for_view(view_name)
            df = select_view(orch.conn.cursor(), view_name, pathogen=pathogen, state=state, limit=limit)
        except UnknownViewError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return {
            "view": view_name,
            "rows": df.height,
            "columns": df.columns,
            "data": df.to_dicts(),
        }

    return app


app = create_app(os.environ.get("NSSP_DATABASE", DEFAULT_DATABASE))
