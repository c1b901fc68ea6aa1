"""
Base Stage Orchestrator

Each stage:
  1. Runs its SQL file (sql/{NN}_{stage}.sql)
  2. Creates the views (v_*) listed in VIEWS
  3. Reads only the base table and the views of the stages in DEPENDS_ON
"""

import logging
from pathlib import Path
from typing import List, Optional

import duckdb
import polars as pl

from nssp.exceptions import StageError, UnknownViewError

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).parent.parent / 'sql'

# Query filters -> candidate column names, first match wins
FILTER_COLUMNS = {
    'pathogen': ['pathogen'],
    'state': ['state', 'top_state', 'geography'],
}


def view_columns(conn: duckdb.DuckDBPyConnection, view_name: str) -> List[str]:
    """Column names of a view, in order."""
    return [d[0] for d in conn.execute(f"SELECT * FROM {view_name} LIMIT 0").description]


def select_view(
    conn: duckdb.DuckDBPyConnection,
    view_name: str,
    pathogen: Optional[str] = None,
    state: Optional[str] = None,
    limit: Optional[int] = None,
) -> pl.DataFrame:
    """
    SELECT from a view with optional equality filters.

    The view name must already be validated against the stage registry;
    filter values are bound as parameters.
    """
    columns = view_columns(conn, view_name)
    clauses, params = [], []
    for key, value in (('pathogen', pathogen), ('state', state)):
        if value is None:
            continue
        column = next((c for c in FILTER_COLUMNS[key] if c in columns), None)
        if column is None:
            raise ValueError(f"View {view_name} has no {key} column to filter on")
        clauses.append(f"{column} = ?")
        params.append(value)

    sql = f"SELECT * FROM {view_name}"
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY ALL"
    if limit is not None:
        sql += f" LIMIT {int(limit)}"

    return conn.execute(sql, params).pl()


class StageOrchestrator:
    """
    Base class for stage orchestrators.

    Each stage:
    1. Has a SQL file (sql/{SQL_FILE})
    2. Creates views (v_*) from SQL
    3. Depends on the views of earlier stages
    """

    # Override in subclass
    SQL_FILE: str = None
    VIEWS: List[str] = []
    DEPENDS_ON: List[str] = []

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        """
        Initialize with database connection.

        Args:
            conn: DuckDB connection (shared across all stages)
        """
        self.conn = conn
        self._sql_dir = SQL_DIR
        self._loaded = False

    @property
    def sql_path(self) -> Path:
        """Path to this stage's SQL file."""
        if self.SQL_FILE is None:
            raise NotImplementedError(f"{self.__class__.__name__} must define SQL_FILE")
        return self._sql_dir / self.SQL_FILE

    def load_sql(self) -> str:
        """Load SQL from file. No modification."""
        return self.sql_path.read_text()

    def run(self) -> None:
        """Execute this stage's SQL."""
        sql = self.load_sql()
        try:
            self.conn.execute(sql)
        except duckdb.Error as e:
            raise StageError(f"SQL execution failed in {self.SQL_FILE}: {e}") from e

        logger.info(f"{self.__class__.__name__}: {len(self.VIEWS)} views")
        self._loaded = True

    def get_views(self) -> List[str]:
        """Return list of views this stage creates."""
        return self.VIEWS.copy()

    def get_dependencies(self) -> List[str]:
        """Return list of views this stage depends on."""
        return self.DEPENDS_ON.copy()

    def validate(self) -> bool:
        """
        Validate all views exist.

        Returns True if all views are queryable.
        """
        for view in self.VIEWS:
            try:
                self.conn.execute(f"SELECT 1 FROM {view} LIMIT 0")
            except duckdb.Error:
                return False
        return True

    def query(self, view_name: str, **filters) -> pl.DataFrame:
        """
        Query a view by name.

        Args:
            view_name: Name of view (must be in self.VIEWS)
            **filters: pathogen, state, limit (see select_view)

        Returns:
            DataFrame
        """
        if view_name not in self.VIEWS:
            raise UnknownViewError(f"View {view_name} not in {self.__class__.__name__}.VIEWS")
        return select_view(self.conn, view_name, **filters)

    def __repr__(self):
        status = "loaded" if self._loaded else "not loaded"
        return f"<{self.__class__.__name__} [{status}] views={len(self.VIEWS)}>"
