"""
Load Stage - base table only

Materializes the normalized observations frame as the `observations` table.
Every other stage reads from it; nothing writes to it afterwards.
"""

import logging
from typing import Optional

import duckdb
import polars as pl

from nssp.exceptions import StageError
from .base import StageOrchestrator

logger = logging.getLogger(__name__)

BASE_TABLE = 'observations'


class LoadStage(StageOrchestrator):
    """Base table from the normalized extract."""

    VIEWS = []

    def load_observations(self, observations: pl.DataFrame) -> None:
        """Replace the base table with `observations`."""
        self.conn.register("_observations_df", observations)
        try:
            self.conn.execute(f"CREATE OR REPLACE TABLE {BASE_TABLE} AS SELECT * FROM _observations_df")
        finally:
            self.conn.unregister("_observations_df")
        logger.info(f"Loaded {self.get_row_count():,} rows into {BASE_TABLE}")

    def get_row_count(self) -> Optional[int]:
        try:
            return self.conn.execute(f"SELECT COUNT(*) FROM {BASE_TABLE}").fetchone()[0]
        except duckdb.CatalogException:
            return None

    def run(self) -> None:
        """Nothing to create; checks that the base table is present."""
        if self.get_row_count() is None:
            raise StageError(f"Base table {BASE_TABLE} not loaded. Call load_observations() first.")
        self._loaded = True

    def validate(self) -> bool:
        return self.get_row_count() is not None
