"""
Sanity Stage - SQL only

Row count, date range, state/pathogen cardinality, missing values, and
duplicated (date, pathogen, geography) keys.
"""

from .base import StageOrchestrator


class SanityStage(StageOrchestrator):
    """Dataset summary and key uniqueness."""

    SQL_FILE = '01_sanity.sql'

    VIEWS = [
        'v_dataset_summary',   # One row: counts and date range
        'v_duplicate_keys',    # Keys reported more than once
    ]

    DEPENDS_ON = ['observations']

    def get_summary(self) -> dict:
        """Dataset summary as a dict (empty if the view has no row)."""
        rows = self.query('v_dataset_summary').to_dicts()
        return rows[0] if rows else {}
