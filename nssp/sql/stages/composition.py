"""
Composition Stage - SQL only

State vs national comparison, and the cascading top pathogen / top state.
"""

from .base import StageOrchestrator


class CompositionStage(StageOrchestrator):
    """Comparison join and cascading top-1."""

    SQL_FILE = '05_composition.sql'

    VIEWS = [
        'v_state_vs_national_daily',      # Inner join on (date, pathogen)
        'v_top_pathogen_daily_national',  # One row per date, more under ties
    ]

    DEPENDS_ON = [
        'v_daily_state_pathogen',
        'v_daily_pathogen_national',
        'v_state_burden_rank_daily',
        'v_pathogen_rank_daily_national',
    ]
