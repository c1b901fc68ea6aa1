"""
Grain Stage - SQL only

Daily prevalence per (date, pathogen) nationally and per (date, state, pathogen).
"""

from .base import StageOrchestrator


class GrainStage(StageOrchestrator):
    """Daily national and state prevalence."""

    SQL_FILE = '02_grain.sql'

    VIEWS = [
        'v_daily_pathogen_national',  # Unweighted mean across states
        'v_daily_state_pathogen',     # One row per state-day-pathogen
    ]

    DEPENDS_ON = ['observations']
