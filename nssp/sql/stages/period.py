"""
Period Stage - SQL only

ISO epidemiological weeks and calendar years, nationally and per state.
"""

from .base import StageOrchestrator


class PeriodStage(StageOrchestrator):
    """Weekly and yearly prevalence."""

    SQL_FILE = '03_period.sql'

    VIEWS = [
        'v_weekly_pathogen_national',  # yearweek, week_start
        'v_weekly_state_pathogen',
        'v_yearly_pathogen_national',
        'v_state_yearly_pathogen',     # Input to v_state_yearly_rank
    ]

    DEPENDS_ON = ['observations']
