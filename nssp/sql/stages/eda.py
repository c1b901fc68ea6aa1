"""
EDA Stage - SQL only

Flat daily views for export into notebooks and spreadsheets.
"""

from .base import StageOrchestrator


class EdaStage(StageOrchestrator):
    """Exploratory exports."""

    SQL_FILE = '06_eda.sql'

    VIEWS = [
        'v_eda_daily_pathogen',
        'v_eda_daily_state_pathogen',
    ]

    DEPENDS_ON = ['v_daily_pathogen_national', 'v_daily_state_pathogen']
