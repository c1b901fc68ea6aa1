"""
Ranking Stage - SQL only

RANK() of states per pathogen-year and per pathogen-day, and of pathogens
per day nationally.
"""

from .base import StageOrchestrator


class RankingStage(StageOrchestrator):
    """Burden rankings (rnk_high / rnk_low)."""

    SQL_FILE = '04_ranking.sql'

    VIEWS = [
        'v_state_yearly_rank',             # Partition: year x pathogen
        'v_state_burden_rank_daily',       # Partition: date x pathogen
        'v_pathogen_rank_daily_national',  # Partition: date
    ]

    DEPENDS_ON = [
        'v_state_yearly_pathogen',
        'v_daily_state_pathogen',
        'v_daily_pathogen_national',
    ]

    def league_table(self, pathogen: str, top_n: int = 3):
        """Top `top_n` states per day for one pathogen (ties at the cut kept)."""
        return self.conn.execute(
            """
            SELECT nssp_date, state, state_prevalence, rnk_high
            FROM v_state_burden_rank_daily
            WHERE pathogen = ? AND rnk_high <= ?
            ORDER BY nssp_date, rnk_high, state
            """,
            [pathogen, top_n],
        ).pl()
