"""
NSSP Engines

Pure polars transformations over the observations frame. Each builder takes
the normalized observations and returns the rows of the view of the same
name in the SQL layer.

Usage:
    from nssp import engines

    national = engines.daily_national(observations)
    ranks = engines.rank_within(national, ["nssp_date"], "nat_prevalence")
"""

from typing import Callable, Dict

import polars as pl

from .grain import reduce_grain, daily_national, daily_state
from .period import (
    epi_week_key,
    year_key,
    reduce_period,
    weekly_national,
    weekly_state,
    yearly_national,
    yearly_state,
)
from .ranking import (
    rank_within,
    keep_top,
    state_yearly_rank,
    state_burden_rank_daily,
    pathogen_rank_daily,
)
from .compose import state_vs_national, top_pathogen_daily


# View name -> builder over the observations frame
VIEW_BUILDERS: Dict[str, Callable[[pl.DataFrame], pl.DataFrame]] = {
    'v_daily_pathogen_national': daily_national,
    'v_daily_state_pathogen': daily_state,
    'v_weekly_pathogen_national': weekly_national,
    'v_weekly_state_pathogen': weekly_state,
    'v_yearly_pathogen_national': yearly_national,
    'v_state_yearly_pathogen': yearly_state,
    'v_state_yearly_rank': lambda obs: state_yearly_rank(yearly_state(obs)),
    'v_state_burden_rank_daily': lambda obs: state_burden_rank_daily(daily_state(obs)),
    'v_pathogen_rank_daily_national': lambda obs: pathogen_rank_daily(daily_national(obs)),
    'v_state_vs_national_daily': lambda obs: state_vs_national(daily_state(obs), daily_national(obs)),
    'v_top_pathogen_daily_national': top_pathogen_daily,
}

__all__ = [
    "VIEW_BUILDERS",
    "reduce_grain",
    "daily_national",
    "daily_state",
    "epi_week_key",
    "year_key",
    "reduce_period",
    "weekly_national",
    "weekly_state",
    "yearly_national",
    "yearly_state",
    "rank_within",
    "keep_top",
    "state_yearly_rank",
    "state_burden_rank_daily",
    "pathogen_rank_daily",
    "state_vs_national",
    "top_pathogen_daily",
]
