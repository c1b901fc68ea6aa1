"""
Composers

Comparison join of state and national series, and the cascading top-1:
top pathogen nationally per day, then the top state for that pathogen.
"""

import polars as pl

from .grain import daily_national, daily_state
from .ranking import keep_top, pathogen_rank_daily, state_burden_rank_daily

KEY = ["nssp_date", "pathogen"]


def state_vs_national(state: pl.DataFrame, national: pl.DataFrame) -> pl.DataFrame:
    """
    Pair each state's daily prevalence with the national value.

    Inner join on (nssp_date, pathogen); a state row without a national
    counterpart is dropped.

    Columns: nssp_date, pathogen, state, state_prevalence, nat_prevalence
    """
    return (
        state
        .join(national, on=KEY, how="inner")
        .select(["nssp_date", "pathogen", "state", "state_prevalence", "nat_prevalence"])
        .sort(["nssp_date", "pathogen", "state"])
    )


def top_pathogen_daily(observations: pl.DataFrame) -> pl.DataFrame:
    """
    Dominant pathogen per day and the state with the highest burden for it.

    Ties fan out at both steps: two pathogens tied for the national top both
    appear, and so does every state tied for the top within a pathogen.

    Columns: nssp_date, pathogen, nat_prevalence, top_state, top_state_prevalence
    """
    top_pathogen = keep_top(pathogen_rank_daily(daily_national(observations)))
    top_state = keep_top(state_burden_rank_daily(daily_state(observations)))

    return (
        top_pathogen.select(KEY + ["nat_prevalence"])
        .join(
            top_state.select(KEY + ["state", "state_prevalence"]),
            on=KEY,
            how="inner",
        )
        .rename({"state": "top_state", "state_prevalence": "top_state_prevalence"})
        .sort(["nssp_date", "pathogen", "top_state"])
    )
