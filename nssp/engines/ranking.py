"""
Rankers

RANK semantics within a partition: tied values share a rank and the next
distinct value skips by the size of the tie (1, 1, 1, 4). Order among tied
entities is unspecified; their rank values are not.
"""

from typing import List, Optional

import polars as pl


def rank_within(
    df: pl.DataFrame,
    partition_by: List[str],
    value: str,
    high: Optional[str] = "rnk_high",
    low: Optional[str] = "rnk_low",
) -> pl.DataFrame:
    """
    Add descending and ascending ranks of `value` within each partition.

    Args:
        df: Frame with `partition_by` columns and `value`
        partition_by: Partition columns (empty = rank the whole frame)
        value: Column to rank; must not contain nulls
        high: Name of the descending rank (1 = maximum), None to skip
        low: Name of the ascending rank (1 = minimum), None to skip

    Returns:
        `df` with the rank columns appended
    """
    def _rank(descending: bool) -> pl.Expr:
        expr = pl.col(value).rank(method="min", descending=descending).cast(pl.Int64)
        return expr.over(partition_by) if partition_by else expr

    ranks = []
    if high:
        ranks.append(_rank(True).alias(high))
    if low:
        ranks.append(_rank(False).alias(low))
    return df.with_columns(ranks)


def keep_top(df: pl.DataFrame, n: int = 1, rank_column: str = "rnk_high") -> pl.DataFrame:
    """Rows ranked within the first `n`; ties at the cut are all kept."""
    return df.filter(pl.col(rank_column) <= n)


def state_yearly_rank(yearly_state: pl.DataFrame) -> pl.DataFrame:
    """Rank states within each (year, pathogen) by mean prevalence."""
    return rank_within(
        yearly_state.select(["year", "pathogen", "state", "mean_prevalence"]),
        ["year", "pathogen"],
        "mean_prevalence",
    ).sort(["year", "pathogen", "rnk_high", "state"])


def state_burden_rank_daily(daily_state: pl.DataFrame) -> pl.DataFrame:
    """Daily league table: rank states within each (date, pathogen)."""
    return rank_within(
        daily_state.select(["nssp_date", "pathogen", "state", "state_prevalence"]),
        ["nssp_date", "pathogen"],
        "state_prevalence",
    ).sort(["nssp_date", "pathogen", "rnk_high", "state"])


def pathogen_rank_daily(daily_national: pl.DataFrame) -> pl.DataFrame:
    """Rank pathogens within each date by national prevalence."""
    return rank_within(
        daily_national,
        ["nssp_date"],
        "nat_prevalence",
    ).sort(["nssp_date", "rnk_high", "pathogen"])
