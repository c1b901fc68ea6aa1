"""
Grain Reducers

Collapse raw observations to one row per (date, pathogen[, state]) with the
mean percent_visits of that key, rounded to PRECISION decimals. Rows without
a numeric value are skipped, so a key whose values are all missing produces
no row at all.
"""

from typing import List

import polars as pl

VALUE = "percent_visits"

# Decimal places kept on every mean; equal averages then tie exactly
PRECISION = 9


def reduce_grain(
    observations: pl.DataFrame,
    keys: List[str],
    alias: str = "prevalence",
    value: str = VALUE,
) -> pl.DataFrame:
    """
    Mean of `value` per key.

    Args:
        observations: Frame containing `keys` and `value`
        keys: Grouping columns (also the output column order)
        alias: Name of the mean column
        value: Column to average

    Returns:
        One row per key present in the data, sorted by key
    """
    return (
        observations
        .filter(pl.col(value).is_not_null())
        .group_by(keys)
        .agg(pl.col(value).mean().round(PRECISION).alias(alias))
        .sort(keys)
    )


def daily_national(observations: pl.DataFrame) -> pl.DataFrame:
    """
    National daily prevalence per pathogen.

    Unweighted mean of the state percentages reported that day; states are
    not weighted by ED visit volume.

    Columns: nssp_date, pathogen, nat_prevalence
    """
    return reduce_grain(observations, ["nssp_date", "pathogen"], alias="nat_prevalence")


def daily_state(observations: pl.DataFrame) -> pl.DataFrame:
    """
    Daily prevalence per state and pathogen.

    A no-op average when the extract is already at this grain.

    Columns: nssp_date, state, pathogen, state_prevalence
    """
    return reduce_grain(
        observations.rename({"geography": "state"}),
        ["nssp_date", "state", "pathogen"],
        alias="state_prevalence",
    )
