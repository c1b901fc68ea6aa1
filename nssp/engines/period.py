"""
Period Reducers

Re-bucket observations into epidemiological weeks or calendar years.

Epidemiological weeks follow ISO 8601: weeks start on Monday and a week
belongs to the year containing its Thursday. The key is iso_year * 100 +
iso_week, so 2024-12-30 falls in 202501 and 2021-01-03 in 202053.

The period mean is taken over the raw rows of the period, matching the
weekly and yearly views. period_start is the earliest date of the period
that is present in the data, not the calendar start of the period.
"""

from typing import List

import polars as pl

from .grain import PRECISION, VALUE


def epi_week_key(column: str = "nssp_date") -> pl.Expr:
    """ISO year-week key, e.g. 202348 for the 48th ISO week of 2023."""
    date = pl.col(column)
    return date.dt.iso_year().cast(pl.Int64) * 100 + date.dt.week().cast(pl.Int64)


def year_key(column: str = "nssp_date") -> pl.Expr:
    """Calendar year key."""
    return pl.col(column).dt.year().cast(pl.Int64)


def reduce_period(
    observations: pl.DataFrame,
    key: pl.Expr,
    key_name: str,
    keys: List[str],
    alias: str,
    start_name: str,
    value: str = VALUE,
) -> pl.DataFrame:
    """
    Mean of `value` per (period, *keys) with the first observed date.

    Args:
        observations: Frame with nssp_date, `keys` and `value`
        key: Expression mapping nssp_date to the period key
        key_name: Output name of the period key
        keys: Remaining grouping columns
        alias: Name of the mean column
        start_name: Name of the period start column

    Returns:
        Columns: key_name, start_name, *keys, alias
    """
    return (
        observations
        .filter(pl.col(value).is_not_null())
        .with_columns(key.alias(key_name))
        .group_by([key_name] + keys)
        .agg(
            pl.col("nssp_date").min().alias(start_name),
            pl.col(value).mean().round(PRECISION).alias(alias),
        )
        .select([key_name, start_name] + keys + [alias])
        .sort([key_name] + keys)
    )


def weekly_national(observations: pl.DataFrame) -> pl.DataFrame:
    """Columns: yearweek, week_start, pathogen, nat_prevalence"""
    return reduce_period(
        observations, epi_week_key(), "yearweek", ["pathogen"],
        alias="nat_prevalence", start_name="week_start",
    )


def weekly_state(observations: pl.DataFrame) -> pl.DataFrame:
    """Columns: yearweek, week_start, state, pathogen, state_prevalence"""
    return reduce_period(
        observations.rename({"geography": "state"}), epi_week_key(), "yearweek",
        ["state", "pathogen"], alias="state_prevalence", start_name="week_start",
    )


def yearly_national(observations: pl.DataFrame) -> pl.DataFrame:
    """Columns: year, year_start, pathogen, nat_prevalence"""
    return reduce_period(
        observations, year_key(), "year", ["pathogen"],
        alias="nat_prevalence", start_name="year_start",
    )


def yearly_state(observations: pl.DataFrame) -> pl.DataFrame:
    """Columns: year, pathogen, state, mean_prevalence, year_start"""
    return reduce_period(
        observations.rename({"geography": "state"}), year_key(), "year",
        ["pathogen", "state"], alias="mean_prevalence", start_name="year_start",
    ).select(["year", "pathogen", "state", "mean_prevalence", "year_start"])
