"""
Tests for grain and period reducers.

Validates:
    1. National prevalence is the unweighted mean of state prevalence
    2. Missing values are skipped; all-missing keys produce no row
    3. ISO week keys at year boundaries
    4. Period means and period start dates
"""

from datetime import date

import polars as pl
import pytest

from nssp.engines import (
    daily_national,
    daily_state,
    epi_week_key,
    weekly_national,
    weekly_state,
    yearly_national,
    yearly_state,
)


# ─────────────────────────────────────────────────────────────────────
# Grain reducers
# ─────────────────────────────────────────────────────────────────────

class TestGrainReducers:

    def test_two_state_national_mean(self, make_observations):
        obs = make_observations([
            ("2023-12-01", "RSV", "Alaska", 5.0),
            ("2023-12-01", "RSV", "Texas", 7.0),
        ])
        national = daily_national(obs)
        assert national.columns == ["nssp_date", "pathogen", "nat_prevalence"]
        assert national.height == 1
        assert national["nat_prevalence"][0] == pytest.approx(6.0)

    def test_national_is_mean_of_states(self, observations):
        national = daily_national(observations)
        state = daily_state(observations)
        from_states = (
            state.group_by(["nssp_date", "pathogen"])
            .agg(pl.col("state_prevalence").mean().alias("expected"))
        )
        joined = national.join(from_states, on=["nssp_date", "pathogen"])
        assert joined.height == national.height == 4
        for row in joined.iter_rows(named=True):
            assert row["nat_prevalence"] == pytest.approx(row["expected"])

    def test_state_grain_is_noop_on_unique_keys(self, observations):
        state = daily_state(observations)
        assert state.columns == ["nssp_date", "state", "pathogen", "state_prevalence"]
        assert state.height == observations.height
        texas = state.filter(
            (pl.col("state") == "Texas")
            & (pl.col("pathogen") == "RSV")
            & (pl.col("nssp_date") == date(2023, 12, 1))
        )
        assert texas["state_prevalence"][0] == 7.0

    def test_duplicates_are_averaged(self, make_observations):
        obs = make_observations([
            ("2023-12-01", "RSV", "Texas", 4.0),
            ("2023-12-01", "RSV", "Texas", 6.0),
        ])
        state = daily_state(obs)
        assert state.height == 1
        assert state["state_prevalence"][0] == pytest.approx(5.0)

    def test_missing_values_skipped(self, make_observations):
        obs = make_observations([
            ("2023-12-01", "RSV", "Alaska", 5.0),
            ("2023-12-01", "RSV", "Texas", None),
            ("2023-12-01", "COVID", "Texas", None),
        ])
        national = daily_national(obs)
        # COVID has no numeric value at all: no row
        assert national["pathogen"].to_list() == ["RSV"]
        assert national["nat_prevalence"][0] == pytest.approx(5.0)

    def test_empty_input_gives_empty_output(self, make_observations):
        obs = make_observations([])
        assert daily_national(obs).height == 0
        assert daily_state(obs).height == 0

    def test_idempotent(self, observations):
        assert daily_national(observations).equals(daily_national(observations))


# ─────────────────────────────────────────────────────────────────────
# Epidemiological week keys
# ─────────────────────────────────────────────────────────────────────

class TestEpiWeekKey:

    @pytest.mark.parametrize("day, expected", [
        (date(2023, 12, 1), 202348),
        (date(2024, 1, 1), 202401),    # Monday
        (date(2024, 12, 29), 202452),  # Sunday closes the week
        (date(2024, 12, 30), 202501),  # Monday of a week whose Thursday is in 2025
        (date(2021, 1, 3), 202053),    # Sunday still in 2020's last week
        (date(2020, 12, 31), 202053),
        (date(2021, 1, 4), 202101),
    ])
    def test_iso_boundaries(self, day, expected):
        df = pl.DataFrame({"nssp_date": [day]})
        assert df.select(epi_week_key().alias("k"))["k"][0] == expected

    def test_monday_starts_week(self):
        days = [date(2023, 11, 26), date(2023, 11, 27)]  # Sunday, Monday
        df = pl.DataFrame({"nssp_date": days})
        keys = df.select(epi_week_key().alias("k"))["k"].to_list()
        assert keys == [202347, 202348]


# ─────────────────────────────────────────────────────────────────────
# Period reducers
# ─────────────────────────────────────────────────────────────────────

class TestPeriodReducers:

    def test_weekly_national(self, observations):
        weekly = weekly_national(observations)
        assert weekly.columns == ["yearweek", "week_start", "pathogen", "nat_prevalence"]
        rsv = weekly.filter(pl.col("pathogen") == "RSV")
        assert rsv["yearweek"][0] == 202348
        assert rsv["week_start"][0] == date(2023, 12, 1)
        assert rsv["nat_prevalence"][0] == pytest.approx(3.0)

    def test_weekly_is_mean_of_daily_when_days_equally_weighted(self, observations):
        weekly = weekly_national(observations)
        daily = daily_national(observations)
        for pathogen in ["RSV", "COVID"]:
            expected = daily.filter(pl.col("pathogen") == pathogen)["nat_prevalence"].mean()
            got = weekly.filter(pl.col("pathogen") == pathogen)["nat_prevalence"][0]
            assert got == pytest.approx(expected)

    def test_week_split_across_year(self, make_observations):
        obs = make_observations([
            ("2024-12-29", "RSV", "Texas", 2.0),
            ("2024-12-30", "RSV", "Texas", 4.0),
            ("2025-01-02", "RSV", "Texas", 6.0),
        ])
        weekly = weekly_state(obs)
        assert weekly["yearweek"].to_list() == [202452, 202501]
        assert weekly["week_start"].to_list() == [date(2024, 12, 29), date(2024, 12, 30)]
        assert weekly["state_prevalence"].to_list() == pytest.approx([2.0, 5.0])

    def test_yearly_uses_calendar_year(self, make_observations):
        obs = make_observations([
            ("2024-12-30", "RSV", "Texas", 4.0),
            ("2025-01-02", "RSV", "Texas", 6.0),
        ])
        yearly = yearly_state(obs)
        assert yearly.columns == ["year", "pathogen", "state", "mean_prevalence", "year_start"]
        assert yearly["year"].to_list() == [2024, 2025]
        assert yearly_national(obs)["nat_prevalence"].to_list() == pytest.approx([4.0, 6.0])
