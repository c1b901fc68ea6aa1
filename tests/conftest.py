"""
Shared fixtures: small hand-computable observation sets.

Default dataset (ISO week 202348, both days):

    date        pathogen  Alaska  Texas  Ohio   national
    2023-12-01  RSV        5.0     7.0    3.0    5.0
    2023-12-01  COVID      2.0     2.0    8.0    4.0
    2023-12-02  RSV        1.0     1.0    1.0    1.0
    2023-12-02  COVID      4.0     6.0    2.0    4.0
"""

from datetime import date

import polars as pl
import pytest

from nssp.sql.orchestrator import SQLOrchestrator


def _build_frame(rows):
    """rows: (iso date, pathogen, geography, percent_visits) tuples."""
    return pl.DataFrame(
        {
            "reg": [str(i + 1) for i in range(len(rows))],
            "nssp_date": [date.fromisoformat(r[0]) for r in rows],
            "pathogen": [r[1] for r in rows],
            "geography": [r[2] for r in rows],
            "percent_visits": [r[3] for r in rows],
            "other_visits": [None if r[3] is None else 100.0 - r[3] for r in rows],
        },
        schema={
            "reg": pl.String,
            "nssp_date": pl.Date,
            "pathogen": pl.String,
            "geography": pl.String,
            "percent_visits": pl.Float64,
            "other_visits": pl.Float64,
        },
    )


DEFAULT_ROWS = [
    ("2023-12-01", "RSV", "Alaska", 5.0),
    ("2023-12-01", "RSV", "Texas", 7.0),
    ("2023-12-01", "RSV", "Ohio", 3.0),
    ("2023-12-01", "COVID", "Alaska", 2.0),
    ("2023-12-01", "COVID", "Texas", 2.0),
    ("2023-12-01", "COVID", "Ohio", 8.0),
    ("2023-12-02", "RSV", "Alaska", 1.0),
    ("2023-12-02", "RSV", "Texas", 1.0),
    ("2023-12-02", "RSV", "Ohio", 1.0),
    ("2023-12-02", "COVID", "Alaska", 4.0),
    ("2023-12-02", "COVID", "Texas", 6.0),
    ("2023-12-02", "COVID", "Ohio", 2.0),
]


@pytest.fixture
def make_observations():
    """Factory: build an observations frame from tuples."""
    return _build_frame


@pytest.fixture
def observations():
    return _build_frame(DEFAULT_ROWS)


@pytest.fixture
def orchestrator(observations):
    """In-memory orchestrator with every stage run over `observations`."""
    orch = SQLOrchestrator()
    orch.load_observations(observations)
    orch.run_all()
    yield orch
    orch.close()
