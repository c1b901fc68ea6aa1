"""
NSSP Ingestion
==============

Read the raw NSSP extract and normalize it into the observations schema.

Output Schema:
    reg            | String   | Row identifier
    nssp_date      | Date     | Observation day (ED visit day)
    pathogen       | String   | Pathogen/syndrome label (RSV, COVID, ...)
    geography      | String   | State name
    percent_visits | Float64  | % of ED visits with this pathogen
    other_visits   | Float64  | % of ED visits without this pathogen

The extract stores dates as DD-MM-YY text (02-12-23). Parquet extracts that
already carry a Date column are passed through.

Usage:
    from nssp.ingest import load_observations
    observations = load_observations(config)
"""

import logging
from pathlib import Path
from typing import Union

import polars as pl

from nssp.config.schema import (
    DEFAULT_DATE_FORMAT,
    SOURCE_COLUMNS,
    NsspConfig,
    SourceConfig,
)
from nssp.exceptions import IngestError

logger = logging.getLogger(__name__)

OBSERVATION_SCHEMA = {
    "reg": pl.String,
    "nssp_date": pl.Date,
    "pathogen": pl.String,
    "geography": pl.String,
    "percent_visits": pl.Float64,
    "other_visits": pl.Float64,
}

REQUIRED_COLUMNS = ["nssp_date", "pathogen", "geography", "percent_visits"]

# Offending identifiers listed in an IngestError message
MAX_REPORTED_ROWS = 10


def detect_format(path: Path) -> str:
    """Pick csv or parquet from the file extension."""
    if path.suffix.lower() in (".parquet", ".pq"):
        return "parquet"
    return "csv"


def read_source(path: Union[str, Path], source: SourceConfig) -> pl.DataFrame:
    """
    Read the extract without any type coercion.

    CSV columns are read as text so that date and numeric parsing happen in
    one place (normalize). Header names are lower-cased and stripped.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Source not found: {path}")

    fmt = source.format if source.format != "auto" else detect_format(path)
    logger.info(f"Reading {fmt}: {path}")

    if fmt == "parquet":
        df = pl.read_parquet(path)
    elif source.has_header:
        df = pl.read_csv(path, infer_schema=False)
    else:
        df = pl.read_csv(path, has_header=False, infer_schema=False)
        if df.width != len(SOURCE_COLUMNS):
            raise IngestError(
                f"Expected {len(SOURCE_COLUMNS)} positional columns, found {df.width}"
            )
        df = df.rename(dict(zip(df.columns, SOURCE_COLUMNS)))

    return df.rename({c: c.strip().lower() for c in df.columns})


def _parse_dates(df: pl.DataFrame, date_format: str) -> pl.DataFrame:
    dtype = df.schema["nssp_date"]
    if dtype == pl.Date:
        return df
    if isinstance(dtype, pl.Datetime):
        return df.with_columns(pl.col("nssp_date").dt.date())
    return df.with_columns(
        pl.col("nssp_date")
        .cast(pl.String)
        .str.strip_chars()
        .str.to_date(date_format, strict=False)
        .alias("nssp_date")
    )


def _to_float(name: str) -> pl.Expr:
    # Non-numeric text becomes null and is skipped by every average
    return (
        pl.col(name)
        .cast(pl.String)
        .str.strip_chars()
        .cast(pl.Float64, strict=False)
        .alias(name)
    )


def normalize(
    df: pl.DataFrame,
    date_format: str = DEFAULT_DATE_FORMAT,
    on_bad_dates: str = "raise",
) -> pl.DataFrame:
    """
    Coerce a raw extract into the observations schema.

    Args:
        df: Raw frame from read_source
        date_format: strftime format for text dates
        on_bad_dates: 'raise' to reject the load, 'drop' to discard bad rows

    Returns:
        DataFrame with OBSERVATION_SCHEMA columns, in that order

    Raises:
        IngestError: Missing columns, or unparseable dates with on_bad_dates='raise'
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise IngestError(f"Missing required columns: {missing}")

    if "reg" not in df.columns:
        df = df.with_row_index("reg", offset=1)
    if "other_visits" not in df.columns:
        df = df.with_columns(pl.lit(None, dtype=pl.Float64).alias("other_visits"))

    df = _parse_dates(df, date_format)
    df = df.with_columns(
        pl.col("reg").cast(pl.String),
        pl.col("pathogen").cast(pl.String).str.strip_chars(),
        pl.col("geography").cast(pl.String).str.strip_chars(),
        _to_float("percent_visits"),
        _to_float("other_visits"),
    )

    bad = df.filter(pl.col("nssp_date").is_null())
    if bad.height > 0:
        regs = bad["reg"].head(MAX_REPORTED_ROWS).to_list()
        if on_bad_dates == "raise":
            raise IngestError(
                f"{bad.height} rows with unparseable nssp_date "
                f"(format {date_format!r}), e.g. reg={regs}"
            )
        logger.warning(f"Dropping {bad.height} rows with unparseable nssp_date, e.g. reg={regs}")
        df = df.filter(pl.col("nssp_date").is_not_null())

    n_missing = df.filter(pl.col("percent_visits").is_null()).height
    if n_missing > 0:
        logger.warning(f"{n_missing} rows have no numeric percent_visits; excluded from averages")

    return df.select(
        [pl.col(name).cast(dtype) for name, dtype in OBSERVATION_SCHEMA.items()]
    )


def load_observations(config: NsspConfig) -> pl.DataFrame:
    """Read and normalize the configured source."""
    if not config.source.path:
        raise IngestError("No source path configured")

    raw = read_source(config.source.path, config.source)
    observations = normalize(
        raw,
        date_format=config.source.date_format,
        on_bad_dates=config.source.on_bad_dates,
    )
    logger.info(f"Loaded {observations.height:,} observations")
    return observations
