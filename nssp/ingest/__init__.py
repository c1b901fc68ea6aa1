"""Raw extract ingestion: CSV/parquet -> observations frame."""

from .loader import (
    OBSERVATION_SCHEMA,
    load_observations,
    normalize,
    read_source,
)

__all__ = [
    "OBSERVATION_SCHEMA",
    "load_observations",
    "normalize",
    "read_source",
]
