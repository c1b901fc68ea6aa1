"""
NSSP Config Schema

Usage:
    config = NsspConfig.from_yaml("nssp.yaml")
    print(config.source.path, config.export.output_dir)

    config = NsspConfig(source=SourceConfig(path="data/nssp.csv"))
    config.to_yaml("nssp.yaml")
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union
from pathlib import Path
import yaml


# Column order of the NSSP extract when the file has no header
SOURCE_COLUMNS = [
    "reg",
    "nssp_date",
    "pathogen",
    "geography",
    "percent_visits",
    "other_visits",
]

# Day-month-two-digit-year, e.g. 02-12-23
DEFAULT_DATE_FORMAT = "%d-%m-%y"


class SourceConfig(BaseModel):
    """Where the raw NSSP extract lives and how to read it"""
    path: Optional[str] = Field(None, description="Path to the CSV or parquet extract")
    format: Literal["auto", "csv", "parquet"] = Field(
        default="auto",
        description="File format; 'auto' picks from the file extension"
    )
    date_format: str = Field(
        default=DEFAULT_DATE_FORMAT,
        description="strftime format of nssp_date when stored as text"
    )
    has_header: bool = Field(
        default=True,
        description="False when columns arrive positionally in SOURCE_COLUMNS order"
    )
    on_bad_dates: Literal["raise", "drop"] = Field(
        default="raise",
        description="Reject the load on unparseable dates, or drop those rows"
    )


class ExportConfig(BaseModel):
    """Materialized outputs for the dashboard"""
    output_dir: Optional[str] = Field(None, description="Directory for exported views")
    format: Literal["parquet", "csv"] = Field(default="parquet")
    views: Optional[List[str]] = Field(
        default=None,
        description="Views to export (None = every view of every stage)"
    )


class NsspConfig(BaseModel):
    """
    Run configuration for the NSSP views pipeline.

    The database path is where the DuckDB file with the base table and all
    views is written; ':memory:' keeps everything in-process.
    """

    source: SourceConfig = Field(default_factory=SourceConfig)
    database: str = Field(
        default=":memory:",
        description="DuckDB database path"
    )
    export: ExportConfig = Field(default_factory=ExportConfig)
    stop_after: Optional[str] = Field(
        default=None,
        description="Stage name to stop after (None = run every stage)"
    )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "NsspConfig":
        """Load config from YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.model_validate(data)

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Write config to YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)
