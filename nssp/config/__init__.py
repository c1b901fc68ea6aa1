"""NSSP run configuration."""

from .schema import (
    DEFAULT_DATE_FORMAT,
    SOURCE_COLUMNS,
    ExportConfig,
    NsspConfig,
    SourceConfig,
)
from .loader import load_config

__all__ = [
    "DEFAULT_DATE_FORMAT",
    "SOURCE_COLUMNS",
    "ExportConfig",
    "NsspConfig",
    "SourceConfig",
    "load_config",
]
