"""
NSSP Config Loader: load nssp.yaml from a file or a data directory

Usage:
    from nssp.config.loader import load_config

    config = load_config("data/")          # Looks for: data/nssp.yaml
    config = load_config("runs/dec.yaml")  # Explicit file
"""

from pathlib import Path
from typing import Union

from .schema import NsspConfig

CONFIG_FILENAME = "nssp.yaml"


def load_config(path: Union[str, Path]) -> NsspConfig:
    """
    Load the run configuration.

    Args:
        path: YAML file, or directory containing nssp.yaml

    Returns:
        NsspConfig object

    Raises:
        FileNotFoundError: If no config file is found
        pydantic.ValidationError: If the YAML content is invalid
    """
    path = Path(path)
    if path.is_dir():
        path = path / CONFIG_FILENAME

    if not path.exists():
        raise FileNotFoundError(f"{CONFIG_FILENAME} not found: {path}")

    config = NsspConfig.from_yaml(path)

    # Relative source paths resolve against the config file's directory
    if config.source.path and not Path(config.source.path).is_absolute():
        config.source.path = str(path.parent / config.source.path)

    return config
