"""TOML configuration loading."""

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from db_schema_compare.compare.options import CompareConfig
from db_schema_compare.config.models import DatabaseConfig, DatabaseProfile

logger = logging.getLogger(__name__)


def load_db_config(config_path: Path | None = None) -> DatabaseConfig:
    """Load profiles and comparison options from a TOML file.

    Args:
        config_path: Path to db.toml (default: ``./db.toml``)

    Returns:
        DatabaseConfig with all profiles and the [compare] options

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / "db.toml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create a db.toml with [profiles.<name>] and [compare] sections."
        )

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    try:
        # Parse profiles
        profiles = {}
        for name, profile_data in data.get("profiles", {}).items():
            profiles[name] = DatabaseProfile(**profile_data)

        # Parse comparison settings
        compare = CompareConfig(**data.get("compare", {}))
    except (ValidationError, TypeError) as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    logger.debug("Loaded %d profile(s) from %s", len(profiles), config_path)
    return DatabaseConfig(profiles=profiles, compare=compare)
