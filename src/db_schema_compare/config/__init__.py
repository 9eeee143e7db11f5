"""Configuration management: profiles and TOML loading.

Usage:
    >>> from db_schema_compare.config import load_db_config, DatabaseProfile
"""

from db_schema_compare.config.loader import load_db_config
from db_schema_compare.config.models import DatabaseConfig, DatabaseProfile

__all__ = ["load_db_config", "DatabaseConfig", "DatabaseProfile"]
