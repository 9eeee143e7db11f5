"""Profile resolution and introspect-then-compare orchestration.

Profiles come from db.toml. The active profile is chosen by explicit name,
else by the ``<PREFIX>DB_PROFILE`` environment variable.

Usage:
    from db_schema_compare.factory import compare_profile

    result = await compare_profile(declared_model, profile_name="staging")
"""

import logging
import os
from pathlib import Path
from urllib.parse import quote

from db_schema_compare.compare.comparer import CompareResult, compare_models_to_database
from db_schema_compare.compare.options import CompareConfig
from db_schema_compare.config.loader import load_db_config
from db_schema_compare.config.models import DatabaseConfig, DatabaseProfile
from db_schema_compare.schema.declared import DeclaredModel
from db_schema_compare.schema.introspector import SchemaIntrospector
from db_schema_compare.schema.models import DatabaseModel

logger = logging.getLogger(__name__)


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


# ============================================================================
# Profile Resolution
# ============================================================================


def get_active_profile_name(profile_name: str | None = None, env_prefix: str = "") -> str:
    """Get the profile to use.

    Priority:
    1. *profile_name* argument
    2. ``{env_prefix}DB_PROFILE`` env var
    3. Raise ProfileNotFoundError

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    if profile_name:
        return profile_name

    env_var = f"{env_prefix}DB_PROFILE"
    env_profile = os.environ.get(env_var)
    if env_profile:
        return env_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Pass --profile <name> or set {env_var}=<name>."
    )


def get_profile(config: DatabaseConfig, profile_name: str) -> DatabaseProfile:
    """Look up *profile_name* in *config*.

    Raises:
        KeyError: If profile not found in db.toml
    """
    if profile_name not in config.profiles:
        raise KeyError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys()) or '(none)'}"
        )
    return config.profiles[profile_name]


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Example:
        >>> resolve_url(DatabaseProfile(url="postgresql://u:[YOUR-PASSWORD]@h/db", db_password="p@ss"))
        'postgresql://u:p%40ss@h/db'
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


# ============================================================================
# Introspection and Comparison
# ============================================================================


async def introspect_profile(
    profile: DatabaseProfile,
    schemas: list[str] | None = None,
    compare_config: CompareConfig | None = None,
) -> DatabaseModel:
    """Connect to *profile* and read its schema.

    Raises:
        ValueError: If the profile's provider cannot be introspected.
    """
    if profile.provider != "postgres":
        raise ValueError(
            f"Cannot introspect provider '{profile.provider}'. "
            "Write a DatabaseModel JSON snapshot and use --database instead."
        )
    compare_config = compare_config or CompareConfig()
    async with SchemaIntrospector(
        resolve_url(profile),
        sequence_default_is_identity=compare_config.sequence_default_is_identity,
    ) as introspector:
        return await introspector.introspect(schemas)


async def compare_profile(
    declared_model: DeclaredModel,
    profile_name: str | None = None,
    env_prefix: str = "",
    config_path: Path | None = None,
    schemas: list[str] | None = None,
) -> CompareResult:
    """Introspect the active profile and compare *declared_model* against it.

    Returns:
        CompareResult with the full diff log.

    Raises:
        ProfileNotFoundError: If no profile is selected
        KeyError: If the profile is not in db.toml
        FileNotFoundError: If db.toml is missing
    """
    config = load_db_config(config_path)
    name = get_active_profile_name(profile_name, env_prefix)
    profile = get_profile(config, name)
    logger.debug("Comparing %s against profile %s", declared_model.name, name)

    compare_config = config.compare
    if compare_config.dialect is None:
        compare_config = compare_config.model_copy(update={"dialect": profile.provider})

    database = await introspect_profile(profile, schemas, compare_config)
    return compare_models_to_database([declared_model], database, compare_config)
