"""db-schema-compare: check a declared schema against a live database.

Compares the schema your mapping code declares (entities, properties, keys,
indexes, foreign keys, value-generation policies) with the schema a database
actually has, and reports every difference as a hierarchical diff log.

Usage:
    from db_schema_compare import SchemaComparer, list_all_errors
    from db_schema_compare import DeclaredModel, DatabaseModel
    from db_schema_compare import declared_model_from_base, SchemaIntrospector
"""

__version__ = "0.1.0"

# Engine
from db_schema_compare.compare.comparer import (
    CompareResult,
    SchemaComparer,
    compare_models_to_database,
)
from db_schema_compare.compare.log import (
    CompareAttribute,
    CompareLog,
    CompareState,
    CompareType,
    list_all_errors,
)
from db_schema_compare.compare.options import CompareConfig, IgnoreRule

# Config
from db_schema_compare.config.loader import load_db_config
from db_schema_compare.config.models import DatabaseConfig, DatabaseProfile

# Factory
from db_schema_compare.factory import ProfileNotFoundError, compare_profile, resolve_url

# Schema models and providers
from db_schema_compare.schema.declared import (
    DeclaredEntity,
    DeclaredModel,
    DeclaredModelError,
    DeclaredProperty,
    ValueGenerated,
)
from db_schema_compare.schema.introspector import SchemaIntrospector
from db_schema_compare.schema.metadata import (
    declared_model_from_base,
    declared_model_from_metadata,
)
from db_schema_compare.schema.models import DatabaseColumn, DatabaseModel, DatabaseTable

__all__ = [
    # Engine
    "SchemaComparer",
    "CompareResult",
    "compare_models_to_database",
    "CompareConfig",
    "IgnoreRule",
    "CompareLog",
    "CompareState",
    "CompareType",
    "CompareAttribute",
    "list_all_errors",
    # Config
    "load_db_config",
    "DatabaseConfig",
    "DatabaseProfile",
    # Factory
    "compare_profile",
    "resolve_url",
    "ProfileNotFoundError",
    # Schema
    "DeclaredModel",
    "DeclaredEntity",
    "DeclaredProperty",
    "DeclaredModelError",
    "ValueGenerated",
    "DatabaseModel",
    "DatabaseTable",
    "DatabaseColumn",
    "SchemaIntrospector",
    "declared_model_from_metadata",
    "declared_model_from_base",
]
