"""The comparison engine.

Walks a declared model and a discovered database model in lockstep and
records every difference in a hierarchical diff log.

Usage:
    from db_schema_compare.compare import SchemaComparer, list_all_errors
    from db_schema_compare.compare import compare_models_to_database
"""

from db_schema_compare.compare.comparer import (
    CompareResult,
    SchemaComparer,
    compare_models_to_database,
)
from db_schema_compare.compare.dialects import (
    Dialect,
    TypeEquivalence,
    get_dialect,
    register_dialect,
)
from db_schema_compare.compare.log import (
    CompareAttribute,
    CompareLog,
    CompareState,
    CompareType,
    has_errors,
    list_all_errors,
)
from db_schema_compare.compare.options import CompareConfig, IgnoreRule

__all__ = [
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
    "has_errors",
    "Dialect",
    "TypeEquivalence",
    "get_dialect",
    "register_dialect",
]
