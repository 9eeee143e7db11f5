"""Declared and discovered schema models, and the providers that build them.

Provides the declared model (``DeclaredModel`` and friends), the discovered
model (``DatabaseModel`` and friends), live PostgreSQL introspection
(``SchemaIntrospector``) and SQLAlchemy metadata conversion
(``declared_model_from_metadata``, ``declared_model_from_base``).

Usage:
    from db_schema_compare.schema import SchemaIntrospector, declared_model_from_base
"""

from db_schema_compare.schema.declared import (
    DeclaredEntity,
    DeclaredForeignKey,
    DeclaredIndex,
    DeclaredKey,
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
from db_schema_compare.schema.models import (
    DatabaseColumn,
    DatabaseForeignKey,
    DatabaseIndex,
    DatabaseModel,
    DatabasePrimaryKey,
    DatabaseTable,
)

__all__ = [
    "DeclaredModel",
    "DeclaredEntity",
    "DeclaredProperty",
    "DeclaredKey",
    "DeclaredIndex",
    "DeclaredForeignKey",
    "DeclaredModelError",
    "ValueGenerated",
    "DatabaseModel",
    "DatabaseTable",
    "DatabaseColumn",
    "DatabasePrimaryKey",
    "DatabaseIndex",
    "DatabaseForeignKey",
    "SchemaIntrospector",
    "declared_model_from_metadata",
    "declared_model_from_base",
]
