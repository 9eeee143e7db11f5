"""Vendor-specific type naming.

A dialect knows two things: the canonical store type each scalar type maps
to, and which store type names mean the same thing. The comparer only talks
to the ``TypeEquivalence`` protocol, so new vendors are added by registering
another dialect rather than by touching the rules.

Usage:
    from db_schema_compare.compare.dialects import get_dialect

    dialect = get_dialect("sqlserver")
    dialect.canonical_type("str")                        # 'nvarchar(max)'
    dialect.types_equivalent("decimal(18,2)", "numeric(18, 2)")  # True
"""

import re
from typing import Protocol


class TypeEquivalence(Protocol):
    """Capability a dialect must provide to the comparer."""

    name: str
    default_schema: str | None

    def canonical_type(self, scalar_type: str) -> str:
        """Map a declared scalar type to the dialect's store type name."""
        ...

    def types_equivalent(self, expected: str, found: str) -> bool:
        """True if two store type names denote the same type."""
        ...


class Dialect:
    """Table-driven ``TypeEquivalence`` implementation.

    Args:
        name: Registry name, e.g. ``"sqlserver"``.
        default_schema: Schema assumed when an entity declares none.
        type_map: Scalar type name to canonical store type.
        synonyms: Store type base name to its preferred spelling.
    """

    def __init__(
        self,
        name: str,
        default_schema: str | None,
        type_map: dict[str, str],
        synonyms: dict[str, str] | None = None,
    ):
        self.name = name
        self.default_schema = default_schema
        self._type_map = {k.lower(): v for k, v in type_map.items()}
        self._synonyms = {k.lower(): v.lower() for k, v in (synonyms or {}).items()}

    def __repr__(self) -> str:
        return f"Dialect({self.name!r})"

    def canonical_type(self, scalar_type: str) -> str:
        # Unknown scalar types are assumed to already be store types
        return self._type_map.get(scalar_type.lower(), scalar_type.lower())

    def normalize_type(self, store_type: str) -> str:
        """Lower-case, drop whitespace, and map the base name through synonyms.

        Example:
            >>> postgres.normalize_type("character varying(50)")
            'varchar(50)'
        """
        text = " ".join(store_type.lower().split())
        match = re.match(r"^([^(]+?)\s*(\(.*\))?$", text)
        if not match:
            return text
        base, args = match.group(1), match.group(2) or ""
        base = self._synonyms.get(base, base)
        return base + args.replace(" ", "")

    def types_equivalent(self, expected: str, found: str) -> bool:
        return self.normalize_type(expected) == self.normalize_type(found)


# ============================================================================
# Built-in dialects
# ============================================================================

sqlserver = Dialect(
    name="sqlserver",
    default_schema="dbo",
    type_map={
        "int": "int",
        "long": "bigint",
        "short": "smallint",
        "byte": "tinyint",
        "bool": "bit",
        "str": "nvarchar(max)",
        "float": "float",
        "decimal": "decimal(18,2)",
        "datetime": "datetime2",
        "date": "date",
        "time": "time",
        "timedelta": "time",
        "bytes": "varbinary(max)",
        "uuid": "uniqueidentifier",
    },
    synonyms={
        "numeric": "decimal",
        "integer": "int",
        "rowversion": "timestamp",
        "double precision": "float",
        "character varying": "varchar",
        "national character varying": "nvarchar",
    },
)

postgres = Dialect(
    name="postgres",
    default_schema="public",
    type_map={
        "int": "integer",
        "long": "bigint",
        "short": "smallint",
        "bool": "boolean",
        "str": "text",
        "float": "double precision",
        "decimal": "numeric",
        "datetime": "timestamp without time zone",
        "date": "date",
        "time": "time without time zone",
        "timedelta": "interval",
        "bytes": "bytea",
        "uuid": "uuid",
        "dict": "jsonb",
    },
    synonyms={
        "int": "integer",
        "int4": "integer",
        "int8": "bigint",
        "int2": "smallint",
        "serial": "integer",
        "bigserial": "bigint",
        "bool": "boolean",
        "float8": "double precision",
        "float4": "real",
        "decimal": "numeric",
        "character varying": "varchar",
        "character": "char",
        "timestamp without time zone": "timestamp",
        "timestamp with time zone": "timestamptz",
        "time without time zone": "time",
        "time with time zone": "timetz",
    },
)

_DIALECTS: dict[str, TypeEquivalence] = {
    sqlserver.name: sqlserver,
    postgres.name: postgres,
}


def register_dialect(dialect: TypeEquivalence) -> None:
    """Make *dialect* available to ``get_dialect`` under ``dialect.name``."""
    _DIALECTS[dialect.name] = dialect


def get_dialect(name: str) -> TypeEquivalence:
    """Look up a registered dialect.

    Raises:
        KeyError: If no dialect is registered under *name*.
    """
    try:
        return _DIALECTS[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown dialect '{name}'. Available dialects: {', '.join(sorted(_DIALECTS))}"
        ) from None
