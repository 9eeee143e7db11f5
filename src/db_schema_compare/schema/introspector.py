"""PostgreSQL schema introspection via information_schema and pg_catalog.

Builds a ``DatabaseModel`` from a live database:
- Tables and columns (store type, nullability, identity, default, generated expression)
- Primary keys with ordered columns
- Indexes (name, columns, uniqueness), primary key index excluded
- Foreign keys (columns, principal table and columns, delete rule)

Uses psycopg (v3) async connections.
"""

import logging
import re

import psycopg
from psycopg import AsyncConnection

from db_schema_compare.schema.models import (
    DatabaseColumn,
    DatabaseForeignKey,
    DatabaseIndex,
    DatabaseModel,
    DatabasePrimaryKey,
    DatabaseTable,
)

logger = logging.getLogger(__name__)

# pg_constraint.confdeltype codes
_DELETE_RULES = {
    "a": "NO ACTION",
    "r": "RESTRICT",
    "c": "CASCADE",
    "n": "SET NULL",
    "d": "SET DEFAULT",
}

# Trailing type casts PostgreSQL adds to stored defaults, e.g. ::character varying
_TRAILING_CAST = re.compile(r"(?:::[a-z_][a-z0-9_ ]*(?:\([0-9, ]*\))?(?:\[\])?)+$", re.IGNORECASE)


def strip_default_cast(default: str | None) -> str | None:
    """Remove trailing casts from a stored default.

    Example:
        >>> strip_default_cast("'active'::character varying")
        "'active'"
    """
    if default is None:
        return None
    return _TRAILING_CAST.sub("", default.strip())


class SchemaIntrospector:
    """Introspects PostgreSQL database schema.

    Works with any PostgreSQL database (RDS, Supabase, local).

    Usage:
        async with SchemaIntrospector(database_url) as introspector:
            database = await introspector.introspect(["public"])

    Args:
        database_url: PostgreSQL connection URL.
        excluded_tables: Table names to skip. Defaults to
            ``EXCLUDED_TABLES_DEFAULT``.
        connect_timeout: Seconds to wait for the connection.
        sequence_default_is_identity: Report ``nextval(...)`` defaults
            (serial columns) as identity columns without a default.
    """

    # Tables to exclude from introspection (system tables)
    EXCLUDED_TABLES_DEFAULT = {
        "schema_migrations",
        "alembic_version",
        "pg_stat_statements",
        "spatial_ref_sys",
    }

    def __init__(
        self,
        database_url: str,
        excluded_tables: set[str] | None = None,
        connect_timeout: int = 10,
        sequence_default_is_identity: bool = True,
    ):
        self._database_url = database_url
        self._excluded_tables = (
            set(self.EXCLUDED_TABLES_DEFAULT) if excluded_tables is None else excluded_tables
        )
        self._connect_timeout = connect_timeout
        self._sequence_default_is_identity = sequence_default_is_identity
        self._conn: AsyncConnection | None = None

    async def __aenter__(self) -> "SchemaIntrospector":
        """Async context manager entry - opens connection."""
        url = self._database_url
        if "connect_timeout" not in url:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}connect_timeout={self._connect_timeout}"

        self._conn = await psycopg.AsyncConnection.connect(url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - closes connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_connection(self) -> AsyncConnection:
        if not self._conn:
            raise RuntimeError("Introspector not connected. Use 'async with'.")
        return self._conn

    async def _fetch(self, query: str, params: tuple) -> list[tuple]:
        conn = self._require_connection()
        async with conn.cursor() as cur:
            await cur.execute(query, params)
            return await cur.fetchall()

    async def test_connection(self) -> bool:
        """Run ``SELECT 1``; True if the database answered."""
        rows = await self._fetch("SELECT 1", ())
        return bool(rows) and rows[0][0] == 1

    async def introspect(self, schemas: list[str] | None = None) -> DatabaseModel:
        """Introspect every base table in *schemas*.

        Args:
            schemas: Schemas to read (default: ``["public"]``). The first is
                recorded as the model's default schema.

        Returns:
            DatabaseModel with tables, columns, keys, indexes and foreign keys.
        """
        self._require_connection()
        schemas = schemas or ["public"]
        database = DatabaseModel(default_schema=schemas[0])

        for schema_name in schemas:
            for table_name in await self._get_tables(schema_name):
                if table_name in self._excluded_tables:
                    continue
                logger.debug("Introspecting %s.%s", schema_name, table_name)

                table = DatabaseTable(schema=schema_name, name=table_name)
                table.columns = await self._get_columns(schema_name, table_name)
                table.primary_key = await self._get_primary_key(schema_name, table_name)
                table.indexes = await self._get_indexes(schema_name, table_name)
                table.foreign_keys = await self._get_foreign_keys(schema_name, table_name)
                database.tables.append(table)

        logger.debug("Introspected %d table(s)", len(database.tables))
        return database

    async def _get_tables(self, schema_name: str) -> list[str]:
        """Get all base table names in schema."""
        query = """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = %s
              AND table_type = 'BASE TABLE'
            ORDER BY table_name
        """
        return [row[0] for row in await self._fetch(query, (schema_name,))]

    async def _get_columns(self, schema_name: str, table_name: str) -> list[DatabaseColumn]:
        """Get columns for a table, in ordinal order."""
        query = """
            SELECT
                c.column_name,
                format_type(a.atttypid, a.atttypmod) AS store_type,
                c.is_nullable,
                c.column_default,
                c.is_identity,
                c.generation_expression
            FROM information_schema.columns c
            JOIN pg_namespace n ON n.nspname = c.table_schema
            JOIN pg_class t ON t.relname = c.table_name AND t.relnamespace = n.oid
            JOIN pg_attribute a ON a.attrelid = t.oid AND a.attname = c.column_name
            WHERE c.table_schema = %s
              AND c.table_name = %s
            ORDER BY c.ordinal_position
        """
        columns = []
        for row in await self._fetch(query, (schema_name, table_name)):
            name, store_type, is_nullable, default, is_identity, generated = row
            identity = is_identity == "YES"
            if (
                self._sequence_default_is_identity
                and default
                and default.lower().startswith("nextval(")
            ):
                identity, default = True, None
            default = strip_default_cast(default)
            columns.append(
                DatabaseColumn(
                    name=name,
                    store_type=store_type,
                    is_nullable=(is_nullable == "YES"),
                    is_identity=identity,
                    default_value_sql=default,
                    computed_column_sql=generated,
                )
            )
        return columns

    async def _get_primary_key(
        self, schema_name: str, table_name: str
    ) -> DatabasePrimaryKey | None:
        """Get the primary key constraint, or None for a keyless table."""
        query = """
            SELECT tc.constraint_name, kcu.column_name
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
                AND tc.table_name = kcu.table_name
            WHERE tc.table_schema = %s
              AND tc.table_name = %s
              AND tc.constraint_type = 'PRIMARY KEY'
            ORDER BY kcu.ordinal_position
        """
        rows = await self._fetch(query, (schema_name, table_name))
        if not rows:
            return None
        return DatabasePrimaryKey(name=rows[0][0], columns=[row[1] for row in rows])

    async def _get_indexes(self, schema_name: str, table_name: str) -> list[DatabaseIndex]:
        """Get indexes for a table (excluding primary key)."""
        query = """
            SELECT
                i.relname AS index_name,
                array_agg(a.attname ORDER BY x.ordinality) AS columns,
                ix.indisunique AS is_unique
            FROM pg_index ix
            JOIN pg_class t ON t.oid = ix.indrelid
            JOIN pg_class i ON i.oid = ix.indexrelid
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS x(attnum, ordinality) ON TRUE
            JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = x.attnum
            WHERE n.nspname = %s
              AND t.relname = %s
              AND NOT ix.indisprimary
            GROUP BY i.relname, ix.indisunique
            ORDER BY i.relname
        """
        return [
            DatabaseIndex(name=name, columns=list(columns), is_unique=is_unique)
            for name, columns, is_unique in await self._fetch(query, (schema_name, table_name))
        ]

    async def _get_foreign_keys(
        self, schema_name: str, table_name: str
    ) -> list[DatabaseForeignKey]:
        """Get foreign key constraints with ordered column lists."""
        query = """
            SELECT
                con.conname,
                ARRAY(
                    SELECT a.attname
                    FROM unnest(con.conkey) WITH ORDINALITY AS k(attnum, ord)
                    JOIN pg_attribute a ON a.attrelid = con.conrelid AND a.attnum = k.attnum
                    ORDER BY k.ord
                ) AS columns,
                fn.nspname AS principal_schema,
                ft.relname AS principal_table,
                ARRAY(
                    SELECT a.attname
                    FROM unnest(con.confkey) WITH ORDINALITY AS k(attnum, ord)
                    JOIN pg_attribute a ON a.attrelid = con.confrelid AND a.attnum = k.attnum
                    ORDER BY k.ord
                ) AS principal_columns,
                con.confdeltype
            FROM pg_constraint con
            JOIN pg_class t ON t.oid = con.conrelid
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN pg_class ft ON ft.oid = con.confrelid
            JOIN pg_namespace fn ON fn.oid = ft.relnamespace
            WHERE con.contype = 'f'
              AND n.nspname = %s
              AND t.relname = %s
            ORDER BY con.conname
        """
        foreign_keys = []
        for row in await self._fetch(query, (schema_name, table_name)):
            name, columns, principal_schema, principal_table, principal_columns, delete_type = row
            foreign_keys.append(
                DatabaseForeignKey(
                    name=name,
                    columns=list(columns),
                    principal_schema=principal_schema,
                    principal_table=principal_table,
                    principal_columns=list(principal_columns),
                    on_delete=_DELETE_RULES.get(delete_type, delete_type),
                )
            )
        return foreign_keys
