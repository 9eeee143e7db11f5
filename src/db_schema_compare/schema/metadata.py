"""Build a ``DeclaredModel`` from SQLAlchemy table metadata.

Two entry points:
- ``declared_model_from_metadata``: one entity per ``Table`` in a ``MetaData``,
  named after the table, with properties named after column keys.
- ``declared_model_from_base``: one entity per mapped class of a declarative
  base, named after the class, with properties named after mapped attributes.

Column types are compiled with the SQLAlchemy dialect matching the target
database, so the declared store types read the way that database spells them.
"""

import logging
from collections.abc import Mapping

from sqlalchemy import Boolean, Column, DefaultClause, Integer, MetaData, Numeric, Table
from sqlalchemy.dialects import mssql, postgresql
from sqlalchemy.engine import Dialect as SqlAlchemyDialect
from sqlalchemy.sql.elements import ClauseElement, TextClause

from db_schema_compare.schema.declared import (
    DeclaredEntity,
    DeclaredForeignKey,
    DeclaredIndex,
    DeclaredKey,
    DeclaredModel,
    DeclaredProperty,
    ValueGenerated,
)

logger = logging.getLogger(__name__)

_SQLALCHEMY_DIALECTS = {
    "sqlserver": mssql.dialect,
    "postgres": postgresql.dialect,
}


def sqlalchemy_dialect(name: str) -> SqlAlchemyDialect:
    """SQLAlchemy dialect instance for one of our dialect names.

    Raises:
        KeyError: For a dialect with no SQLAlchemy counterpart registered.
    """
    try:
        return _SQLALCHEMY_DIALECTS[name]()
    except KeyError:
        raise KeyError(
            f"No SQLAlchemy dialect for '{name}'. "
            f"Available: {', '.join(sorted(_SQLALCHEMY_DIALECTS))}"
        ) from None


def _sql_text(clause: object, sql_dialect: SqlAlchemyDialect) -> str:
    if isinstance(clause, str):
        return f"'{clause}'"
    if isinstance(clause, TextClause):
        return clause.text
    if isinstance(clause, ClauseElement):
        return str(clause.compile(dialect=sql_dialect, compile_kwargs={"literal_binds": True}))
    return str(clause)


def _default_sql(column: Column, sql_dialect: SqlAlchemyDialect) -> str | None:
    """Server default text the way the database stores it, or None.

    ``Computed`` and ``Identity`` also live in ``server_default``; only a
    ``DefaultClause`` carries a default expression. String literals on numeric
    and boolean columns are stored unquoted.
    """
    default = column.server_default
    if not isinstance(default, DefaultClause):
        return None
    if isinstance(default.arg, str) and isinstance(column.type, (Integer, Numeric, Boolean)):
        return default.arg.strip()
    return _sql_text(default.arg, sql_dialect)


def _scalar_type(column: Column) -> str:
    try:
        return column.type.python_type.__name__
    except NotImplementedError:
        return "object"


def _value_generated(column: Column, default_sql: str | None) -> ValueGenerated:
    if column.computed is not None:
        return ValueGenerated.ON_ADD_OR_UPDATE
    if column.identity is not None or column is column.table.autoincrement_column:
        return ValueGenerated.ON_ADD
    if default_sql is not None:
        return ValueGenerated.ON_ADD
    return ValueGenerated.NEVER


def declared_property(
    column: Column,
    sql_dialect: SqlAlchemyDialect,
    name: str | None = None,
) -> DeclaredProperty:
    """Describe one column as a declared property.

    Args:
        column: The mapped column.
        sql_dialect: Dialect used to compile the column type.
        name: Property name; the column key when omitted.
    """
    default_sql = _default_sql(column, sql_dialect)
    computed_sql = None
    if column.computed is not None:
        computed_sql = _sql_text(column.computed.sqltext, sql_dialect)

    return DeclaredProperty(
        name=name or column.key,
        column_name=column.name,
        scalar_type=_scalar_type(column),
        column_type=column.type.compile(dialect=sql_dialect).lower(),
        is_nullable=bool(column.nullable),
        value_generated=_value_generated(column, default_sql),
        default_value_sql=default_sql,
        computed_column_sql=computed_sql,
    )


def declared_entity(
    table: Table,
    sql_dialect: SqlAlchemyDialect,
    entity_name: str | None = None,
    property_names: Mapping[str, str] | None = None,
) -> DeclaredEntity:
    """Describe one table as a declared entity.

    Args:
        table: The mapped table.
        sql_dialect: Dialect used to compile column types.
        entity_name: Entity name; the table name when omitted.
        property_names: Column name to property name, for mapped classes
            whose attribute names differ from column names.
    """
    names = dict(property_names or {})

    def prop_name(column: Column) -> str:
        return names.get(column.name, column.key)

    properties = [declared_property(col, sql_dialect, prop_name(col)) for col in table.columns]

    primary_key = None
    if len(table.primary_key.columns):
        primary_key = DeclaredKey(
            name=table.primary_key.name if isinstance(table.primary_key.name, str) else None,
            properties=[prop_name(col) for col in table.primary_key.columns],
        )

    indexes = []
    for index in sorted(table.indexes, key=lambda i: str(i.name)):
        columns = [col for col in index.columns if isinstance(col, Column)]
        name = index.name if isinstance(index.name, str) and index.name else (
            f"ix_{table.name}_{'_'.join(col.name for col in columns)}"
        )
        indexes.append(
            DeclaredIndex(
                name=name,
                properties=[prop_name(col) for col in columns],
                is_unique=bool(index.unique),
            )
        )

    foreign_keys = []
    for fk in sorted(table.foreign_key_constraints, key=lambda c: str(c.name)):
        columns = list(fk.columns)
        name = fk.name if isinstance(fk.name, str) and fk.name else (
            f"{table.name}_{'_'.join(col.name for col in columns)}_fkey"
        )
        referred = fk.referred_table
        foreign_keys.append(
            DeclaredForeignKey(
                name=name,
                properties=[prop_name(col) for col in columns],
                principal_schema=referred.schema,
                principal_table=referred.name,
                principal_columns=[element.column.name for element in fk.elements],
                on_delete=fk.ondelete,
            )
        )

    return DeclaredEntity(
        name=entity_name or table.name,
        schema=table.schema,
        table=table.name,
        properties=properties,
        primary_key=primary_key,
        indexes=indexes,
        foreign_keys=foreign_keys,
    )


def declared_model_from_metadata(
    metadata: MetaData,
    name: str = "metadata",
    dialect: str = "postgres",
) -> DeclaredModel:
    """One entity per table, in ``metadata.sorted_tables`` order."""
    sql_dialect = sqlalchemy_dialect(dialect)
    entities = [declared_entity(table, sql_dialect) for table in metadata.sorted_tables]
    logger.debug("Declared model %s: %d entities from metadata", name, len(entities))
    return DeclaredModel(name=name, default_schema=metadata.schema, entities=entities)


def declared_model_from_base(base: type, dialect: str = "postgres") -> DeclaredModel:
    """One entity per mapped class of a declarative base, ordered by class name.

    Args:
        base: A ``DeclarativeBase`` subclass (anything with a ``registry``).
        dialect: Target dialect name, used to compile column types.
    """
    sql_dialect = sqlalchemy_dialect(dialect)
    entities = []
    for mapper in sorted(base.registry.mappers, key=lambda m: m.class_.__name__):
        table = mapper.local_table
        if not isinstance(table, Table):
            continue
        property_names = {
            attr.columns[0].name: attr.key
            for attr in mapper.column_attrs
            if attr.columns[0].table is table
        }
        entities.append(
            declared_entity(table, sql_dialect, mapper.class_.__name__, property_names)
        )
    logger.debug("Declared model %s: %d mapped classes", base.__name__, len(entities))
    return DeclaredModel(
        name=base.__name__,
        default_schema=base.metadata.schema,
        entities=entities,
    )
