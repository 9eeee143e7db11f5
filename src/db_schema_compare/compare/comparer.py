"""Compare a declared model against a discovered database model.

Pure logic -- no I/O, no database connections. The comparer walks the
declared entities in order, matches each to its table, runs the property,
key, index and foreign key checks, and writes everything into a fresh diff
log. Failure is decided by scanning that log.

Usage:
    from db_schema_compare.compare.comparer import SchemaComparer
    from db_schema_compare.compare.log import list_all_errors

    comparer = SchemaComparer(declared_model)
    if comparer.compare_model_to_database(database_model):
        for error in list_all_errors(comparer.logs):
            print(error)
"""

import logging

from pydantic import BaseModel, Field

from db_schema_compare.compare.dialects import TypeEquivalence, get_dialect
from db_schema_compare.compare.keys import (
    PrimaryKeyComparer,
    compare_foreign_key,
    compare_index,
    key_constraint_name,
)
from db_schema_compare.compare.log import (
    CompareAttribute,
    CompareLog,
    CompareState,
    CompareType,
    has_errors,
    list_all_errors,
)
from db_schema_compare.compare.logger import CompareLogger
from db_schema_compare.compare.options import DEFAULT_DIALECT, CompareConfig
from db_schema_compare.compare.rules import PropertyPair, compare_property
from db_schema_compare.schema.declared import DeclaredEntity, DeclaredModel
from db_schema_compare.schema.models import DatabaseModel, DatabaseTable

logger = logging.getLogger(__name__)


class CompareResult(BaseModel):
    """Outcome of a comparison run.

    Example:
        >>> result = CompareResult(has_errors=False)
        >>> result.errors()
        []
    """

    has_errors: bool
    logs: list[CompareLog] = Field(default_factory=list)

    def errors(self) -> list[str]:
        """Rendered error messages in log order."""
        return list(list_all_errors(self.logs))


class SchemaComparer:
    """Compares one declared model with discovered databases.

    The declared model is validated once, here; every call to
    ``compare_model_to_database`` then builds a new log, so the same
    comparer gives identical results for identical input.

    Args:
        model: The declared model. Not modified.
        config: Comparison options (defaults apply when omitted).
        dialect: Type naming rules; looked up from ``config.dialect`` when
            omitted.

    Raises:
        DeclaredModelError: If the declared model references unknown properties.
    """

    def __init__(
        self,
        model: DeclaredModel,
        config: CompareConfig | None = None,
        dialect: TypeEquivalence | None = None,
    ):
        model.validate_references()
        self.model = model
        self.config = config or CompareConfig()
        self.dialect = dialect or get_dialect(self.config.dialect or DEFAULT_DIALECT)
        self.logs: list[CompareLog] = []

    @property
    def default_schema(self) -> str | None:
        """Schema for entities that declare none."""
        return self.config.default_schema or self.model.default_schema or self.dialect.default_schema

    @property
    def has_errors(self) -> bool:
        return has_errors(self.logs)

    def compare_model_to_database(self, database: DatabaseModel) -> bool:
        """Compare every declared entity with *database*.

        Args:
            database: Discovered schema. Not modified.

        Returns:
            True if any difference was recorded.
        """
        root = CompareLog(type=CompareType.MODEL, state=CompareState.OK, name=self.model.name)
        self.logs = [root]
        for entity in self.model.entities:
            self._compare_entity(entity, database, root.sub_logs)

        found_errors = self.has_errors
        logger.debug(
            "Compared %d entities of %s: %s",
            len(self.model.entities),
            self.model.name,
            "differences found" if found_errors else "no differences",
        )
        return found_errors

    def result(self) -> CompareResult:
        return CompareResult(has_errors=self.has_errors, logs=self.logs)

    def table_for(self, entity: DeclaredEntity, database: DatabaseModel) -> DatabaseTable | None:
        """The discovered table *entity* maps to, or None."""
        schema = entity.schema_name or self.default_schema
        return database.find_table(schema, entity.table, self.default_schema)

    def _logger(self, type: CompareType, name: str, logs: list[CompareLog], parents: list[str]) -> CompareLogger:
        return CompareLogger(
            type,
            name,
            logs,
            ignore=self.config.ignore,
            ignore_errors=self.config.ignore_errors,
            parents=parents,
        )

    def _compare_entity(
        self,
        entity: DeclaredEntity,
        database: DatabaseModel,
        logs: list[CompareLog],
    ) -> None:
        entity_logger = self._logger(CompareType.ENTITY, entity.name, logs, [])
        table = self.table_for(entity, database)
        if table is None:
            logger.debug("Entity %s: table %s not found", entity.name, entity.full_table_name)
            entity_logger.not_in_database(entity.full_table_name, CompareAttribute.TABLE_NAME)
            return

        logger.debug("Entity %s: matched table %s", entity.name, table.full_name)
        # Table identity is settled by the lookup above
        entity_log = entity_logger.mark_as_ok(table.full_name)
        sub_logs = entity_log.sub_logs
        parents = [entity.name]
        columns = table.column_map()

        key_comparer = PrimaryKeyComparer(
            entity,
            table,
            self._logger(CompareType.PRIMARY_KEY, key_constraint_name(entity, table), sub_logs, parents),
        )
        key_comparer.check_name()

        for prop in entity.ordered_properties():
            prop_logger = self._logger(CompareType.PROPERTY, prop.name, sub_logs, parents)
            column = columns.get(prop.column)
            if column is None:
                prop_logger.not_in_database(prop.column, CompareAttribute.COLUMN_NAME)
                continue

            pair = PropertyPair(prop=prop, column=column, dialect=self.dialect, config=self.config)
            error = compare_property(pair, prop_logger)
            error |= key_comparer.check_property(prop)
            if not error:
                prop_logger.mark_as_ok(prop.column)

        key_comparer.finish()

        for index in entity.indexes:
            compare_index(
                entity, index, table, self._logger(CompareType.INDEX, index.name, sub_logs, parents)
            )
        for fk in entity.foreign_keys:
            compare_foreign_key(
                entity,
                fk,
                table,
                self.default_schema,
                self._logger(CompareType.FOREIGN_KEY, fk.name, sub_logs, parents),
            )


def compare_models_to_database(
    models: list[DeclaredModel],
    database: DatabaseModel,
    config: CompareConfig | None = None,
    dialect: TypeEquivalence | None = None,
) -> CompareResult:
    """Compare several declared models against one database.

    Each model gets its own root entry. When ``config.check_extra_tables`` is
    set, tables no entity of any model maps to are reported as
    ``EXTRA IN DATABASE`` under a root entry named after the database.

    Args:
        models: Declared models, compared in order.
        database: Discovered schema.
        config: Comparison options.
        dialect: Type naming rules (see ``SchemaComparer``).

    Returns:
        ``CompareResult`` holding every root entry.
    """
    config = config or CompareConfig()
    logs: list[CompareLog] = []
    used: set[tuple[str | None, str]] = set()

    for model in models:
        comparer = SchemaComparer(model, config, dialect)
        comparer.compare_model_to_database(database)
        logs.extend(comparer.logs)
        for entity in model.entities:
            table = comparer.table_for(entity, database)
            if table is not None:
                used.add((table.schema_name, table.name))

    if config.check_extra_tables:
        root = CompareLog(
            type=CompareType.MODEL,
            state=CompareState.OK,
            name=database.database_name or "Database",
        )
        table_logger = CompareLogger(
            CompareType.TABLE,
            root.name,
            root.sub_logs,
            ignore=config.ignore,
            ignore_errors=config.ignore_errors,
        )
        ignored = set(config.tables_to_ignore)
        for table in database.tables:
            if (table.schema_name, table.name) in used:
                continue
            if table.name in ignored or table.full_name in ignored:
                continue
            table_logger.extra_in_database(
                table.full_name, CompareAttribute.TABLE_NAME, name=table.full_name
            )
        logs.append(root)

    return CompareResult(has_errors=has_errors(logs), logs=logs)
