"""Key, index and foreign key comparison for one matched entity/table pair."""

from db_schema_compare.compare.log import CompareAttribute
from db_schema_compare.compare.logger import CompareLogger
from db_schema_compare.compare.values import column_lists_equal, join_columns
from db_schema_compare.schema.declared import (
    DeclaredEntity,
    DeclaredForeignKey,
    DeclaredIndex,
    DeclaredProperty,
    format_table_name,
)
from db_schema_compare.schema.models import DatabaseTable


def key_constraint_name(entity: DeclaredEntity, table: DatabaseTable) -> str:
    """Name used for primary key entries: declared, discovered, or PK_<table>."""
    if entity.primary_key and entity.primary_key.name:
        return entity.primary_key.name
    if table.primary_key and table.primary_key.name:
        return table.primary_key.name
    return f"PK_{entity.table}"


def _columns_of(entity: DeclaredEntity, property_names: list[str]) -> list[str]:
    columns = []
    for name in property_names:
        prop = entity.find_property(name)
        columns.append(prop.column if prop else name)
    return columns


class PrimaryKeyComparer:
    """Checks the primary key alongside the property walk.

    The comparer calls ``check_name`` before the properties, ``check_property``
    after each matched property, and ``finish`` once all properties are done,
    so key leaves interleave with property leaves in visiting order.
    """

    def __init__(self, entity: DeclaredEntity, table: DatabaseTable, logger: CompareLogger):
        self.entity = entity
        self.table = table
        self.logger = logger
        self.declared_columns = _columns_of(entity, entity.key_property_names())
        self.found_columns = list(table.primary_key.columns) if table.primary_key else []
        # Set even when an ignore rule keeps the entry out of the log
        self.found_difference = False

    @property
    def active(self) -> bool:
        return self.entity.primary_key is not None

    def check_name(self) -> None:
        if not self.active or self.table.primary_key is None:
            return
        expected = self.entity.primary_key.name
        found = self.table.primary_key.name
        if expected and found:
            if self.logger.check_different(expected, found, CompareAttribute.CONSTRAINT_NAME):
                self.found_difference = True

    def check_property(self, prop: DeclaredProperty) -> bool:
        """Report a declared key column that is not part of the discovered key."""
        if not self.active or prop.name not in self.entity.key_property_names():
            return False
        if prop.column in self.found_columns:
            return False
        self.logger.not_in_database(prop.column, CompareAttribute.COLUMN_NAME)
        self.found_difference = True
        return True

    def finish(self) -> None:
        if not self.active:
            return
        if not self.found_difference:
            extra = [c for c in self.found_columns if c not in self.declared_columns]
            for column in extra:
                self.logger.extra_in_database(column, CompareAttribute.COLUMN_NAME)
            if extra:
                self.found_difference = True
            else:
                self.found_difference = self.logger.check_different(
                    join_columns(self.declared_columns),
                    join_columns(self.found_columns),
                    CompareAttribute.COLUMN_ORDER,
                )
        if not self.found_difference:
            self.logger.mark_as_ok(join_columns(self.declared_columns))


def compare_index(
    entity: DeclaredEntity,
    index: DeclaredIndex,
    table: DatabaseTable,
    logger: CompareLogger,
) -> bool:
    """Compare one declared index with the discovered index of the same name.

    Returns:
        True if a difference was recorded.
    """
    found = next((i for i in table.indexes if i.name == index.name), None)
    if found is None:
        logger.not_in_database(index.name, CompareAttribute.INDEX_NAME, name=index.name)
        return True

    expected_columns = _columns_of(entity, index.properties)
    error = logger.check_different(
        join_columns(expected_columns),
        join_columns(found.columns),
        CompareAttribute.COLUMN_NAMES,
        name=index.name,
    )
    error |= logger.check_different(
        _unique_as_string(index.is_unique),
        _unique_as_string(found.is_unique),
        CompareAttribute.UNIQUE,
        name=index.name,
    )
    if not error:
        logger.mark_as_ok(index.name, name=index.name)
    return error


def compare_foreign_key(
    entity: DeclaredEntity,
    fk: DeclaredForeignKey,
    table: DatabaseTable,
    default_schema: str | None,
    logger: CompareLogger,
) -> bool:
    """Compare one declared foreign key with the discovered constraint of the same name.

    Principal tables are compared schema-qualified, with *default_schema*
    filled in on whichever side does not name a schema. Delete behaviour is
    only checked when the declared key states one.

    Returns:
        True if a difference was recorded.
    """
    found = next((f for f in table.foreign_keys if f.name == fk.name), None)
    if found is None:
        logger.not_in_database(fk.name, CompareAttribute.CONSTRAINT_NAME, name=fk.name)
        return True

    error = logger.check_different(
        join_columns(_columns_of(entity, fk.properties)),
        join_columns(found.columns),
        CompareAttribute.COLUMN_NAMES,
        name=fk.name,
    )
    error |= logger.check_different(
        format_table_name(fk.principal_schema or default_schema, fk.principal_table),
        format_table_name(found.principal_schema or default_schema, found.principal_table),
        CompareAttribute.PRINCIPAL_TABLE,
        name=fk.name,
    )
    if fk.principal_columns and not column_lists_equal(fk.principal_columns, found.principal_columns):
        logger.check_different(
            join_columns(fk.principal_columns),
            join_columns(found.principal_columns),
            CompareAttribute.COLUMN_NAMES,
            name=fk.name,
        )
        error = True
    if fk.on_delete is not None:
        error |= logger.check_different(
            _delete_rule(fk.on_delete),
            _delete_rule(found.on_delete),
            CompareAttribute.DELETE_BEHAVIOR,
            name=fk.name,
        )
    if not error:
        logger.mark_as_ok(fk.name, name=fk.name)
    return error


def _unique_as_string(is_unique: bool) -> str:
    return "UNIQUE" if is_unique else "NOT UNIQUE"


def _delete_rule(rule: str | None) -> str:
    # information_schema spells the default as NO ACTION
    return " ".join((rule or "NO ACTION").upper().replace("_", " ").split())
