"""Per-property comparison rules.

Each rule checks one attribute of a declared property against its matched
column and writes at most one entry. ``PROPERTY_RULES`` is the fixed order
the comparer runs them in; that order is the order leaves appear in the log.
"""

from collections.abc import Callable
from dataclasses import dataclass

from db_schema_compare.compare.dialects import TypeEquivalence
from db_schema_compare.compare.log import CompareAttribute
from db_schema_compare.compare.logger import CompareLogger
from db_schema_compare.compare.options import CompareConfig
from db_schema_compare.compare.values import (
    infer_value_generated,
    nullable_as_string,
    remove_unnecessary_brackets,
    sql_equal,
    strings_equal,
)
from db_schema_compare.schema.declared import DeclaredProperty
from db_schema_compare.schema.models import DatabaseColumn


@dataclass(frozen=True)
class PropertyPair:
    """A declared property and the column it was matched to."""

    prop: DeclaredProperty
    column: DatabaseColumn
    dialect: TypeEquivalence
    config: CompareConfig

    @property
    def expected_type(self) -> str:
        return self.prop.column_type or self.dialect.canonical_type(self.prop.scalar_type)


PropertyRule = Callable[[PropertyPair, CompareLogger], bool]


def check_nullability(pair: PropertyPair, logger: CompareLogger) -> bool:
    return logger.check_different(
        nullable_as_string(pair.prop.is_nullable),
        nullable_as_string(pair.column.is_nullable),
        CompareAttribute.NULLABILITY,
    )


def check_column_name(pair: PropertyPair, logger: CompareLogger) -> bool:
    # The column was looked up by this name, so this only guards the lookup
    return logger.check_different(
        pair.prop.column, pair.column.name, CompareAttribute.COLUMN_NAME, strings_equal
    )


def check_column_type(pair: PropertyPair, logger: CompareLogger) -> bool:
    return logger.check_different(
        pair.expected_type,
        pair.column.store_type,
        CompareAttribute.COLUMN_TYPE,
        pair.dialect.types_equivalent,
    )


def check_default_value_sql(pair: PropertyPair, logger: CompareLogger) -> bool:
    return logger.check_different(
        remove_unnecessary_brackets(pair.prop.default_value_sql),
        remove_unnecessary_brackets(pair.column.default_value_sql),
        CompareAttribute.DEFAULT_VALUE_SQL,
        sql_equal,
    )


def check_computed_column_sql(pair: PropertyPair, logger: CompareLogger) -> bool:
    return logger.check_different(
        remove_unnecessary_brackets(pair.prop.computed_column_sql),
        remove_unnecessary_brackets(pair.column.computed_column_sql),
        CompareAttribute.COMPUTED_COLUMN_SQL,
        sql_equal,
    )


def check_value_generated(pair: PropertyPair, logger: CompareLogger) -> bool:
    found = infer_value_generated(pair.column, pair.config.default_value_implies_on_add)
    return logger.check_different(
        pair.prop.value_generated.value,
        found.value,
        CompareAttribute.VALUE_GENERATED,
    )


PROPERTY_RULES: list[PropertyRule] = [
    check_nullability,
    check_column_name,
    check_column_type,
    check_default_value_sql,
    check_computed_column_sql,
    check_value_generated,
]


def compare_property(
    pair: PropertyPair,
    logger: CompareLogger,
    rules: list[PropertyRule] | None = None,
) -> bool:
    """Run every rule against *pair*.

    All rules run even after one fails, so one property can produce several
    leaves.

    Returns:
        True if any rule found a difference.
    """
    results = [rule(pair, logger) for rule in (rules or PROPERTY_RULES)]
    return any(results)
