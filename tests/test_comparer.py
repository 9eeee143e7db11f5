"""Comparer behaviour beyond single-entity attribute checks.

Covers declared model validation, ignore rules, extra-table detection and
comparing several models against one database.
"""

import pytest

from conftest import build_declared_model, entity_of, table_of
from db_schema_compare.compare.comparer import (
    CompareResult,
    SchemaComparer,
    compare_models_to_database,
)
from db_schema_compare.compare.log import (
    CompareAttribute,
    CompareState,
    CompareType,
    list_all_errors,
)
from db_schema_compare.compare.options import CompareConfig, IgnoreRule
from db_schema_compare.schema.declared import (
    DeclaredEntity,
    DeclaredIndex,
    DeclaredKey,
    DeclaredModel,
    DeclaredModelError,
    DeclaredProperty,
)
from db_schema_compare.schema.models import DatabaseColumn, DatabaseTable

DATETIME_TYPE_ERROR = (
    "DIFFERENT: MyEntity->Property 'MyDateTime', column type. "
    "Expected = datetime2, found = datetime"
)


def _audit_table() -> DatabaseTable:
    return DatabaseTable(
        schema="dbo",
        name="Audit",
        columns=[DatabaseColumn(name="AuditId", store_type="int", is_nullable=False)],
    )


def _audit_model() -> DeclaredModel:
    return DeclaredModel(
        name="AuditDbContext",
        entities=[
            DeclaredEntity(
                name="Audit",
                table="Audit",
                properties=[DeclaredProperty(name="AuditId", scalar_type="int")],
            )
        ],
    )


# ============================================================================
# Test: declared model validation
# ============================================================================


class TestDeclaredModelValidation:
    """Malformed declared models are rejected before any comparison."""

    def test_unknown_key_property(self, declared_model, sqlserver_config) -> None:
        entity_of(declared_model).primary_key = DeclaredKey(properties=["Missing"])

        with pytest.raises(DeclaredModelError, match="unknown property 'Missing'"):
            SchemaComparer(declared_model, sqlserver_config)

    def test_unknown_index_property(self, declared_model, sqlserver_config) -> None:
        entity_of(declared_model).indexes.append(DeclaredIndex(name="ix_x", properties=["Nope"]))

        with pytest.raises(DeclaredModelError, match="index 'ix_x'"):
            SchemaComparer(declared_model, sqlserver_config)

    def test_duplicate_property(self, declared_model, sqlserver_config) -> None:
        entity_of(declared_model).properties.append(DeclaredProperty(name="MyInt"))

        with pytest.raises(DeclaredModelError, match="'MyInt' twice"):
            SchemaComparer(declared_model, sqlserver_config)

    def test_error_is_a_value_error(self) -> None:
        assert issubclass(DeclaredModelError, ValueError)


# ============================================================================
# Test: ignore rules
# ============================================================================


class TestIgnoreRules:
    """Known differences can be suppressed from the log."""

    @pytest.fixture(autouse=True)
    def datetime_column(self, database) -> None:
        table_of(database).columns[1].store_type = "datetime"

    def test_difference_is_reported_without_rules(self, declared_model, database, sqlserver_config) -> None:
        comparer = SchemaComparer(declared_model, sqlserver_config)

        assert comparer.compare_model_to_database(database) is True
        assert list(list_all_errors(comparer.logs)) == [DATETIME_TYPE_ERROR]

    def test_rule_by_attribute(self, declared_model, database) -> None:
        config = CompareConfig(
            dialect="sqlserver",
            ignore=[
                IgnoreRule(
                    type=CompareType.PROPERTY,
                    state=CompareState.DIFFERENT,
                    attribute=CompareAttribute.COLUMN_TYPE,
                )
            ],
        )
        comparer = SchemaComparer(declared_model, config)

        assert comparer.compare_model_to_database(database) is False

    def test_rule_for_another_name_does_not_match(self, declared_model, database) -> None:
        config = CompareConfig(
            dialect="sqlserver",
            ignore=[IgnoreRule(type=CompareType.PROPERTY, state=CompareState.DIFFERENT, name="MyInt")],
        )
        comparer = SchemaComparer(declared_model, config)

        assert comparer.compare_model_to_database(database) is True

    def test_rule_from_plain_values(self) -> None:
        rule = IgnoreRule.model_validate(
            {"type": "Property", "state": "Different", "attribute": "ColumnType"}
        )
        assert rule.type == CompareType.PROPERTY
        assert rule.name is None

    def test_ignore_by_rendered_message(self, declared_model, database) -> None:
        config = CompareConfig(dialect="sqlserver", ignore_errors=[DATETIME_TYPE_ERROR])
        comparer = SchemaComparer(declared_model, config)

        assert comparer.compare_model_to_database(database) is False


# ============================================================================
# Test: extra tables
# ============================================================================


class TestExtraTables:
    """Tables no declared entity maps to."""

    def test_not_checked_by_default(self, declared_model, database, sqlserver_config) -> None:
        database.tables.append(_audit_table())

        result = compare_models_to_database([declared_model], database, sqlserver_config)

        assert result.has_errors is False
        assert len(result.logs) == 1

    def test_reported_when_enabled(self, declared_model, database) -> None:
        database.tables.append(_audit_table())
        config = CompareConfig(dialect="sqlserver", check_extra_tables=True)

        result = compare_models_to_database([declared_model], database, config)

        assert result.has_errors is True
        assert result.logs[-1].name == "MyEntityDb"
        assert result.errors() == [
            "EXTRA IN DATABASE: Table 'dbo.Audit', table name. Expected = <null>, found = dbo.Audit"
        ]

    @pytest.mark.parametrize("ignored", ["Audit", "dbo.Audit"])
    def test_tables_to_ignore(self, declared_model, database, ignored: str) -> None:
        database.tables.append(_audit_table())
        config = CompareConfig(dialect="sqlserver", check_extra_tables=True, tables_to_ignore=[ignored])

        result = compare_models_to_database([declared_model], database, config)

        assert result.has_errors is False

    def test_table_used_by_another_model_is_not_extra(self, declared_model, database) -> None:
        database.tables.append(_audit_table())
        config = CompareConfig(dialect="sqlserver", check_extra_tables=True)

        result = compare_models_to_database([declared_model, _audit_model()], database, config)

        assert result.has_errors is False
        assert [log.name for log in result.logs] == ["MyEntityDbContext", "AuditDbContext", "MyEntityDb"]


# ============================================================================
# Test: schema resolution and independence
# ============================================================================


class TestComparerBehaviour:
    def test_config_default_schema_overrides_dialect(self, declared_model, database) -> None:
        config = CompareConfig(dialect="sqlserver", default_schema="sales")
        comparer = SchemaComparer(declared_model, config)

        assert comparer.default_schema == "sales"
        comparer.compare_model_to_database(database)
        assert list(list_all_errors(comparer.logs)) == [
            "NOT IN DATABASE: Entity 'MyEntity', table name. Expected = MyEntities"
        ]

    def test_model_default_schema_used_before_dialect(self, declared_model, sqlserver_config) -> None:
        declared_model.default_schema = "app"

        assert SchemaComparer(declared_model, sqlserver_config).default_schema == "app"

    def test_unknown_dialect(self, declared_model) -> None:
        with pytest.raises(KeyError, match="Unknown dialect 'oracle'"):
            SchemaComparer(declared_model, CompareConfig(dialect="oracle"))

    def test_comparers_share_inputs_independently(self, database) -> None:
        model = build_declared_model()
        strict = SchemaComparer(model, CompareConfig(dialect="sqlserver", default_schema="sales"))
        relaxed = SchemaComparer(model, CompareConfig(dialect="sqlserver"))

        assert strict.compare_model_to_database(database) is True
        assert relaxed.compare_model_to_database(database) is False
        assert strict.has_errors is True
        assert relaxed.has_errors is False

    def test_each_run_starts_a_fresh_log(self, declared_model, database, sqlserver_config) -> None:
        comparer = SchemaComparer(declared_model, sqlserver_config)
        table_of(database).columns[1].store_type = "datetime"
        comparer.compare_model_to_database(database)

        table_of(database).columns[1].store_type = "datetime2"

        assert comparer.compare_model_to_database(database) is False
        assert len(comparer.logs) == 1

    def test_result_snapshot(self, declared_model, database, sqlserver_config) -> None:
        comparer = SchemaComparer(declared_model, sqlserver_config)
        comparer.compare_model_to_database(database)

        result = comparer.result()

        assert isinstance(result, CompareResult)
        assert result.has_errors is False
        assert result.errors() == []
        assert result.logs[0].name == "MyEntityDbContext"

    def test_schemaless_table_uses_comparer_default_schema(
        self, declared_model, database, sqlserver_config
    ) -> None:
        database.default_schema = None
        table_of(database).schema_name = None
        comparer = SchemaComparer(declared_model, sqlserver_config)

        assert comparer.table_for(entity_of(declared_model), database) is table_of(database)
        assert comparer.compare_model_to_database(database) is False

    def test_schemaless_table_does_not_match_other_schema(self, declared_model, database) -> None:
        database.default_schema = None
        table_of(database).schema_name = None
        entity_of(declared_model).schema_name = "sales"
        comparer = SchemaComparer(declared_model, CompareConfig(dialect="sqlserver"))

        comparer.compare_model_to_database(database)
        assert list(list_all_errors(comparer.logs)) == [
            "NOT IN DATABASE: Entity 'MyEntity', table name. Expected = sales.MyEntities"
        ]
