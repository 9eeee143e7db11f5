"""Primary key, index and foreign key comparison.

Uses a PostgreSQL-flavoured ``OrderLine`` entity with a composite key so that
ordering and extra-column cases can be exercised.
"""

import pytest

from db_schema_compare.compare.comparer import SchemaComparer
from db_schema_compare.compare.log import CompareState, CompareType, list_all_errors
from db_schema_compare.compare.options import CompareConfig, IgnoreRule
from db_schema_compare.schema.declared import (
    DeclaredEntity,
    DeclaredForeignKey,
    DeclaredIndex,
    DeclaredKey,
    DeclaredModel,
    DeclaredProperty,
)
from db_schema_compare.schema.models import (
    DatabaseColumn,
    DatabaseForeignKey,
    DatabaseIndex,
    DatabaseModel,
    DatabasePrimaryKey,
    DatabaseTable,
)


@pytest.fixture
def entity() -> DeclaredEntity:
    return DeclaredEntity(
        name="OrderLine",
        table="order_lines",
        properties=[
            DeclaredProperty(name="OrderId", column_name="order_id", scalar_type="int"),
            DeclaredProperty(name="LineNo", column_name="line_no", scalar_type="int"),
            DeclaredProperty(name="Sku", column_name="sku", column_type="varchar(20)"),
        ],
        primary_key=DeclaredKey(name="PK_Lines", properties=["OrderId", "LineNo"]),
    )


@pytest.fixture
def table() -> DatabaseTable:
    return DatabaseTable(
        schema="public",
        name="order_lines",
        columns=[
            DatabaseColumn(name="order_id", store_type="integer", is_nullable=False),
            DatabaseColumn(name="line_no", store_type="integer", is_nullable=False),
            DatabaseColumn(name="sku", store_type="character varying(20)", is_nullable=False),
        ],
        primary_key=DatabasePrimaryKey(name="PK_Lines", columns=["order_id", "line_no"]),
    )


def _errors(
    entity: DeclaredEntity, table: DatabaseTable, config: CompareConfig | None = None
) -> list[str]:
    model = DeclaredModel(name="ShopContext", entities=[entity])
    database = DatabaseModel(default_schema="public", tables=[table])
    comparer = SchemaComparer(model, config)
    comparer.compare_model_to_database(database)
    return list(list_all_errors(comparer.logs))


class TestBaseline:
    def test_matching_schema_has_no_errors(self, entity, table) -> None:
        assert _errors(entity, table) == []


# ============================================================================
# Test: primary key
# ============================================================================


class TestPrimaryKey:
    """Primary key constraint name, membership and order."""

    def test_constraint_name_differs(self, entity, table) -> None:
        table.primary_key.name = "order_lines_pkey"

        assert _errors(entity, table) == [
            "DIFFERENT: OrderLine->PrimaryKey 'PK_Lines', constraint name. "
            "Expected = PK_Lines, found = order_lines_pkey"
        ]

    def test_unnamed_declared_key_skips_name_check(self, entity, table) -> None:
        entity.primary_key.name = None
        table.primary_key.name = "order_lines_pkey"

        assert _errors(entity, table) == []

    def test_column_order_differs(self, entity, table) -> None:
        table.primary_key.columns = ["line_no", "order_id"]

        assert _errors(entity, table) == [
            "DIFFERENT: OrderLine->PrimaryKey 'PK_Lines', column order. "
            "Expected = order_id,line_no, found = line_no,order_id"
        ]

    def test_extra_key_column_in_database(self, entity, table) -> None:
        entity.primary_key.properties = ["OrderId"]

        assert _errors(entity, table) == [
            "EXTRA IN DATABASE: OrderLine->PrimaryKey 'PK_Lines', column name. "
            "Expected = <null>, found = line_no"
        ]

    def test_table_without_key(self, entity, table) -> None:
        table.primary_key = None

        assert _errors(entity, table) == [
            "NOT IN DATABASE: OrderLine->PrimaryKey 'PK_Lines', column name. Expected = order_id",
            "NOT IN DATABASE: OrderLine->PrimaryKey 'PK_Lines', column name. Expected = line_no",
        ]

    def test_ignored_missing_key_column_is_not_reported_as_extra(self, entity, table) -> None:
        entity.primary_key.properties = ["OrderId"]
        table.primary_key.columns = ["line_no"]
        config = CompareConfig(
            ignore=[IgnoreRule(type=CompareType.PRIMARY_KEY, state=CompareState.NOT_IN_DATABASE)]
        )

        assert _errors(entity, table) == [
            "NOT IN DATABASE: OrderLine->PrimaryKey 'PK_Lines', column name. Expected = order_id"
        ]
        assert _errors(entity, table, config) == []

    def test_keyless_entity_ignores_database_key(self, entity, table) -> None:
        entity.primary_key = None

        assert _errors(entity, table) == []


# ============================================================================
# Test: indexes
# ============================================================================


class TestIndexes:
    """Declared indexes are matched by name."""

    @pytest.fixture(autouse=True)
    def add_index(self, entity) -> None:
        entity.indexes.append(DeclaredIndex(name="ix_lines_sku", properties=["Sku"], is_unique=True))

    def test_missing_index(self, entity, table) -> None:
        assert _errors(entity, table) == [
            "NOT IN DATABASE: OrderLine->Index 'ix_lines_sku', index name. Expected = ix_lines_sku"
        ]

    def test_matching_index(self, entity, table) -> None:
        table.indexes.append(DatabaseIndex(name="ix_lines_sku", columns=["sku"], is_unique=True))

        assert _errors(entity, table) == []

    def test_uniqueness_differs(self, entity, table) -> None:
        table.indexes.append(DatabaseIndex(name="ix_lines_sku", columns=["sku"], is_unique=False))

        assert _errors(entity, table) == [
            "DIFFERENT: OrderLine->Index 'ix_lines_sku', unique. Expected = UNIQUE, found = NOT UNIQUE"
        ]

    def test_columns_differ(self, entity, table) -> None:
        table.indexes.append(
            DatabaseIndex(name="ix_lines_sku", columns=["sku", "line_no"], is_unique=True)
        )

        assert _errors(entity, table) == [
            "DIFFERENT: OrderLine->Index 'ix_lines_sku', column names. "
            "Expected = sku, found = sku,line_no"
        ]

    def test_extra_database_index_is_not_reported(self, entity, table) -> None:
        table.indexes.append(DatabaseIndex(name="ix_lines_sku", columns=["sku"], is_unique=True))
        table.indexes.append(DatabaseIndex(name="ix_other", columns=["line_no"], is_unique=False))

        assert _errors(entity, table) == []


# ============================================================================
# Test: foreign keys
# ============================================================================


class TestForeignKeys:
    """Declared foreign keys are matched by constraint name."""

    @pytest.fixture(autouse=True)
    def add_foreign_key(self, entity, table) -> None:
        entity.foreign_keys.append(
            DeclaredForeignKey(
                name="fk_lines_order",
                properties=["OrderId"],
                principal_table="orders",
                principal_columns=["id"],
                on_delete="CASCADE",
            )
        )
        table.foreign_keys.append(
            DatabaseForeignKey(
                name="fk_lines_order",
                columns=["order_id"],
                principal_schema="public",
                principal_table="orders",
                principal_columns=["id"],
                on_delete="CASCADE",
            )
        )

    def test_matching_foreign_key(self, entity, table) -> None:
        assert _errors(entity, table) == []

    def test_missing_foreign_key(self, entity, table) -> None:
        table.foreign_keys.clear()

        assert _errors(entity, table) == [
            "NOT IN DATABASE: OrderLine->ForeignKey 'fk_lines_order', constraint name. "
            "Expected = fk_lines_order"
        ]

    def test_principal_table_differs(self, entity, table) -> None:
        table.foreign_keys[0].principal_table = "customers"

        assert _errors(entity, table) == [
            "DIFFERENT: OrderLine->ForeignKey 'fk_lines_order', principal table. "
            "Expected = public.orders, found = public.customers"
        ]

    def test_principal_columns_differ(self, entity, table) -> None:
        table.foreign_keys[0].principal_columns = ["order_id"]

        assert _errors(entity, table) == [
            "DIFFERENT: OrderLine->ForeignKey 'fk_lines_order', column names. "
            "Expected = id, found = order_id"
        ]

    def test_delete_behavior_differs(self, entity, table) -> None:
        table.foreign_keys[0].on_delete = "NO ACTION"

        assert _errors(entity, table) == [
            "DIFFERENT: OrderLine->ForeignKey 'fk_lines_order', delete behavior. "
            "Expected = CASCADE, found = NO ACTION"
        ]

    def test_delete_behavior_spelling_is_normalized(self, entity, table) -> None:
        entity.foreign_keys[0].on_delete = "cascade"

        assert _errors(entity, table) == []

    def test_undeclared_delete_behavior_is_not_checked(self, entity, table) -> None:
        entity.foreign_keys[0].on_delete = None
        table.foreign_keys[0].on_delete = "SET NULL"

        assert _errors(entity, table) == []
