"""Shared fixtures: a small SQL Server style model and its database.

``MyEntity`` maps to ``dbo.MyEntities``: an identity key, a date, an int and
a nullable string. The default declared model and the default database
describe the same schema; tests change one side to provoke a difference.
"""

import pytest

from db_schema_compare.compare.options import CompareConfig
from db_schema_compare.schema.declared import (
    DeclaredEntity,
    DeclaredKey,
    DeclaredModel,
    DeclaredProperty,
    ValueGenerated,
)
from db_schema_compare.schema.models import (
    DatabaseColumn,
    DatabaseModel,
    DatabasePrimaryKey,
    DatabaseTable,
)


def build_declared_model() -> DeclaredModel:
    return DeclaredModel(
        name="MyEntityDbContext",
        entities=[
            DeclaredEntity(
                name="MyEntity",
                table="MyEntities",
                properties=[
                    DeclaredProperty(
                        name="MyEntityId",
                        scalar_type="int",
                        value_generated=ValueGenerated.ON_ADD,
                    ),
                    DeclaredProperty(name="MyDateTime", scalar_type="datetime"),
                    DeclaredProperty(name="MyInt", scalar_type="int"),
                    DeclaredProperty(name="MyString", scalar_type="str", is_nullable=True),
                ],
                primary_key=DeclaredKey(name="PK_MyEntites", properties=["MyEntityId"]),
            )
        ],
    )


def build_database() -> DatabaseModel:
    return DatabaseModel(
        database_name="MyEntityDb",
        default_schema="dbo",
        tables=[
            DatabaseTable(
                schema="dbo",
                name="MyEntities",
                columns=[
                    DatabaseColumn(
                        name="MyEntityId", store_type="int", is_nullable=False, is_identity=True
                    ),
                    DatabaseColumn(name="MyDateTime", store_type="datetime2", is_nullable=False),
                    DatabaseColumn(name="MyInt", store_type="int", is_nullable=False),
                    DatabaseColumn(name="MyString", store_type="nvarchar(max)", is_nullable=True),
                ],
                primary_key=DatabasePrimaryKey(name="PK_MyEntites", columns=["MyEntityId"]),
            )
        ],
    )


@pytest.fixture
def declared_model() -> DeclaredModel:
    """Fresh declared model; safe to modify."""
    return build_declared_model()


@pytest.fixture
def database() -> DatabaseModel:
    """Fresh database model; safe to modify."""
    return build_database()


@pytest.fixture
def sqlserver_config() -> CompareConfig:
    return CompareConfig(dialect="sqlserver")


def entity_of(model: DeclaredModel, name: str = "MyEntity") -> DeclaredEntity:
    return next(e for e in model.entities if e.name == name)


def table_of(database: DatabaseModel, name: str = "MyEntities") -> DatabaseTable:
    return next(t for t in database.tables if t.name == name)
