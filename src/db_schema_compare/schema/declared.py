"""Pydantic models for the declared (expected) schema.

A ``DeclaredModel`` is what the mapping code says the database should look
like: entities mapped to tables, properties mapped to columns, keys, indexes
and foreign keys. It is built by a provider (``schema.metadata`` for
SQLAlchemy, or loaded from JSON) and handed to the comparer read-only.
"""

from enum import Enum

from pydantic import BaseModel, Field


class DeclaredModelError(ValueError):
    """Raised when the declared model contradicts itself.

    For example a primary key naming a property the entity does not have.
    This is a configuration error, not a schema difference.
    """


class ValueGenerated(str, Enum):
    """When a column's value is produced by the database."""

    NEVER = "Never"
    ON_ADD = "OnAdd"
    ON_UPDATE = "OnUpdate"
    ON_ADD_OR_UPDATE = "OnAddOrUpdate"


# ============================================================================
# Declared Models
# ============================================================================


class DeclaredProperty(BaseModel):
    """A mapped property and the column it expects.

    Example:
        >>> prop = DeclaredProperty(name="MyInt", scalar_type="int")
        >>> prop.column
        'MyInt'
        >>> prop.value_generated
        <ValueGenerated.NEVER: 'Never'>
    """

    name: str
    column_name: str | None = None
    scalar_type: str = "str"
    column_type: str | None = None  # explicit store type override
    is_nullable: bool = False
    value_generated: ValueGenerated = ValueGenerated.NEVER
    default_value_sql: str | None = None
    computed_column_sql: str | None = None

    @property
    def column(self) -> str:
        """Column name, falling back to the property name."""
        return self.column_name or self.name


class DeclaredKey(BaseModel):
    """Primary key: ordered property names plus the constraint name."""

    name: str | None = None
    properties: list[str] = Field(default_factory=list)


class DeclaredIndex(BaseModel):
    """A declared index over one or more properties."""

    name: str
    properties: list[str] = Field(default_factory=list)
    is_unique: bool = False


class DeclaredForeignKey(BaseModel):
    """A declared foreign key from this entity to a principal table."""

    name: str
    properties: list[str] = Field(default_factory=list)
    principal_schema: str | None = None
    principal_table: str
    principal_columns: list[str] = Field(default_factory=list)
    on_delete: str | None = None  # CASCADE, SET NULL, NO ACTION, ...


class DeclaredEntity(BaseModel):
    """An entity and the table it is mapped to."""

    name: str
    schema_name: str | None = Field(default=None, alias="schema")
    table: str
    properties: list[DeclaredProperty] = Field(default_factory=list)
    primary_key: DeclaredKey | None = None
    indexes: list[DeclaredIndex] = Field(default_factory=list)
    foreign_keys: list[DeclaredForeignKey] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @property
    def full_table_name(self) -> str:
        """Table name, schema-qualified when a schema was declared."""
        return format_table_name(self.schema_name, self.table)

    def find_property(self, name: str) -> DeclaredProperty | None:
        """Return the property called *name*, or None."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def key_property_names(self) -> list[str]:
        """Primary key property names in key order (empty if keyless)."""
        return list(self.primary_key.properties) if self.primary_key else []

    def ordered_properties(self) -> list[DeclaredProperty]:
        """Key properties first (in key order), then the rest as declared."""
        key_names = self.key_property_names()
        key_props = [self.find_property(name) for name in key_names]
        rest = [p for p in self.properties if p.name not in key_names]
        return [p for p in key_props if p is not None] + rest

    def validate_references(self) -> None:
        """Check that keys, indexes and foreign keys name real properties.

        Raises:
            DeclaredModelError: On a duplicate property or dangling reference.
        """
        seen: set[str] = set()
        for prop in self.properties:
            if prop.name in seen:
                raise DeclaredModelError(
                    f"Entity '{self.name}' declares property '{prop.name}' twice"
                )
            seen.add(prop.name)

        references: list[tuple[str, str]] = []
        if self.primary_key:
            references += [("primary key", p) for p in self.primary_key.properties]
        for index in self.indexes:
            references += [(f"index '{index.name}'", p) for p in index.properties]
        for fk in self.foreign_keys:
            references += [(f"foreign key '{fk.name}'", p) for p in fk.properties]

        for owner, prop_name in references:
            if prop_name not in seen:
                raise DeclaredModelError(
                    f"Entity '{self.name}': {owner} refers to unknown "
                    f"property '{prop_name}'"
                )


class DeclaredModel(BaseModel):
    """Complete declared schema for one mapping context.

    Example:
        >>> model = DeclaredModel(name="ShopContext")
        >>> model.entities
        []
    """

    name: str
    default_schema: str | None = None
    entities: list[DeclaredEntity] = Field(default_factory=list)

    def validate_references(self) -> None:
        """Validate every entity (see ``DeclaredEntity.validate_references``)."""
        for entity in self.entities:
            entity.validate_references()


def format_table_name(schema: str | None, table: str) -> str:
    """Render ``schema.table``, or just ``table`` when there is no schema."""
    return f"{schema}.{table}" if schema else table
