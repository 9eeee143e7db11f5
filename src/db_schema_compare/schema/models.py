"""Pydantic models for the discovered (actual) database schema.

These are produced by an introspection provider (``SchemaIntrospector`` for
PostgreSQL, or a JSON snapshot) and are never mutated by the comparer.
"""

from pydantic import BaseModel, Field

from db_schema_compare.schema.declared import format_table_name


# ============================================================================
# Schema Introspection Models
# ============================================================================


class DatabaseColumn(BaseModel):
    """Schema for a database column.

    Example:
        >>> col = DatabaseColumn(name="id", store_type="int", is_identity=True)
        >>> col.is_nullable
        True
    """

    name: str
    store_type: str
    is_nullable: bool = True
    is_identity: bool = False
    default_value_sql: str | None = None
    computed_column_sql: str | None = None


class DatabasePrimaryKey(BaseModel):
    """Primary key constraint with its ordered column list."""

    name: str | None = None
    columns: list[str] = Field(default_factory=list)


class DatabaseIndex(BaseModel):
    """Schema for a database index (primary key index excluded)."""

    name: str
    columns: list[str] = Field(default_factory=list)
    is_unique: bool = False


class DatabaseForeignKey(BaseModel):
    """Schema for a foreign key constraint."""

    name: str
    columns: list[str] = Field(default_factory=list)
    principal_schema: str | None = None
    principal_table: str
    principal_columns: list[str] = Field(default_factory=list)
    on_delete: str | None = None


class DatabaseTable(BaseModel):
    """Schema for a database table."""

    schema_name: str | None = Field(default=None, alias="schema")
    name: str
    columns: list[DatabaseColumn] = Field(default_factory=list)
    primary_key: DatabasePrimaryKey | None = None
    indexes: list[DatabaseIndex] = Field(default_factory=list)
    foreign_keys: list[DatabaseForeignKey] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @property
    def full_name(self) -> str:
        return format_table_name(self.schema_name, self.name)

    def column_map(self) -> dict[str, DatabaseColumn]:
        """Columns keyed by name."""
        return {col.name: col for col in self.columns}


class DatabaseModel(BaseModel):
    """Complete discovered database schema."""

    database_name: str | None = None
    default_schema: str | None = None
    tables: list[DatabaseTable] = Field(default_factory=list)

    def find_table(
        self, schema: str | None, name: str, fallback_schema: str | None = None
    ) -> DatabaseTable | None:
        """Find a table by exact (schema, name) match.

        A table with no schema recorded is treated as living in
        ``default_schema``, or in *fallback_schema* when the model has none.
        """
        for table in self.tables:
            table_schema = table.schema_name or self.default_schema or fallback_schema
            if table.name == name and table_schema == schema:
                return table
        return None
