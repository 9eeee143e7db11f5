"""Options for one comparison run (the [compare] section of db.toml)."""

from pydantic import BaseModel, Field

from db_schema_compare.compare.log import (
    CompareAttribute,
    CompareLog,
    CompareState,
    CompareType,
)


DEFAULT_DIALECT = "postgres"


class IgnoreRule(BaseModel):
    """A known difference that should not be recorded.

    Unset fields match anything.

    Example:
        >>> rule = IgnoreRule(type="Property", state="Different", attribute="ColumnType")
        >>> rule.name is None
        True
    """

    type: CompareType
    state: CompareState
    name: str | None = None
    attribute: CompareAttribute | None = None

    def matches(self, log: CompareLog) -> bool:
        return (
            self.type == log.type
            and self.state == log.state
            and (self.name is None or self.name == log.name)
            and (self.attribute is None or self.attribute == log.attribute)
        )


class CompareConfig(BaseModel):
    """Options for one comparison run."""

    dialect: str | None = None  # falls back to DEFAULT_DIALECT
    default_schema: str | None = None  # overrides the dialect default
    check_extra_tables: bool = False
    tables_to_ignore: list[str] = Field(default_factory=list)
    default_value_implies_on_add: bool = True
    sequence_default_is_identity: bool = True
    ignore: list[IgnoreRule] = Field(default_factory=list)
    ignore_errors: list[str] = Field(default_factory=list)  # rendered messages
