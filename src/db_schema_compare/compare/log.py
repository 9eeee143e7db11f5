"""The diff log: a tree of ``CompareLog`` entries built by one comparison.

Every check the comparer performs appends one entry. Entries that describe a
container (the declared model, an entity) hold child entries in ``sub_logs``.
Failure is decided by scanning every entry for a state other than ``Ok``;
the state of a parent is informational only.

Usage:
    from db_schema_compare.compare.log import list_all_errors

    for error in list_all_errors(result.logs):
        print(error)
"""

import re
from collections.abc import Iterator, Sequence
from enum import Enum

from pydantic import BaseModel, Field

NULL_TOKEN = "<null>"


def _split_camel_case(value: str) -> str:
    return re.sub(r"(?<=[a-z])(?=[A-Z])", " ", value)


class CompareState(str, Enum):
    """Severity of one log entry."""

    OK = "Ok"
    NOT_IN_DATABASE = "NotInDatabase"
    EXTRA_IN_DATABASE = "ExtraInDatabase"
    DIFFERENT = "Different"

    @property
    def word(self) -> str:
        """Upper-case display word, e.g. ``NOT IN DATABASE``."""
        return _split_camel_case(self.value).upper()


class CompareType(str, Enum):
    """What kind of element a log entry describes."""

    MODEL = "Model"
    ENTITY = "Entity"
    TABLE = "Table"
    PROPERTY = "Property"
    COLUMN = "Column"
    PRIMARY_KEY = "PrimaryKey"
    INDEX = "Index"
    FOREIGN_KEY = "ForeignKey"
    ATTRIBUTE = "Attribute"


class CompareAttribute(str, Enum):
    """Which attribute a leaf diagnostic checked."""

    NOT_SET = "NotSet"
    TABLE_NAME = "TableName"
    COLUMN_NAME = "ColumnName"
    COLUMN_TYPE = "ColumnType"
    NULLABILITY = "Nullability"
    DEFAULT_VALUE_SQL = "DefaultValueSql"
    COMPUTED_COLUMN_SQL = "ComputedColumnSql"
    VALUE_GENERATED = "ValueGenerated"
    CONSTRAINT_NAME = "ConstraintName"
    COLUMN_ORDER = "ColumnOrder"
    INDEX_NAME = "IndexName"
    COLUMN_NAMES = "ColumnNames"
    UNIQUE = "Unique"
    PRINCIPAL_TABLE = "PrincipalTable"
    DELETE_BEHAVIOR = "DeleteBehavior"

    @property
    def label(self) -> str:
        """Lower-case display label, e.g. ``default value sql``."""
        return _split_camel_case(self.value).lower()


class CompareLog(BaseModel):
    """One entry in the diff log.

    Example:
        >>> log = CompareLog(
        ...     type=CompareType.PROPERTY,
        ...     state=CompareState.DIFFERENT,
        ...     name="MyString",
        ...     attribute=CompareAttribute.NULLABILITY,
        ...     expected="NOT NULL",
        ...     found="NULL",
        ... )
        >>> str(log)
        "DIFFERENT: Property 'MyString', nullability. Expected = NOT NULL, found = NULL"
    """

    type: CompareType
    state: CompareState
    name: str
    attribute: CompareAttribute = CompareAttribute.NOT_SET
    expected: str | None = None
    found: str | None = None
    sub_logs: list["CompareLog"] = Field(default_factory=list)

    @property
    def is_error(self) -> bool:
        return self.state != CompareState.OK

    def __str__(self) -> str:
        result = f"{self.state.word}: {self.type.value} '{self.name}'"
        if self.state == CompareState.OK:
            return result
        if self.attribute != CompareAttribute.NOT_SET:
            result += f", {self.attribute.label}"
        if self.expected is not None or self.found is not None:
            result += f". Expected = {self.expected if self.expected is not None else NULL_TOKEN}"
        if self.found is not None or self.state == CompareState.DIFFERENT:
            result += f", found = {self.found if self.found is not None else NULL_TOKEN}"
        return result


def list_all_errors(logs: Sequence[CompareLog]) -> Iterator[str]:
    """Yield every error in the log tree, pre-order, as a rendered message.

    Top-level entries are the per-model roots; their names are not part of
    the path prefix, so an entity-level error renders as ``Entity 'X'`` and
    a property error under it as ``X->Property 'Y'``.

    Args:
        logs: Root entries, as held by ``CompareResult.logs``.

    Yields:
        Messages such as
        ``NOT IN DATABASE: MyEntity->Property 'ShadowProp', column name. Expected = ShadowProp``.
    """
    yield from _walk(logs, [], root=True)


def _walk(logs: Sequence[CompareLog], parents: list[str], root: bool) -> Iterator[str]:
    for log in logs:
        if log.is_error:
            yield render_error(log, parents)
        if log.sub_logs:
            child_parents = parents if root else parents + [log.name]
            yield from _walk(log.sub_logs, child_parents, root=False)


def render_error(log: CompareLog, parents: Sequence[str] = ()) -> str:
    """Render *log* with the names of its ancestors as a path prefix."""
    prefix = "".join(f"{name}->" for name in parents)
    state_word, _, rest = str(log).partition(": ")
    return f"{state_word}: {prefix}{rest}"


def has_errors(logs: Sequence[CompareLog]) -> bool:
    """True if any entry anywhere in the tree is not ``Ok``."""
    return any(log.is_error or has_errors(log.sub_logs) for log in logs)


def count_entries(logs: Sequence[CompareLog]) -> int:
    """Total number of entries in the tree."""
    return sum(1 + count_entries(log.sub_logs) for log in logs)
