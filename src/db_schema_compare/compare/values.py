"""Small equivalence predicates used by the comparison rules.

Pure functions over strings and column metadata; no logging, no state.
"""

from db_schema_compare.schema.declared import ValueGenerated
from db_schema_compare.schema.models import DatabaseColumn


def normalize_text(value: str | None) -> str | None:
    """Collapse empty or whitespace-only text to None, strip the rest."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def strings_equal(expected: str | None, found: str | None) -> bool:
    """String equality where None and empty text are the same thing."""
    return normalize_text(expected) == normalize_text(found)


def remove_unnecessary_brackets(sql: str | None) -> str | None:
    """Strip parentheses that enclose the whole expression.

    SQL Server stores a default of ``123`` as ``((123))``; both mean the same.

    Example:
        >>> remove_unnecessary_brackets("((123))")
        '123'
        >>> remove_unnecessary_brackets("(a) + (b)")
        '(a) + (b)'
    """
    sql = normalize_text(sql)
    while sql and sql.startswith("(") and _closing_bracket(sql) == len(sql) - 1:
        sql = sql[1:-1].strip()
    return sql or None


def _closing_bracket(sql: str) -> int:
    """Index of the bracket that closes the one at position 0, or -1."""
    depth = 0
    for index, char in enumerate(sql):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


def sql_equal(expected: str | None, found: str | None) -> bool:
    """Compare default/computed SQL text, ignoring enclosing brackets and case."""
    left = remove_unnecessary_brackets(expected)
    right = remove_unnecessary_brackets(found)
    if left is None or right is None:
        return left is right
    return left.lower() == right.lower()


def nullable_as_string(is_nullable: bool) -> str:
    return "NULL" if is_nullable else "NOT NULL"


def infer_value_generated(
    column: DatabaseColumn,
    default_value_implies_on_add: bool = True,
) -> ValueGenerated:
    """Infer when the database generates a column's value.

    Computed columns are regenerated on every write, identity columns on
    insert only. A column with a default expression also produces its value
    on insert unless *default_value_implies_on_add* is turned off.
    """
    if normalize_text(column.computed_column_sql) is not None:
        return ValueGenerated.ON_ADD_OR_UPDATE
    if column.is_identity:
        return ValueGenerated.ON_ADD
    if default_value_implies_on_add and normalize_text(column.default_value_sql) is not None:
        return ValueGenerated.ON_ADD
    return ValueGenerated.NEVER


def column_lists_equal(expected: list[str], found: list[str]) -> bool:
    """Ordered, exact column list equality."""
    return list(expected) == list(found)


def join_columns(columns: list[str]) -> str:
    return ",".join(columns)
