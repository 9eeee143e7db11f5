"""Append-only writer for one level of the diff log.

A ``CompareLogger`` is bound to a list of sibling entries, an element type
and a default name. Each call appends one entry, unless the entry matches
an ignore rule, in which case nothing is recorded.
"""

from collections.abc import Callable

from db_schema_compare.compare.log import (
    CompareAttribute,
    CompareLog,
    CompareState,
    CompareType,
    render_error,
)
from db_schema_compare.compare.options import IgnoreRule


class CompareLogger:
    """Write entries of one ``CompareType`` into a list of logs.

    Args:
        type: Element type of every entry written.
        default_name: Entry name used when a call does not pass one.
        logs: The sibling list entries are appended to.
        ignore: Rules for differences that must not be recorded.
        ignore_errors: Rendered messages that must not be recorded.
        parents: Names of the enclosing entries, for matching
            ``ignore_errors`` against fully rendered messages.
    """

    def __init__(
        self,
        type: CompareType,
        default_name: str,
        logs: list[CompareLog],
        ignore: list[IgnoreRule] | None = None,
        ignore_errors: list[str] | None = None,
        parents: list[str] | None = None,
    ):
        self.type = type
        self.default_name = default_name
        self._logs = logs
        self._ignore = ignore or []
        self._ignore_errors = set(ignore_errors or [])
        self._parents = parents or []
        self.error_count = 0

    def mark_as_ok(self, expected: str | None = None, name: str | None = None) -> CompareLog:
        """Record a successful check and return its entry."""
        log = CompareLog(
            type=self.type,
            state=CompareState.OK,
            name=name or self.default_name,
            expected=expected,
        )
        self._logs.append(log)
        return log

    def check_different(
        self,
        expected: str | None,
        found: str | None,
        attribute: CompareAttribute,
        equal: Callable[[str | None, str | None], bool] | None = None,
        name: str | None = None,
    ) -> bool:
        """Record a ``Different`` entry if *expected* and *found* differ.

        Args:
            equal: Equivalence predicate; plain ``==`` when omitted.

        Returns:
            True if a difference was found (whether or not it was ignored).
        """
        same = equal(expected, found) if equal else expected == found
        if same:
            return False
        self._add(CompareState.DIFFERENT, name, attribute, expected, found)
        return True

    def not_in_database(
        self,
        expected: str | None,
        attribute: CompareAttribute = CompareAttribute.NOT_SET,
        name: str | None = None,
    ) -> None:
        self._add(CompareState.NOT_IN_DATABASE, name, attribute, expected, None)

    def extra_in_database(
        self,
        found: str | None,
        attribute: CompareAttribute = CompareAttribute.NOT_SET,
        name: str | None = None,
    ) -> None:
        self._add(CompareState.EXTRA_IN_DATABASE, name, attribute, None, found)

    def _add(
        self,
        state: CompareState,
        name: str | None,
        attribute: CompareAttribute,
        expected: str | None,
        found: str | None,
    ) -> None:
        log = CompareLog(
            type=self.type,
            state=state,
            name=name or self.default_name,
            attribute=attribute,
            expected=expected,
            found=found,
        )
        if self._is_ignored(log):
            return
        self._logs.append(log)
        self.error_count += 1

    def _is_ignored(self, log: CompareLog) -> bool:
        if any(rule.matches(log) for rule in self._ignore):
            return True
        return render_error(log, self._parents) in self._ignore_errors
