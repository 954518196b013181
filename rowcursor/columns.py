"""Defines the column description value type and the row type aliases shared by cursors.

A `ColumnDescription` identifies a single result column by its (optional) owning table
and its column name. Every cursor carries a fixed, ordered sequence of these and every
row it produces is positionally aligned with that sequence.

Column descriptions are immutable, hashable, and totally ordered so they can be
deduplicated and sorted into a deterministic order when a column set has to be inferred
from heterogeneous records (see `rowcursor.adapters.infer_column_descriptions`).
"""
from dataclasses import dataclass
from functools import total_ordering
from typing import Any


type Row = tuple[Any, ...]
"""A single row of values, one per column, aligned with the cursor's column descriptions."""

type RowBatch = tuple[Row, ...]
"""A non-empty group of rows returned by one pull. Exhaustion is signalled with `None`."""


@total_ordering
@dataclass(frozen=True)
class ColumnDescription:
    """Identifies one result column.

    Ordering compares unqualified columns before table qualified ones, then table names,
    then column names. This keeps inferred column sets stable regardless of the order the
    keys were first seen in.

    Attributes:
        column_name: The name of the column.
        table_name: The owning table, or `None` when the column is not qualified.
    """
    column_name: str
    table_name: str | None = None

    def __lt__(self, other: "ColumnDescription") -> bool:
        if not isinstance(other, ColumnDescription):
            return NotImplemented

        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        if self.table_name is None:
            return self.column_name

        return f"{self.table_name}.{self.column_name}"

    def matches(self, column_name: str, table_name: str | None = None) -> bool:
        """Checks if this column answers to the given name.

        An unspecified table name on either side acts as a wildcard.
        """
        if self.column_name != column_name:
            return False

        return table_name is None or self.table_name is None or self.table_name == table_name

    def _sort_key(self) -> tuple[bool, str, str]:
        return self.table_name is not None, self.table_name or "", self.column_name
