"""Provides the abstract row cursor that every backend's query results are read through.

A `RowCursor` streams the rows of a tabular query result. Backends integrate by
implementing exactly one coroutine, `read_batch_of_rows`, and supplying the column
descriptions of the result set. Every other way of reading rows is derived from that
primitive by the base class:

-   `next()` / `current_row` / `column_value()` / `column_value_by_name()`: Row-by-row
    reading with positional or by-name access to the current row.
-   `read_batch_of_rows()` / `read_batch_of_maps()`: Batch reading, optionally bounded
    by a length hint.
-   `to_rows()` / `to_maps()`: Materializes all remaining rows.
-   `row_stream()` / `map_stream()`: Lazy, forward-only async iteration over the
    remaining rows.

Batch boundaries are invisible to row-by-row and stream readers, rows are always
delivered in the order the producer returned them.

Example:
    ```python
    cursor = RowCursor.from_rows(
        [ColumnDescription("id"), ColumnDescription("name")],
        [(1, "Alice"), (2, "Bob")],
    )
    while await cursor.next():
        print(cursor.column_value_by_name("name"))
    ```

A cursor is not safe for concurrent use from multiple tasks, callers must serialize
access to a single instance.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Mapping, Sequence, TYPE_CHECKING
import logging

from tramp.async_batch_iterator import AsyncBatchIterator

import rowcursor
from rowcursor.columns import ColumnDescription, Row, RowBatch
from rowcursor.exceptions import (
    BatchContractViolation,
    ColumnIndexOutOfRange,
    InvalidLengthHint,
    NoCurrentRow,
    RowLengthMismatch,
    UnknownColumn,
)

if TYPE_CHECKING:
    from rowcursor.adapters import BatchFetcher, CloseCallback, FunctionRowCursor


logger = logging.getLogger(__name__)


type RowMap = Mapping[str, Any]


@dataclass(slots=True)
class _CursorState:
    current_row: Row | None = None
    closed: bool = False


class RowCursor(ABC):
    """Abstract base for all row cursors.

    Subclasses must call `super().__init__()` with the column descriptions and implement
    `read_batch_of_rows`. Cursors holding backend resources should also override `close`
    and release them there.
    """
    def __init__(self, column_descriptions: Iterable[ColumnDescription]):
        self._column_descriptions = tuple(column_descriptions)
        self._state = _CursorState()

    def __repr__(self) -> str:
        columns = ", ".join(map(str, self._column_descriptions))
        return f"<{type(self).__name__} columns=[{columns}] closed={self._state.closed}>"

    # ---------------------------------------- #
    # Construction                             #
    # ---------------------------------------- #
    @classmethod
    def from_function(
        cls,
        column_descriptions: Iterable[ColumnDescription],
        fetch: "BatchFetcher",
        *,
        on_close: "CloseCallback | None" = None,
    ) -> "FunctionRowCursor":
        """Creates a cursor that pulls its rows from an async batch function.

        See `rowcursor.adapters.FunctionRowCursor`.
        """
        return rowcursor.adapters.FunctionRowCursor(column_descriptions, fetch, on_close=on_close)

    @classmethod
    def from_rows(
        cls,
        column_descriptions: Iterable[ColumnDescription],
        rows: Iterable[Sequence[Any]] | None = None,
    ) -> "RowCursor":
        """Creates a cursor over a fixed, in-memory row matrix.

        See `rowcursor.adapters.cursor_from_rows`.
        """
        return rowcursor.adapters.cursor_from_rows(column_descriptions, rows)

    @classmethod
    def from_maps(
        cls,
        maps: Iterable[Mapping[str, Any]],
        column_descriptions: Iterable[ColumnDescription] | None = None,
    ) -> "RowCursor":
        """Creates a cursor over key-value rows, inferring the columns when none are given.

        See `rowcursor.adapters.cursor_from_maps`.
        """
        return rowcursor.adapters.cursor_from_maps(maps, column_descriptions)

    # ---------------------------------------- #
    # State                                    #
    # ---------------------------------------- #
    @property
    def column_descriptions(self) -> tuple[ColumnDescription, ...]:
        """The descriptions of the result set's columns, fixed for the life of the cursor."""
        return self._column_descriptions

    @property
    def current_row(self) -> Row | None:
        """The row produced by the last call to `next()`, or `None` if there isn't one."""
        return self._state.current_row

    @property
    def is_closed(self) -> bool:
        return self._state.closed

    async def close(self) -> None:
        """Closes the cursor. Closing more than once has no further effect.

        The current row is left in place, only further fetching stops.
        """
        if self._state.closed:
            return

        self._state.closed = True
        logger.debug("Closed %r", self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ---------------------------------------- #
    # Batch Reading                            #
    # ---------------------------------------- #
    @abstractmethod
    async def read_batch_of_rows(self, length: int | None = None) -> RowBatch | None:
        """Reads the next batch of rows.

        Args:
            length: The maximum number of rows to return. Must be a positive integer when
                given, when omitted the producer decides how many rows to return.

        Returns:
            A non-empty batch of at most `length` rows, or `None` when there are no more rows.

        Implementations should call `check_length_hint(length)` before fetching so an invalid
        hint fails without touching the backend. Derived reads also check the batch length
        and the width of every row, implementations don't need to.

        Raises:
            InvalidLengthHint: If `length` is not a positive integer.
            BatchContractViolation: If the producer returned more rows than requested.
        """
        ...

    async def read_batch_of_maps(self, length: int | None = None) -> tuple[RowMap, ...] | None:
        """Reads the next batch of rows with each row converted to a column name keyed mapping.

        Has the same length hint semantics as `read_batch_of_rows`. The batch and its
        mappings are immutable.
        """
        batch = await self._read_batch(length)
        if batch is None:
            return None

        return tuple(map(self._row_to_map, batch))

    # ---------------------------------------- #
    # Row Reading                              #
    # ---------------------------------------- #
    async def next(self) -> bool:
        """Advances to the next row.

        Returns:
            `True` if a row is now current, `False` if the cursor is exhausted.
        """
        self._state.current_row = None
        batch = await self._read_batch(1)
        if batch is None:
            return False

        self._state.current_row = batch[0]
        return True

    def column_value(self, index: int) -> Any:
        """Returns the value at the given column position in the current row.

        Raises:
            NoCurrentRow: If there is no current row.
            ColumnIndexOutOfRange: If the index is not a valid column position.
        """
        row = self._require_current_row()
        count = len(self._column_descriptions)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < count:
            raise ColumnIndexOutOfRange(
                f"Invalid column index {index!r}, the result set has {count} columns", cursor=self
            )

        return row[index]

    def column_value_by_name(self, name: str, table_name: str | None = None) -> Any:
        """Returns the value of the first column, in column order, that matches the name.

        A column matches when its name is equal and either no table name is given, the
        table names are equal, or the column has no table name.

        Raises:
            NoCurrentRow: If there is no current row.
            UnknownColumn: If no column matches.
        """
        row = self._require_current_row()
        for index, column in enumerate(self._column_descriptions):
            if column.matches(name, table_name):
                return row[index]

        column_names = ", ".join(map(str, self._column_descriptions))
        raise UnknownColumn(
            f"Invalid column {name!r}. The result set has columns: {column_names}", cursor=self
        )

    def current_row_as_map(self) -> RowMap:
        """Returns the current row as a column name keyed mapping, empty when there is no current row."""
        if self._state.current_row is None:
            return MappingProxyType({})

        return self._row_to_map(self._state.current_row)

    # ---------------------------------------- #
    # Materialization                          #
    # ---------------------------------------- #
    async def to_rows(self) -> tuple[Row, ...]:
        """Reads all remaining rows. Rows already consumed are not read again."""
        rows = []
        while (batch := await self._read_batch()) is not None:
            rows.extend(batch)

        return tuple(rows)

    async def to_maps(self) -> tuple[RowMap, ...]:
        """Reads all remaining rows as column name keyed mappings."""
        maps = []
        while (batch := await self._read_batch()) is not None:
            maps.extend(map(self._row_to_map, batch))

        return tuple(maps)

    def row_stream(self) -> AsyncBatchIterator[Row]:
        """Lazily streams the remaining rows. The stream cannot be restarted."""
        return AsyncBatchIterator(self._create_stream_batcher(lambda batch: batch))

    def map_stream(self) -> AsyncBatchIterator[RowMap]:
        """Lazily streams the remaining rows as column name keyed mappings."""
        return AsyncBatchIterator(
            self._create_stream_batcher(lambda batch: tuple(map(self._row_to_map, batch)))
        )

    # ---------------------------------------- #
    # Helpers                                  #
    # ---------------------------------------- #
    def check_length_hint(self, length: int | None):
        """Raises `InvalidLengthHint` unless `length` is `None` or a positive integer."""
        if length is None:
            return

        if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
            raise InvalidLengthHint(f"Length hint must be a positive integer, got {length!r}", cursor=self)

    def _check_row(self, row: Sequence[Any]) -> Row:
        row = tuple(row)
        if len(row) != len(self._column_descriptions):
            raise RowLengthMismatch(
                f"Row has {len(row)} values, the result set has {len(self._column_descriptions)} columns",
                cursor=self,
            )

        return row

    async def _read_batch(self, length: int | None = None) -> RowBatch | None:
        self.check_length_hint(length)
        if self._state.closed:
            return None

        batch = await self.read_batch_of_rows(length)
        if not batch:
            return None

        if length is not None and len(batch) > length:
            raise BatchContractViolation(
                f"Cursor returned {len(batch)} rows when at most {length} were requested", cursor=self
            )

        return tuple(map(self._check_row, batch))

    def _create_stream_batcher[T](
        self, convert: Callable[[RowBatch], Iterable[T]]
    ) -> Callable[[int], Awaitable[Iterable[T]]]:
        exhausted = False

        async def stream_batcher(batch_index: int) -> Iterable[T]:
            nonlocal exhausted
            if exhausted:
                return ()

            batch = await self._read_batch()
            if batch is None:
                exhausted = True
                return ()

            return convert(batch)

        return stream_batcher

    def _require_current_row(self) -> Row:
        if self._state.current_row is None:
            raise NoCurrentRow("Current row is None. Call next() to get the next row.", cursor=self)

        return self._state.current_row

    def _row_to_map(self, row: Row) -> RowMap:
        return MappingProxyType({
            column.column_name or str(index): value
            for index, (column, value) in enumerate(zip(self._column_descriptions, row))
        })
