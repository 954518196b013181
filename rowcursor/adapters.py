"""Constructors that adapt row sources to the `RowCursor` interface.

-   `FunctionRowCursor`: Wraps an async batch function, this is how backends usually
    expose their results.
-   `cursor_from_rows`: Iterates a fixed in-memory row matrix.
-   `cursor_from_maps`: Iterates key-value rows, reconciling inconsistent key sets into
    a rectangular, column aligned row matrix.

These are normally reached through `RowCursor.from_function`, `RowCursor.from_rows`, and
`RowCursor.from_maps`.
"""
from typing import Any, Awaitable, Callable, Iterable, Mapping, Sequence
import logging

from rowcursor.columns import ColumnDescription, Row, RowBatch
from rowcursor.cursor import RowCursor
from rowcursor.exceptions import BatchContractViolation, RowLengthMismatch


logger = logging.getLogger(__name__)


type BatchFetcher = Callable[[int | None], Awaitable[Sequence[Sequence[Any]] | None]]
type CloseCallback = Callable[[], Awaitable[None]]


class FunctionRowCursor(RowCursor):
    """A cursor whose batches come from an async function.

    The function is called with the length hint (or `None`) and must return a non-empty
    sequence of rows, or `None` once there are no more rows. The cursor closes itself as
    soon as the function reports exhaustion and never calls the function again after it
    has been closed.

    Attributes:
        on_close: Optional coroutine function awaited once when the cursor is first closed,
            backends use it to release their resources.
    """
    def __init__(
        self,
        column_descriptions: Iterable[ColumnDescription],
        fetch: BatchFetcher,
        *,
        on_close: CloseCallback | None = None,
    ):
        super().__init__(column_descriptions)
        self._fetch = fetch
        self.on_close = on_close

    async def read_batch_of_rows(self, length: int | None = None) -> RowBatch | None:
        self.check_length_hint(length)
        if self.is_closed:
            return None

        batch = await self._fetch(length)
        if not batch:
            logger.debug("Batch function exhausted for %r", self)
            await self.close()
            return None

        if length is not None and len(batch) > length:
            raise BatchContractViolation(
                f"Function returned {len(batch)} rows when at most {length} were requested", cursor=self
            )

        return tuple(map(self._check_row, batch))

    async def close(self) -> None:
        if self.is_closed:
            return

        await super().close()
        if self.on_close is None:
            return

        try:
            await self.on_close()
        except Exception:
            # Closing never raises, the cursor is closed regardless
            logger.exception("Failed to release resources for %r", self)


def cursor_from_rows(
    column_descriptions: Iterable[ColumnDescription],
    rows: Iterable[Sequence[Any]] | None = None,
) -> FunctionRowCursor:
    """Creates a cursor that iterates a fixed row matrix.

    A batch request for more rows than remain returns only the remainder. An empty or
    missing matrix produces a cursor that is exhausted from the start.

    Raises:
        RowLengthMismatch: If any row does not have one value per column.
    """
    column_descriptions = tuple(column_descriptions)
    matrix = [tuple(row) for row in rows or ()]
    for position, row in enumerate(matrix):
        if len(row) != len(column_descriptions):
            raise RowLengthMismatch(
                f"Row {position} has {len(row)} values, the result set has {len(column_descriptions)} columns"
            )

    logger.debug("Creating cursor over %d in-memory rows", len(matrix))
    return FunctionRowCursor(column_descriptions, _create_row_matrix_fetcher(matrix))


def cursor_from_maps(
    maps: Iterable[Mapping[str, Any]],
    column_descriptions: Iterable[ColumnDescription] | None = None,
) -> FunctionRowCursor:
    """Creates a cursor that iterates key-value rows.

    When no column descriptions are given they are inferred with
    `infer_column_descriptions`. Each map is then projected onto the columns with
    `project_map`.
    """
    maps = list(maps)
    if column_descriptions is None:
        column_descriptions = infer_column_descriptions(maps)
    else:
        column_descriptions = tuple(column_descriptions)

    return cursor_from_rows(
        column_descriptions,
        [project_map(item, column_descriptions) for item in maps],
    )


def infer_column_descriptions(maps: Iterable[Mapping[str, Any]]) -> tuple[ColumnDescription, ...]:
    """Collects the union of the keys of all maps as unqualified columns in sorted order."""
    columns: dict[ColumnDescription, None] = {}
    for item in maps:
        for key in item:
            columns.setdefault(ColumnDescription(column_name=key), None)

    return tuple(sorted(columns))


def project_map(item: Mapping[str, Any], column_descriptions: Sequence[ColumnDescription]) -> Row:
    """Projects a map onto the columns.

    Each column is looked up by its bare name first and then by its `table.column` key,
    missing columns are `None`.
    """
    row = []
    for column in column_descriptions:
        if column.column_name in item:
            row.append(item[column.column_name])
        elif column.table_name is not None and (qualified := str(column)) in item:
            row.append(item[qualified])
        else:
            row.append(None)

    return tuple(row)


def _create_row_matrix_fetcher(matrix: list[Row]) -> BatchFetcher:
    rows: list[Row] | None = matrix or None
    position = 0

    async def row_matrix_fetcher(length: int | None) -> RowBatch | None:
        nonlocal rows, position
        if rows is None:
            return None

        end = len(rows) if length is None else min(position + length, len(rows))
        batch = tuple(rows[position:end])
        position = end
        if position >= len(rows):
            # Drop the matrix so it can be reclaimed
            rows = None

        return batch

    return row_matrix_fetcher
