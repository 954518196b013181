class RowCursorException(Exception):
    """Base exception for cursor exceptions."""
    def __init__(self, *args, cursor: "RowCursor | None" = None):
        super().__init__(*args)

        self.cursor = cursor
        if cursor is not None:
            self.add_note(f" - Using Cursor: {cursor!r}")


class InvalidLengthHint(RowCursorException, ValueError):
    """Raised when a batch length hint is not a positive integer."""


class UnknownColumn(RowCursorException, LookupError):
    """Raised when no column in the result set matches a column name lookup."""


class ColumnIndexOutOfRange(RowCursorException, IndexError):
    """Raised when a column index is outside of the result set's columns."""


class NoCurrentRow(RowCursorException, RuntimeError):
    """Raised when row data is accessed before `next()` has produced a row or after the cursor is exhausted."""


class BatchContractViolation(RowCursorException, AssertionError):
    """Raised when a batch producer returns more rows than were requested.

    This indicates a broken producer rather than bad input, it is never retried or truncated.
    """


class RowLengthMismatch(RowCursorException, ValueError):
    """Raised when a row does not have exactly one value for every column."""
