import logging
import sqlite3
from typing import NotRequired, TypedDict

from rowcursor.columns import ColumnDescription
from rowcursor.cursor import RowCursor
from rowcursor.drivers import BaseDriver
from rowcursor.drivers.exceptions import DriverConnectFailed, DriverFetchFailed, DriverQueryFailed
from rowcursor.query_requests import QueryRequest


logger = logging.getLogger(__name__)


class SQLiteSettings(TypedDict):
    """Configuration settings for SQLite database connections.

    Attributes:
        database: Path to the SQLite database file. Use ":memory:" for an in-memory database.
        batch_size: Number of rows fetched per batch when the reader gives no length hint.
    """
    database: str
    batch_size: NotRequired[int]


class SQLiteDriver(BaseDriver):
    """SQLite driver that executes queries through the sqlite3 standard library module.

    Each query runs on its own sqlite3 cursor. The returned `RowCursor` fetches rows from
    it lazily with `fetchmany` and closes it when the row cursor is closed or exhausted.

    Attributes:
        connection: The underlying sqlite3.Connection instance
    """
    _default_settings = SQLiteSettings(database=":memory:", batch_size=100)

    def __init__(self, connection: sqlite3.Connection, settings: SQLiteSettings):
        super().__init__()
        self.connection = connection
        self._settings = settings

    def __repr__(self):
        return f"<{type(self).__name__} database={self._settings['database']!r}>"

    @property
    def batch_size(self) -> int:
        return self._settings["batch_size"]

    @classmethod
    def connect(cls, settings: SQLiteSettings | None = None) -> "SQLiteDriver":
        """Create a new SQLite database connection.

        Args:
            settings: Optional configuration settings for the connection. Missing settings use the defaults, an
                in-memory database fetched in batches of 100 rows.

        Raises:
            DriverConnectFailed: If the connection attempt fails
        """
        _settings = cls._default_settings | (settings or {})
        if _settings["batch_size"] <= 0:
            raise DriverConnectFailed(f"Invalid batch size {_settings['batch_size']!r}", driver=cls)

        try:
            connection = sqlite3.connect(_settings["database"])
        except sqlite3.Error as error:
            raise DriverConnectFailed("Failed to connect to the SQLite database.", driver=cls) from error

        connection.isolation_level = None
        logger.debug("Connected to SQLite database %r", _settings["database"])
        return cls(connection, _settings)

    async def disconnect(self):
        """Close the SQLite database connection."""
        self.connection.close()
        logger.debug("Disconnected from SQLite database %r", self._settings["database"])

    async def perform_query(self, request: QueryRequest) -> RowCursor:
        """Executes the request's statement and returns a cursor over its rows.

        The request's transaction handle is not used, every statement runs on the driver's connection in autocommit
        mode.

        Raises:
            DriverQueryFailed: If SQLite rejects the statement.
        """
        try:
            cursor = self.connection.cursor()
        except sqlite3.Error as error:
            raise DriverQueryFailed("Failed to open a cursor", driver=self, statement=request.statement) from error

        try:
            cursor.execute(request.statement, request.parameters)
        except sqlite3.Error as error:
            cursor.close()
            raise DriverQueryFailed(
                "SQLite rejected the statement", driver=self, statement=request.statement
            ) from error

        logger.debug("Executed query %r", request.statement)
        return RowCursor.from_function(
            describe_columns(cursor),
            self._create_batch_fetcher(cursor, request.statement),
            on_close=self._create_cursor_closer(cursor),
        )

    def _create_batch_fetcher(self, cursor: sqlite3.Cursor, statement: str):
        async def sqlite_batch_fetcher(length: int | None) -> list[tuple] | None:
            try:
                rows = cursor.fetchmany(length or self.batch_size)
            except sqlite3.Error as error:
                raise DriverFetchFailed("Failed to fetch rows", driver=self, statement=statement) from error

            return rows or None

        return sqlite_batch_fetcher

    def _create_cursor_closer(self, cursor: sqlite3.Cursor):
        async def close_sqlite_cursor():
            cursor.close()

        return close_sqlite_cursor


def describe_columns(cursor: sqlite3.Cursor) -> tuple[ColumnDescription, ...]:
    """SQLite doesn't report the owning table of result columns, so every column is unqualified. Statements that
    return no rows have no columns."""
    if cursor.description is None:
        return ()

    return tuple(ColumnDescription(column_name=column[0]) for column in cursor.description)
