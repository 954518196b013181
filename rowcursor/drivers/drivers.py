"""Drivers are the interface between row cursors and a database. They are responsible for connecting to the database
and executing queries, handing the results back as a `RowCursor`. Each driver must implement the BaseDriver interface.

Drivers should avoid over engineering and should allow exceptions to bubble up to the caller. Database specific errors
should be replaced with the driver exceptions in rowcursor.drivers.exceptions. `BaseDriver.query` catches exceptions
raised by the driver and wraps them in QueryResult failures, which are then returned to the caller."""
from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING

from rowcursor.query_requests import QueryParameters, QueryRequest
from rowcursor.results import query_result

if TYPE_CHECKING:
    from rowcursor.cursor import RowCursor


class BaseDriver(ABC):
    # ---------------------------------------- #
    # Connection Management                    #
    # ---------------------------------------- #
    @classmethod
    @abstractmethod
    def connect(cls, settings: dict[str, Any] | None = None) -> "BaseDriver":
        """Connects to the database."""
        ...

    @abstractmethod
    async def disconnect(self):
        """Disconnects from the database."""
        ...

    # ---------------------------------------- #
    # Query Execution                          #
    # ---------------------------------------- #
    @abstractmethod
    async def perform_query(self, request: QueryRequest) -> "RowCursor":
        """Executes the request and returns a cursor over its result rows. Rows should be fetched lazily by the
        cursor rather than loaded up front."""
        ...

    @query_result
    async def query(
        self, statement: str, parameters: QueryParameters = (), *, transaction: Any = None
    ) -> "RowCursor":
        """Builds a request for the statement and performs it.

        Returns an `AsyncQueryResult`: await it for a QueryResult, use it as an async context manager for a cursor
        that is closed on exit, or call `to_rows()`/`to_maps()` to read everything at once."""
        return await QueryRequest(statement, parameters, transaction=transaction).delegate_to(self)

    # ---------------------------------------- #
    # Context Management                       #
    # ---------------------------------------- #
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
