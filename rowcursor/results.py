"""Awaitable results for driver queries.

`BaseDriver.query` returns an `AsyncQueryResult`. It can be used in a few ways depending on
how the caller wants to handle failures and how long it needs the cursor:

    ```python
    # Pattern match on the outcome
    match await driver.query("SELECT id, name FROM users"):
        case QueryResult.Success(cursor):
            rows = await cursor.to_rows()
        case QueryResult.Failure(error):
            print(f"Query failed: {error}")

    # Let exceptions propagate and close the cursor when done
    async with driver.query("SELECT id, name FROM users") as cursor:
        while await cursor.next():
            ...

    # Read everything in one step, the cursor is closed afterwards
    users = await driver.query("SELECT id, name FROM users").to_maps()
    ```
"""
from abc import ABC, abstractmethod
from functools import wraps
from typing import Awaitable, Callable, NoReturn, ParamSpec, Type, TYPE_CHECKING

if TYPE_CHECKING:
    from rowcursor.columns import Row
    from rowcursor.cursor import RowCursor, RowMap

P = ParamSpec("P")


class QueryResult(ABC):
    """The outcome of performing a query, either a cursor over its rows or the error that stopped it."""
    Failure: "Type[QueryFailure]"
    Success: "Type[QuerySuccess]"

    @property
    @abstractmethod
    def value(self) -> "RowCursor":
        ...

    @property
    @abstractmethod
    def error(self) -> Exception | None:
        ...

    @abstractmethod
    def value_or[D](self, default: D) -> "RowCursor | D":
        ...


class QuerySuccess(QueryResult):
    __match_args__ = ("value",)

    def __init__(self, cursor: "RowCursor"):
        self._cursor = cursor

    def __repr__(self):
        return f"{type(self).__name__}({self._cursor!r})"

    def __bool__(self) -> bool:
        return True

    @property
    def value(self) -> "RowCursor":
        return self._cursor

    @property
    def error(self) -> None:
        return None

    def value_or[D](self, default: D) -> "RowCursor":
        return self._cursor


class QueryFailure(QueryResult):
    __match_args__ = ("error",)

    def __init__(self, error: Exception):
        self._error = error

    def __repr__(self):
        return f"{type(self).__name__}({self._error!r})"

    def __bool__(self) -> bool:
        return False

    @property
    def value(self) -> NoReturn:
        raise RuntimeError("Query failed, there is no cursor") from self._error

    @property
    def error(self) -> Exception:
        return self._error

    def value_or[D](self, default: D) -> D:
        return default


QueryResult.Success = QuerySuccess
QueryResult.Failure = QueryFailure


class AsyncQueryResult:
    """Wraps a pending query. Awaiting it gives a `QueryResult`, the other methods raise on failure.

    The wrapped query runs at most once, however many of the methods are used.
    """
    def __init__(self, awaitable: Awaitable["RowCursor"]):
        self._awaitable = awaitable
        self._result: QueryResult | None = None
        self._cursor: "RowCursor | None" = None

    def __await__(self):
        return self._resolve().__await__()

    async def __aenter__(self) -> "RowCursor":
        self._cursor = await self.or_raise()
        return self._cursor

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._cursor is not None:
            await self._cursor.close()

    async def or_raise(self) -> "RowCursor":
        """Returns the cursor, raising the error that stopped the query if it failed."""
        match await self._resolve():
            case QueryResult.Success(cursor):
                return cursor

            case QueryResult.Failure(error):
                raise error

    async def value_or[D](self, default: D) -> "RowCursor | D":
        return (await self._resolve()).value_or(default)

    async def to_rows(self) -> "tuple[Row, ...]":
        """Reads every row of the result and closes the cursor."""
        async with self as cursor:
            return await cursor.to_rows()

    async def to_maps(self) -> "tuple[RowMap, ...]":
        """Reads every row of the result as a column name keyed mapping and closes the cursor."""
        async with self as cursor:
            return await cursor.to_maps()

    async def _resolve(self) -> QueryResult:
        if self._result is None:
            try:
                self._result = QueryResult.Success(await self._awaitable)
            except Exception as error:
                self._result = QueryResult.Failure(error)

        return self._result


def query_result(coroutine: Callable[P, Awaitable["RowCursor"]]) -> Callable[P, AsyncQueryResult]:
    """Makes a coroutine that produces a cursor return an `AsyncQueryResult` instead."""
    @wraps(coroutine)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> AsyncQueryResult:
        return AsyncQueryResult(coroutine(*args, **kwargs))

    return wrapper
