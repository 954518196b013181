"""Describes queries handed to a driver.

A `QueryRequest` carries the statement text, its parameters, and an optional transaction
handle. The transaction is opaque here, it is passed through to the driver untouched and
does not take part in equality.
"""
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from rowcursor.cursor import RowCursor
    from rowcursor.drivers import BaseDriver


type QueryParameters = Sequence[Any] | Mapping[str, Any]


@dataclass(frozen=True, eq=False)
class QueryRequest:
    statement: str
    parameters: QueryParameters = ()
    transaction: Any = field(default=None, kw_only=True)

    def __post_init__(self):
        if not isinstance(self.statement, str):
            raise TypeError(f"Query statement must be a string, got {type(self.statement).__name__}")

    def __eq__(self, other):
        if not isinstance(other, QueryRequest):
            return NotImplemented

        return self.statement == other.statement and self.parameters == other.parameters

    def __hash__(self):
        return hash(self.statement)

    async def delegate_to(self, driver: "BaseDriver") -> "RowCursor":
        """Has the driver perform this query and returns the cursor over its results."""
        return await driver.perform_query(self)
