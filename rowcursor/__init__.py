"""rowcursor Package.

Asynchronous row cursors for streaming tabular query results. A cursor decouples code
that consumes rows (as tuples, as mappings, batch by batch, or as a stream) from the
backends that produce them, through a single primitive: "give me up to N more rows."

-   **One Primitive**: Backends implement `RowCursor.read_batch_of_rows` and supply the
    column descriptions, every other read operation is derived from it.
-   **In-Memory Adapters**: `RowCursor.from_rows` and `RowCursor.from_maps` turn lists
    of rows or dictionaries into cursors, inferring the columns from the dictionaries
    when needed.
-   **Function Adapter**: `RowCursor.from_function` wraps an async batch function,
    enforcing the batch length contract and closing the cursor once it is exhausted.
-   **Drivers**: `BaseDriver` turns `QueryRequest`s into cursors. A SQLite driver is
    bundled in `rowcursor.ext.drivers.sqlite`.

Note:
This `__init__.py` file uses a custom `__getattr__` to enable lazy loading of
submodules and specific symbols, improving import times and avoiding circular imports
between the cursor and its adapters.
"""
import importlib
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rowcursor.adapters import FunctionRowCursor
    from rowcursor.columns import ColumnDescription
    from rowcursor.cursor import RowCursor
    from rowcursor.drivers import BaseDriver
    from rowcursor.query_requests import QueryRequest
    from rowcursor.results import QueryResult

__lookup = {
    "BaseDriver": "rowcursor.drivers",
    "ColumnDescription": "rowcursor.columns",
    "FunctionRowCursor": "rowcursor.adapters",
    "QueryRequest": "rowcursor.query_requests",
    "QueryResult": "rowcursor.results",
    "RowCursor": "rowcursor.cursor",
}

__all__ = list(__lookup.keys())

__modules = set()

for _path in Path(__file__).parent.iterdir():
    if _path.name.startswith("_"):
        continue

    if not _path.is_dir() and _path.suffix != ".py":
        continue

    __modules.add(_path.stem)


def __getattr__(name):
    """Lazily loads submodules and the symbols listed in `__lookup`.

    Raises:
        ImportError: If a symbol listed in `__lookup` cannot be imported from its module.
        AttributeError: If the name is neither a known symbol nor a submodule.
    """
    if name in __lookup:
        try:
            module = importlib.import_module(__lookup[name])
        except Exception as e:
            raise ImportError(f"Failed to import {name} from {__lookup[name]}: {e}") from e

        return getattr(module, name)

    if name in __modules:
        return importlib.import_module(f"rowcursor.{name}")

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
