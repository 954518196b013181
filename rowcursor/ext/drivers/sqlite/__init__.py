"""SQLite driver for rowcursor.

Runs statements on a sqlite3 connection and exposes their results as lazily fetched row cursors.

Example:
    ```python
    from rowcursor.ext.drivers.sqlite import SQLiteDriver, SQLiteSettings

    async def main():
        async with SQLiteDriver.connect(SQLiteSettings(database="app.db", batch_size=500)) as driver:
            cursor = await driver.query("SELECT id, name FROM users WHERE age > ?", (25,)).or_raise()
            async for user in cursor.map_stream():
                print(user["name"])
    ```
"""

from .driver import SQLiteDriver, SQLiteSettings


__all__ = ["SQLiteDriver", "SQLiteSettings"]
