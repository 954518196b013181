import pytest
import pytest_asyncio

from rowcursor.columns import ColumnDescription
from rowcursor.drivers.exceptions import DriverConnectFailed, DriverFetchFailed, DriverQueryFailed
from rowcursor.ext.drivers.sqlite import SQLiteDriver, SQLiteSettings
from rowcursor.query_requests import QueryRequest
from rowcursor.results import QueryResult


@pytest_asyncio.fixture
async def driver():
    async with SQLiteDriver.connect(SQLiteSettings(database=":memory:", batch_size=2)) as driver:
        driver.connection.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, age INTEGER)")
        driver.connection.executemany(
            "INSERT INTO users (name, age) VALUES (?, ?)",
            [("Alice", 30), ("Bob", 25), ("Carol", 41), ("Dave", None), ("Eve", 19)],
        )
        yield driver


@pytest.mark.asyncio
async def test_sqlite_query_columns(driver):
    cursor = await driver.query("SELECT id, name FROM users").or_raise()
    assert cursor.column_descriptions == (ColumnDescription("id"), ColumnDescription("name"))
    await cursor.close()


@pytest.mark.asyncio
async def test_sqlite_to_rows(driver):
    cursor = await driver.query("SELECT name, age FROM users ORDER BY id").or_raise()
    assert await cursor.to_rows() == (
        ("Alice", 30),
        ("Bob", 25),
        ("Carol", 41),
        ("Dave", None),
        ("Eve", 19),
    )
    assert cursor.is_closed


@pytest.mark.asyncio
async def test_sqlite_batches_use_configured_size(driver):
    cursor = await driver.query("SELECT id FROM users ORDER BY id").or_raise()
    assert await cursor.read_batch_of_rows() == ((1,), (2,))
    assert await cursor.read_batch_of_rows(3) == ((3,), (4,), (5,))
    assert await cursor.read_batch_of_rows() is None


@pytest.mark.asyncio
async def test_sqlite_next_with_parameters(driver):
    cursor = await driver.query("SELECT name FROM users WHERE age > ? ORDER BY age", (26,)).or_raise()
    names = []
    while await cursor.next():
        names.append(cursor.column_value_by_name("name"))

    assert names == ["Alice", "Carol"]


@pytest.mark.asyncio
async def test_sqlite_map_stream(driver):
    cursor = await driver.query("SELECT name FROM users WHERE age < :age ORDER BY id", {"age": 30}).or_raise()
    assert [user["name"] async for user in cursor.map_stream()] == ["Bob", "Eve"]


@pytest.mark.asyncio
async def test_sqlite_statement_without_rows(driver):
    cursor = await driver.query("UPDATE users SET age = 50 WHERE name = 'Dave'").or_raise()
    assert cursor.column_descriptions == ()
    assert await cursor.next() is False


@pytest.mark.asyncio
async def test_sqlite_query_failure(driver):
    match await driver.query("SELECT * FROM missing_table"):
        case QueryResult.Failure(error):
            assert isinstance(error, DriverQueryFailed)
        case result:
            pytest.fail(f"Expected a failure, got {result!r}")


@pytest.mark.asyncio
async def test_sqlite_query_success(driver):
    match await driver.query("SELECT COUNT(*) AS total FROM users"):
        case QueryResult.Success(cursor):
            assert await cursor.next()
            assert cursor.current_row_as_map() == {"total": 5}
        case result:
            pytest.fail(f"Expected a success, got {result!r}")


@pytest.mark.asyncio
async def test_sqlite_request_delegation(driver):
    request = QueryRequest("SELECT name FROM users WHERE id = ?", (1,), transaction=object())
    cursor = await request.delegate_to(driver)
    assert await cursor.to_maps() == ({"name": "Alice"},)


@pytest.mark.asyncio
async def test_sqlite_close_releases_cursor(driver):
    cursor = await driver.query("SELECT id FROM users").or_raise()
    assert await cursor.next()
    await cursor.close()
    await cursor.close()
    assert await cursor.next() is False


def test_sqlite_connect_rejects_invalid_batch_size():
    with pytest.raises(DriverConnectFailed):
        SQLiteDriver.connect(SQLiteSettings(database=":memory:", batch_size=0))


def test_sqlite_default_settings_are_not_shared():
    driver = SQLiteDriver.connect(SQLiteSettings(database=":memory:", batch_size=7))
    assert driver.batch_size == 7
    assert SQLiteDriver.connect().batch_size == 100


@pytest.mark.asyncio
async def test_sqlite_query_failure_names_statement(driver):
    with pytest.raises(DriverQueryFailed) as info:
        await driver.query("SELECT nope FROM users").or_raise()

    assert info.value.statement == "SELECT nope FROM users"
    assert info.value.driver is driver


@pytest.mark.asyncio
async def test_sqlite_fetch_failure(driver):
    cursor = await driver.query("SELECT id FROM users").or_raise()
    driver.connection.close()
    with pytest.raises(DriverFetchFailed):
        await cursor.next()


@pytest.mark.asyncio
async def test_sqlite_to_maps_shortcut(driver):
    users = await driver.query("SELECT name FROM users WHERE id <= 2 ORDER BY id").to_maps()
    assert users == ({"name": "Alice"}, {"name": "Bob"})
