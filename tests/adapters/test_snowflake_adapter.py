import logging

import pytest

from snowblaze.adapters import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterExecutionError,
    SnowflakeAdapter,
)
from snowblaze.persistence import SnowflakeTransaction
from snowblaze.query import CompiledQuery, QueryResponse, SnowflakeQueryCompiler
from snowblaze.schema import SnowflakeSchemaCompiler


class FakeOperationalError(Exception):
    pass


class FakeInterfaceError(Exception):
    pass


class FakeProgrammingError(Exception):
    pass


class FakeDictCursor:
    pass


class FakeCursor:
    def __init__(self, driver):
        self.driver = driver
        self.statements = []
        self.last_params = None
        self.last_options = None
        self.description = None
        self.rowcount = None
        self._rows = []

    def execute(self, sql, params=None, **options):
        if self.driver.execute_error is not None:
            raise self.driver.execute_error
        self.statements.append(sql)
        self.last_params = params
        self.last_options = options
        self._rows = list(self.driver.rows)
        self.description = [("col",)] if self._rows else None
        self.rowcount = self.driver.rowcount if self.driver.rowcount is not None else len(self._rows)

    def fetchall(self):
        return self._rows


class FakeConnection:
    def __init__(self, driver, settings):
        self.driver = driver
        self.settings = settings
        self.closed = False
        self.cursors = []
        self.close_error = None

    def cursor(self, cursor_class=None):
        cursor = FakeCursor(self.driver)
        cursor.cursor_class = cursor_class
        self.cursors.append(cursor)
        return cursor

    def close(self):
        if self.close_error is not None:
            raise self.close_error
        self.closed = True


class FakeDriver:
    DictCursor = FakeDictCursor
    OperationalError = FakeOperationalError
    InterfaceError = FakeInterfaceError
    ProgrammingError = FakeProgrammingError

    def __init__(self):
        self.connections = []
        self.connect_error = None
        self.execute_error = None
        self.rows = []
        self.rowcount = None

    def connect(self, **settings):
        if self.connect_error is not None:
            raise self.connect_error
        conn = FakeConnection(self, settings)
        self.connections.append(conn)
        return conn


@pytest.fixture
def fake_driver(monkeypatch):
    driver = FakeDriver()
    monkeypatch.setattr("snowblaze.adapters.snowflake._load_driver", lambda: driver)
    return driver


@pytest.fixture
def adapter():
    return SnowflakeAdapter(
        {"host": "xy123.us-east-1", "user": "bob", "password": "secret", "warehouse": "COMPUTE_WH"}
    )


def test_adapter_identity_and_factories(adapter):
    assert adapter.dialect.name == "snowflake"
    assert adapter.driver_name == "snowflake-connector-python"
    state = adapter.query_builder("users").state
    assert isinstance(adapter.query_compiler(state), SnowflakeQueryCompiler)
    assert isinstance(adapter.schema_compiler(adapter.schema_builder()), SnowflakeSchemaCompiler)
    assert isinstance(adapter.transaction(object()), SnowflakeTransaction)


def test_acquire_connects_with_normalized_settings(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    assert connection.raw is fake_driver.connections[0]
    assert connection.settings == {
        "account": "xy123",
        "region": "us-east-1",
        "user": "bob",
        "password": "secret",
        "warehouse": "COMPUTE_WH",
        "paramstyle": "qmark",
    }
    assert connection.raw.settings == connection.settings
    assert connection.events.listener_count("error") == 1
    assert adapter.validate_connection(connection) is True


def test_acquire_failure_propagates_driver_error(fake_driver, adapter):
    error = FakeOperationalError("bad credentials")
    fake_driver.connect_error = error
    with pytest.raises(FakeOperationalError) as excinfo:
        adapter.acquire_raw_connection()
    assert excinfo.value is error


def test_missing_driver_raises_configuration_error(monkeypatch, adapter):
    monkeypatch.setattr("snowblaze.adapters.snowflake._load_driver", lambda: None)
    with pytest.raises(AdapterConfigurationError):
        adapter.acquire_raw_connection()


def test_connection_repr_hides_settings(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    assert connection.settings["password"] == "secret"
    assert "secret" not in repr(connection)


def test_acquire_does_not_log_password(fake_driver, adapter, caplog):
    caplog.set_level(logging.INFO, logger="snowblaze.adapters.snowflake")
    adapter.acquire_raw_connection()
    assert caplog.records
    assert all("secret" not in record.getMessage() for record in caplog.records)


def test_destroy_closes_and_removes_listeners(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    adapter.destroy_raw_connection(connection)
    assert connection.raw.closed is True
    assert connection.events.listener_count() == 0
    assert connection.disposed is None


def test_destroy_records_close_failure(fake_driver, adapter, caplog):
    caplog.set_level(logging.WARNING, logger="snowblaze.adapters.snowflake")
    connection = adapter.acquire_raw_connection()
    error = RuntimeError("socket gone")
    connection.raw.close_error = error
    adapter.destroy_raw_connection(connection)
    assert connection.disposed is error
    assert connection.events.listener_count() == 0
    assert any("Failed to close Snowflake connection" in record.message for record in caplog.records)


def test_validate_connection_rejects_missing(adapter):
    assert adapter.validate_connection(None) is False


def test_select_returns_rows(fake_driver, adapter):
    fake_driver.rows = [{"ID": 1, "EMAIL": "a@example.com"}]
    connection = adapter.acquire_raw_connection()
    rows = adapter.query_builder("users").filter(id=1).run(connection)
    assert rows == [{"ID": 1, "EMAIL": "a@example.com"}]
    cursor = connection.raw.cursors[0]
    assert cursor.cursor_class is FakeDictCursor
    assert cursor.statements == ['select * from "USERS" where "ID" = ?']
    assert cursor.last_params == [1]


def test_first_and_pluck_shape_results(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    assert adapter.query_builder("users").first().run(connection) is None

    fake_driver.rows = [{"EMAIL": "a@example.com"}, {"EMAIL": "b@example.com"}]
    assert adapter.query_builder("users").first().run(connection) == {"EMAIL": "a@example.com"}
    assert adapter.query_builder("users").pluck("email").run(connection) == [
        "a@example.com",
        "b@example.com",
    ]


def test_writes_return_rowcount(fake_driver, adapter):
    fake_driver.rowcount = 2
    connection = adapter.acquire_raw_connection()
    result = adapter.query_builder("users").insert([{"name": "a"}, {"name": "b"}]).run(connection)
    assert result == 2
    cursor = connection.raw.cursors[0]
    assert cursor.last_params == ["a", "b"]


def test_empty_statement_is_not_executed(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    assert adapter.query_builder("users").insert([]).run(connection) is None
    assert connection.raw.cursors == []


def test_raw_string_returns_response(fake_driver, adapter):
    fake_driver.rows = [{"1": 1}]
    connection = adapter.acquire_raw_connection()
    response = adapter.run(connection, "select 1")
    assert isinstance(response, QueryResponse)
    assert response.rows == [{"1": 1}]
    assert connection.raw.cursors[0].last_params is None


def test_query_attaches_response_to_copy(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    compiled = CompiledQuery(sql="select ?", bindings=(1,))
    executed = adapter._query(connection, compiled)
    assert executed is not compiled
    assert compiled.response is None
    assert executed.response.statement is connection.raw.cursors[0]


def test_options_are_passed_to_execute(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    adapter.query_builder("users").options(timeout=5).run(connection)
    assert connection.raw.cursors[0].last_options == {"timeout": 5}


def test_parameter_count_mismatch_raises(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    with pytest.raises(AdapterExecutionError):
        adapter.run(connection, CompiledQuery(sql="select * from t where a = ?", bindings=()))
    assert connection.raw.cursors == []


def test_placeholders_inside_literals_are_ignored(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    adapter.run(connection, CompiledQuery(sql="select '?' as \"what?\" where a = ?", bindings=(1,)))
    assert connection.raw.cursors[0].last_params == [1]


def test_connection_error_marks_connection_disposed(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    error = FakeOperationalError("connection reset")
    fake_driver.execute_error = error
    with pytest.raises(FakeOperationalError):
        adapter.run(connection, "select 1")
    assert connection.disposed is error


def test_statement_error_leaves_connection_usable(fake_driver, adapter):
    connection = adapter.acquire_raw_connection()
    fake_driver.execute_error = FakeProgrammingError("syntax error")
    with pytest.raises(FakeProgrammingError):
        adapter.run(connection, "select from")
    assert connection.disposed is None


def test_execute_is_timed(fake_driver, adapter, caplog):
    caplog.set_level(logging.DEBUG, logger="snowblaze.adapters.snowflake")
    connection = adapter.acquire_raw_connection()
    adapter.run(connection, "select 1")
    assert any("snowflake.execute took" in record.message for record in caplog.records)


def test_schema_builder_runs_each_statement(fake_driver, adapter):
    fake_driver.rows = [{"TABLE_NAME": "USERS"}]
    connection = adapter.acquire_raw_connection()
    assert adapter.schema_builder().has_table("users").run(connection) == [True]
    assert connection.raw.cursors[0].last_params == ["USERS"]


def test_run_requires_connection(adapter):
    with pytest.raises(AdapterConnectionError):
        adapter.run(None, "select 1")
