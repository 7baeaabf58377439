"""
Snowflake database adapter implementation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Sequence

from ..dialects.snowflake import SnowflakeDialect
from ..dialects.base import WrapIdentifierHook
from ..persistence.transaction import SnowflakeTransaction
from ..query.builder import QueryState
from ..query.snowflake import SnowflakeQueryCompiler
from ..query.statement import CompiledQuery, QueryResponse, row_value
from ..schema.builder import SchemaBuilder
from ..schema.columns import ColumnBuilder
from ..schema.snowflake import (
    SnowflakeColumnBuilder,
    SnowflakeColumnCompiler,
    SnowflakeSchemaCompiler,
    SnowflakeTableCompiler,
)
from ..schema.table import TableBuilder, TableCompiler
from ..security.redaction import redact_params
from ..utils import time_call
from .base import (
    AdapterConfigurationError,
    AdapterExecutionError,
    BaseAdapter,
    ConnectionConfig,
)
from .events import ConnectionEvents


def _load_driver():
    try:
        import snowflake.connector

        return snowflake.connector
    except ImportError:
        return None


@dataclass
class SnowflakeConnection:
    """
    Raw driver connection plus the listeners and disposal state attached to it.
    """

    raw: Any = None
    settings: dict[str, Any] = field(default_factory=dict, repr=False)
    events: ConnectionEvents = field(default_factory=ConnectionEvents)
    disposed: BaseException | None = None

    def mark_disposed(self, error: BaseException) -> None:
        self.disposed = error


class SnowflakeAdapter(BaseAdapter):
    """
    Adapter wrapping the snowflake-connector-python driver.
    """

    name = "snowflake"
    driver_name = "snowflake-connector-python"
    current_timestamp_sql = "current_timestamp()"

    def __init__(
        self,
        connection: ConnectionConfig | Mapping[str, Any] | str | None = None,
        *,
        wrap_identifier: WrapIdentifierHook | None = None,
        fold_identifiers: bool = True,
        strict_primary_keys: bool = False,
        logger: logging.Logger | None = None,
        slow_query_ms: int | None = None,
    ) -> None:
        self.fold_identifiers = fold_identifiers
        super().__init__(
            connection,
            wrap_identifier=wrap_identifier,
            strict_primary_keys=strict_primary_keys,
            logger=logger,
            slow_query_ms=slow_query_ms,
        )

    def create_dialect(self) -> SnowflakeDialect:
        return SnowflakeDialect(
            wrap_identifier=self.wrap_identifier,
            fold_identifiers=self.fold_identifiers,
        )

    def custom_wrap_identifier(self, value: str, orig_impl: Any, query_context: Any = None) -> str:
        return self.dialect.custom_wrap_identifier(value, orig_impl, query_context)

    # Builders and compilers --------------------------------------------
    def query_compiler(self, state: QueryState) -> SnowflakeQueryCompiler:
        return SnowflakeQueryCompiler(self, state)

    def column_builder(
        self, table: TableBuilder, column_type: str, name: str, *args: Any, **kwargs: Any
    ) -> SnowflakeColumnBuilder:
        return SnowflakeColumnBuilder(table, column_type, name, *args, **kwargs)

    def column_compiler(
        self, table_compiler: TableCompiler, column: ColumnBuilder
    ) -> SnowflakeColumnCompiler:
        return SnowflakeColumnCompiler(self, table_compiler, column)

    def table_compiler(self, builder: TableBuilder) -> SnowflakeTableCompiler:
        return SnowflakeTableCompiler(self, builder)

    def schema_compiler(self, builder: SchemaBuilder) -> SnowflakeSchemaCompiler:
        return SnowflakeSchemaCompiler(self, builder)

    def transaction(self, connection: Any) -> SnowflakeTransaction:
        return SnowflakeTransaction(self, connection)

    # Driver --------------------------------------------------------------
    def _driver(self) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError(
                "snowflake-connector-python is required to use SnowflakeAdapter."
            )
        return driver

    def acquire_raw_connection(self) -> SnowflakeConnection:
        driver = self.driver
        settings = self.connection_settings.driver_settings()
        self.logger.info(
            "Connecting to Snowflake %s (autocommit=%s)",
            self.connection_settings.descriptive_label(),
            self.connection_settings.autocommit,
        )

        connection = SnowflakeConnection(settings=settings)
        connection.events.on("error", connection.mark_disposed)
        try:
            connection.raw = driver.connect(**settings)
        except Exception:
            connection.events.remove_all_listeners()
            raise
        return connection

    def destroy_raw_connection(self, connection: SnowflakeConnection) -> None:
        try:
            connection.raw.close()
        except Exception as exc:
            connection.disposed = exc
            self.logger.warning("Failed to close Snowflake connection: %s", exc)
        finally:
            connection.events.remove_all_listeners()

    def validate_connection(self, connection: Any) -> bool:
        return connection is not None

    def _query(
        self, connection: SnowflakeConnection, request: CompiledQuery | str | None
    ) -> CompiledQuery | None:
        if request is None or isinstance(request, str):
            request = CompiledQuery(sql=request or "")
        if not request.sql:
            return None

        driver = self.driver
        self._validate_params(request.sql, request.bindings)
        cursor = connection.raw.cursor(driver.DictCursor)
        options = dict(request.options or {})
        try:
            with time_call(
                "snowflake.execute",
                self.logger,
                sql=request.sql,
                params=redact_params(request.bindings),
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(request.sql, list(request.bindings) or None, **options)
                rows = cursor.fetchall() if cursor.description else []
        except (driver.OperationalError, driver.InterfaceError) as exc:
            connection.events.emit("error", exc)
            raise

        response = QueryResponse(rows=list(rows), rowcount=cursor.rowcount, statement=cursor)
        return replace(request, response=response)

    def process_response(self, query: CompiledQuery) -> Any:
        response = query.response
        if response is None:
            return None
        if query.output is not None:
            return query.output(response)

        method = query.method
        if method == "raw":
            return response
        if method == "first":
            return response.rows[0] if response.rows else None
        if method == "pluck":
            return [row_value(row, query.pluck) for row in response.rows]
        if method == "select":
            return response.rows
        if method in ("insert", "update", "delete"):
            return response.rowcount
        return response

    @staticmethod
    def _count_placeholders(sql: str) -> int:
        count = 0
        quote: str | None = None
        for char in sql:
            if quote:
                if char == quote:
                    quote = None
                continue
            if char in ("'", '"'):
                quote = char
            elif char == "?":
                count += 1
        return count

    def _validate_params(self, sql: str, params: Sequence[Any]) -> None:
        placeholder_count = self._count_placeholders(sql)
        if placeholder_count != len(params):
            raise AdapterExecutionError(
                f"Parameter count mismatch: expected {placeholder_count}, received {len(params)}."
            )
