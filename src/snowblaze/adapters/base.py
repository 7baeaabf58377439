"""
Adapter base class and connection configuration.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from ..dialects.base import BaseDialect, Dialect, WrapIdentifierHook
from ..query.builder import QueryBuilder, QueryState
from ..query.compiler import QueryCompiler
from ..query.statement import CompiledQuery
from ..schema.builder import SchemaBuilder, SchemaCompiler
from ..schema.columns import ColumnBuilder, ColumnCompiler
from ..schema.table import TableBuilder, TableCompiler
from ..security.dsns import DSNConfig, parse_dsn
from ..utils import get_logger, resolve_slow_query_ms

if TYPE_CHECKING:
    from ..persistence.transaction import TransactionManager


class AdapterError(RuntimeError):
    """Base error for adapter-related failures."""


class AdapterConfigurationError(AdapterError):
    """Raised when configuration or required dependencies are invalid."""


class AdapterConnectionError(AdapterError):
    """Raised when a connection is missing or unusable."""


class AdapterExecutionError(AdapterError):
    """Raised when a statement cannot be handed to the driver."""


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_INT_OPTIONS = {"network_timeout", "socket_timeout", "client_prefetch_threads"}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise AdapterConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise AdapterConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


def _parse_int(value: str, *, key: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise AdapterConfigurationError(f"Invalid integer value for '{key}': {value!r}") from exc


def _pop_bool(query: dict[str, str], key: str) -> bool | None:
    if key not in query:
        return None
    return _parse_bool(query.pop(key), key=key)


def _pop_float(query: dict[str, str], key: str) -> float | None:
    if key not in query:
        return None
    return _parse_float(query.pop(key), key=key)


def _parse_option_values(query: dict[str, str]) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for key, value in query.items():
        if key in _INT_OPTIONS:
            options[key] = _parse_int(value, key=key)
        else:
            options[key] = value
    return options


@dataclass
class ConnectionConfig:
    """
    Normalized Snowflake connection settings.

    ``host`` written as ``<account>.<region>`` fills a missing ``account`` and
    ``region``; ``user`` is accepted as an alias of ``username``.
    """

    account: str | None = None
    region: str | None = None
    username: str | None = None
    user: str | None = None
    password: str | None = None
    host: str | None = None
    warehouse: str | None = None
    database: str | None = None
    schema: str | None = None
    role: str | None = None
    autocommit: bool | None = None
    login_timeout: float | None = None
    options: dict[str, Any] | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        self.normalize()

    def normalize(self) -> "ConnectionConfig":
        if self.user and not self.username:
            self.username = self.user
        if self.host:
            account, _, rest = self.host.partition(".")
            region = rest.split(".", 1)[0] or None
            if not self.account:
                self.account = account
            if not self.region:
                self.region = region
        return self

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a connection config by parsing the DSN string.
        """

        parsed = parse_dsn(dsn)
        if parsed.driver != "snowflake":
            raise AdapterConfigurationError(f"Unsupported DSN scheme '{parsed.driver}'")
        query = dict(parsed.query)

        values: dict[str, Any] = {
            "host": parsed.host,
            "username": parsed.username,
            "password": parsed.password,
            "database": parsed.database,
            "schema": parsed.schema,
            "warehouse": query.pop("warehouse", None),
            "role": query.pop("role", None),
            "account": query.pop("account", None),
            "region": query.pop("region", None),
            "autocommit": _pop_bool(query, "autocommit"),
            "login_timeout": _pop_float(query, "login_timeout"),
        }
        options = _parse_option_values(query)
        options.update(kwargs.pop("options", None) or {})
        for key, value in kwargs.items():
            values[key] = value

        return cls(dsn=parsed, options=options or None, **values)

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any], **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from a plain mapping; unknown keys become driver options.
        """

        known = {item.name for item in fields(cls)} - {"dsn", "options"}
        values = {key: value for key, value in settings.items() if key in known}
        options = {
            key: value for key, value in settings.items() if key not in known and key != "options"
        }
        options.update(settings.get("options") or {})
        values.update(kwargs)
        return cls(options=options or None, **values)

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from an environment variable containing a DSN.
        """

        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    @classmethod
    def coerce(cls, value: "ConnectionConfig | Mapping[str, Any] | str | None") -> "ConnectionConfig":
        if value is None:
            return cls()
        if isinstance(value, ConnectionConfig):
            return value.normalize()
        if isinstance(value, str):
            return cls.from_dsn(value)
        return cls.from_mapping(value)

    def driver_settings(self) -> dict[str, Any]:
        """
        Keyword arguments for the driver's ``connect``; unset values are omitted.
        """

        settings: dict[str, Any] = {
            "account": self.account,
            "region": self.region,
            "user": self.username,
            "password": self.password,
            "warehouse": self.warehouse,
            "database": self.database,
            "schema": self.schema,
            "role": self.role,
            "autocommit": self.autocommit,
            "login_timeout": self.login_timeout,
            "paramstyle": "qmark",
        }
        settings.update(self.options or {})
        return {key: value for key, value in settings.items() if value is not None}

    def redacted_dsn(self) -> str:
        """
        Return a DSN safe for logging (credentials removed).
        """

        if self.dsn:
            return self.dsn.redacted()
        location = ".".join(part for part in (self.account, self.region) if part)
        user = f"{self.username}@" if self.username else ""
        return f"snowflake://{user}{location}"

    def descriptive_label(self) -> str:
        """
        Describe the config source for diagnostics.
        """

        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


class BaseAdapter:
    """
    Client contract shared by dialect adapters.

    Compilers and builders are created through the factory methods below, so a
    dialect swaps behavior by returning its own subclasses. Driver-facing
    methods are implemented per dialect.
    """

    name = "base"
    driver_name = ""
    current_timestamp_sql = "CURRENT_TIMESTAMP"

    def __init__(
        self,
        connection: ConnectionConfig | Mapping[str, Any] | str | None = None,
        *,
        wrap_identifier: WrapIdentifierHook | None = None,
        strict_primary_keys: bool = False,
        logger: logging.Logger | None = None,
        slow_query_ms: int | None = None,
    ) -> None:
        self.connection_settings = ConnectionConfig.coerce(connection)
        self.wrap_identifier = wrap_identifier
        self.strict_primary_keys = strict_primary_keys
        self.logger = logger or get_logger(f"adapters.{self.name}")
        self.slow_query_ms = resolve_slow_query_ms(default=1000, override=slow_query_ms)
        self.dialect: Dialect = self.create_dialect()
        self._driver_module: Any = None

    def create_dialect(self) -> Dialect:
        return BaseDialect()

    # Builders and compilers --------------------------------------------
    def query_builder(self, table: str | None = None) -> QueryBuilder:
        return QueryBuilder(self, table)

    def schema_builder(self) -> SchemaBuilder:
        return SchemaBuilder(self)

    def query_compiler(self, state: QueryState) -> QueryCompiler:
        return QueryCompiler(self, state)

    def column_builder(
        self, table: TableBuilder, column_type: str, name: str, *args: Any, **kwargs: Any
    ) -> ColumnBuilder:
        return ColumnBuilder(table, column_type, name, *args, **kwargs)

    def column_compiler(self, table_compiler: TableCompiler, column: ColumnBuilder) -> ColumnCompiler:
        return ColumnCompiler(self, table_compiler, column)

    def table_compiler(self, builder: TableBuilder) -> TableCompiler:
        return TableCompiler(self, builder)

    def schema_compiler(self, builder: SchemaBuilder) -> SchemaCompiler:
        return SchemaCompiler(self, builder)

    def transaction(self, connection: Any) -> "TransactionManager":
        from ..persistence.transaction import TransactionManager

        return TransactionManager(self, connection)

    def custom_wrap_identifier(self, value: str, orig_impl: Any, query_context: Any = None) -> str:
        if self.wrap_identifier is not None:
            return self.wrap_identifier(value, orig_impl, query_context)
        return orig_impl(value)

    # Driver --------------------------------------------------------------
    @property
    def driver(self) -> Any:
        if self._driver_module is None:
            self._driver_module = self._driver()
        return self._driver_module

    def _driver(self) -> Any:
        raise NotImplementedError

    def acquire_raw_connection(self) -> Any:
        raise NotImplementedError

    def destroy_raw_connection(self, connection: Any) -> None:
        raise NotImplementedError

    def validate_connection(self, connection: Any) -> bool:
        raise NotImplementedError

    def _query(self, connection: Any, request: CompiledQuery | str | None) -> CompiledQuery | None:
        raise NotImplementedError

    def process_response(self, query: CompiledQuery) -> Any:
        raise NotImplementedError

    # Execution -----------------------------------------------------------
    def run(self, connection: Any, statements: CompiledQuery | str | Iterable[CompiledQuery]) -> Any:
        """
        Execute compiled statements in order and return the processed result,
        or a list of results when several statements were given.
        """

        if connection is None:
            raise AdapterConnectionError("A connection is required to run statements.")
        if isinstance(statements, (CompiledQuery, str)):
            return self._run_one(connection, statements)
        return [self._run_one(connection, statement) for statement in statements]

    def _run_one(self, connection: Any, statement: CompiledQuery | str) -> Any:
        executed = self._query(connection, statement)
        if executed is None:
            return None
        return self.process_response(executed)
