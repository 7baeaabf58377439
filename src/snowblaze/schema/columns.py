"""
Column builders and the compiler turning them into column definitions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from ..query.statement import Raw

if TYPE_CHECKING:
    from ..adapters.base import BaseAdapter
    from .table import TableBuilder, TableCompiler


class SchemaError(RuntimeError):
    """Raised when a schema definition cannot be compiled."""


_SELF_KEYED_TYPES = frozenset({"increments", "big_increments"})


class ColumnBuilder:
    """
    Collects the type and modifiers of a single column.

    Column level ``primary``/``unique``/``index`` calls are forwarded to the
    owning table as table statements.
    """

    def __init__(
        self, table: "TableBuilder", column_type: str, name: str, *args: Any, **kwargs: Any
    ) -> None:
        self.table = table
        self.type = column_type
        self.name = name
        self.args = args
        self.kwargs = kwargs
        self.modifiers: Dict[str, Any] = {}
        self.method = "add"

    def nullable(self) -> "ColumnBuilder":
        self.modifiers["nullable"] = True
        return self

    def not_nullable(self) -> "ColumnBuilder":
        self.modifiers["nullable"] = False
        return self

    def default_to(self, value: Any) -> "ColumnBuilder":
        self.modifiers["default"] = value
        return self

    def comment(self, text: str | None) -> "ColumnBuilder":
        self.modifiers["comment"] = text
        return self

    def unsigned(self) -> "ColumnBuilder":
        self.modifiers["unsigned"] = True
        return self

    def collate(self, collation: str) -> "ColumnBuilder":
        self.modifiers["collate"] = collation
        return self

    def alter(self) -> "ColumnBuilder":
        self.method = "alter"
        return self

    def primary(self, constraint_name: Optional[str] = None) -> "ColumnBuilder":
        self.table.primary([self.name], constraint_name)
        return self

    def unique(self, index_name: Optional[str] = None) -> "ColumnBuilder":
        self.table.unique([self.name], index_name)
        return self

    def index(self, index_name: Optional[str] = None) -> "ColumnBuilder":
        self.table.index([self.name], index_name)
        return self

    @property
    def is_not_nullable(self) -> bool:
        return self.modifiers.get("nullable") is False or self.type in _SELF_KEYED_TYPES


class ColumnCompiler:
    """
    Render a ``ColumnBuilder`` as ``<name> <type><modifiers>``.

    Parameterized types are ``type_<name>`` methods; fixed ones live in
    ``TYPES``. Methods win, so a subclass may replace either kind.
    """

    TYPES: Dict[str, str] = {
        "increments": "int unsigned not null auto_increment primary key",
        "big_increments": "bigint unsigned not null auto_increment primary key",
        "integer": "int",
        "big_integer": "bigint",
        "medium_integer": "mediumint",
        "small_integer": "smallint",
        "tiny_integer": "tinyint",
        "boolean": "boolean",
        "text": "text",
        "medium_text": "mediumtext",
        "long_text": "longtext",
        "json": "json",
        "jsonb": "json",
        "uuid": "char(36)",
        "date": "date",
        "time": "time",
        "blob": "blob",
        "tiny_blob": "tinyblob",
        "medium_blob": "mediumblob",
        "long_blob": "longblob",
        "varbinary": "varbinary(255)",
    }

    MODIFIERS = ("unsigned", "nullable", "default", "collate", "comment")

    def __init__(
        self, adapter: "BaseAdapter", table_compiler: "TableCompiler", column: ColumnBuilder
    ) -> None:
        self.adapter = adapter
        self.dialect = adapter.dialect
        self.logger = adapter.logger
        self.table_compiler = table_compiler
        self.column = column

    def compile_column(self) -> str:
        return f"{self.wrapped_name()} {self.get_type()}{self.get_modifiers()}"

    def wrapped_name(self) -> str:
        return self.dialect.wrap(self.column.name, self.table_compiler.context)

    def get_type(self) -> str:
        method = getattr(self, f"type_{self.column.type}", None)
        if method is not None:
            return method(*self.column.args, **self.column.kwargs)
        try:
            return self.TYPES[self.column.type]
        except KeyError:
            raise SchemaError(f"Unknown column type '{self.column.type}'") from None

    def get_modifiers(self) -> str:
        pieces = []
        for modifier in self.MODIFIERS:
            if modifier not in self.column.modifiers:
                continue
            rendered = getattr(self, f"modifier_{modifier}")(self.column.modifiers[modifier])
            if rendered:
                pieces.append(rendered)
        return "".join(f" {piece}" for piece in pieces)

    # Types -------------------------------------------------------------
    def type_string(self, length: int | None = None) -> str:
        return f"varchar({length or 255})"

    def type_floating(self, precision: int | None = None, scale: int | None = None) -> str:
        return f"float({self._num(precision, 8)}, {self._num(scale, 2)})"

    def type_double(self, precision: int | None = None, scale: int | None = None) -> str:
        if precision is None:
            return "double"
        return f"double({self._num(precision, 8)}, {self._num(scale, 2)})"

    def type_decimal(self, precision: int | None = None, scale: int | None = None) -> str:
        return f"decimal({self._num(precision, 8)}, {self._num(scale, 2)})"

    def type_bit(self, length: int | None = None) -> str:
        return f"bit({length})" if length else "bit"

    def type_binary(self, length: int | None = None) -> str:
        return f"varbinary({length})" if length else "blob"

    def type_datetime(self, use_tz: bool = True, precision: int | None = None) -> str:
        return f"datetime({precision})" if precision else "datetime"

    def type_timestamp(self, use_tz: bool = True, precision: int | None = None) -> str:
        return f"timestamp({precision})" if precision else "timestamp"

    def type_enum(self, values: tuple[str, ...] = ()) -> str:
        return f"enum({', '.join(self.quote_literal(value) for value in values)})"

    def type_set(self, values: tuple[str, ...] = ()) -> str:
        return f"set({', '.join(self.quote_literal(value) for value in values)})"

    def type_specific_type(self, sql: str) -> str:
        return sql

    # Modifiers ---------------------------------------------------------
    def modifier_unsigned(self, enabled: bool) -> str:
        return "unsigned" if enabled else ""

    def modifier_nullable(self, nullable: bool) -> str:
        return "null" if nullable else "not null"

    def modifier_default(self, value: Any) -> str:
        return f"default {self.format_default(value)}"

    def modifier_collate(self, collation: str) -> str:
        return f"collate {self.quote_literal(collation)}"

    def modifier_comment(self, text: str | None) -> str:
        return f"comment {self.quote_literal(text or '')}"

    # Helpers -----------------------------------------------------------
    @staticmethod
    def quote_literal(value: Any) -> str:
        escaped = str(value).replace("'", "''")
        return f"'{escaped}'"

    def format_default(self, value: Any) -> str:
        if isinstance(value, Raw):
            return value.sql
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return self.quote_literal(value)

    @staticmethod
    def _num(value: int | None, fallback: int) -> int:
        if value is None:
            return fallback
        return int(value)
