"""
Schema builder recording DDL calls and the compiler turning them into SQL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

from ..query.statement import CompiledQuery, QueryResponse, row_value
from .table import TableBuilder

if TYPE_CHECKING:
    from ..adapters.base import BaseAdapter


TableCallback = Callable[[TableBuilder], None]


@dataclass(frozen=True)
class ColumnInfo:
    type: Optional[str]
    max_length: Optional[int]
    nullable: bool
    default_value: Any


class SchemaBuilder:
    """
    Produces dialect-specific SQL for schema manipulation.

    Calls are recorded and compiled together by ``to_sql``, so one builder can
    describe a whole migration step.
    """

    def __init__(self, adapter: "BaseAdapter") -> None:
        self.adapter = adapter
        self.sequence: List[tuple[str, tuple]] = []
        self.context: Any = None

    def _push(self, method: str, *args: Any) -> "SchemaBuilder":
        self.sequence.append((method, args))
        return self

    def create_table(self, table_name: str, callback: TableCallback) -> "SchemaBuilder":
        return self._push("create_table", table_name, callback, False)

    def create_table_if_not_exists(self, table_name: str, callback: TableCallback) -> "SchemaBuilder":
        return self._push("create_table", table_name, callback, True)

    def table(self, table_name: str, callback: TableCallback) -> "SchemaBuilder":
        return self._push("alter_table", table_name, callback)

    alter_table = table

    def drop_table(self, table_name: str) -> "SchemaBuilder":
        return self._push("drop_table", table_name)

    def drop_table_if_exists(self, table_name: str) -> "SchemaBuilder":
        return self._push("drop_table_if_exists", table_name)

    def rename_table(self, old_name: str, new_name: str) -> "SchemaBuilder":
        return self._push("rename_table", old_name, new_name)

    def has_table(self, table_name: str) -> "SchemaBuilder":
        return self._push("has_table", table_name)

    def has_column(self, table_name: str, column_name: str) -> "SchemaBuilder":
        return self._push("has_column", table_name, column_name)

    def column_info(self, table_name: str, column_name: Optional[str] = None) -> "SchemaBuilder":
        return self._push("column_info", table_name, column_name)

    def create_schema(self, schema_name: str) -> "SchemaBuilder":
        return self._push("create_schema", schema_name, False)

    def create_schema_if_not_exists(self, schema_name: str) -> "SchemaBuilder":
        return self._push("create_schema", schema_name, True)

    def drop_schema(self, schema_name: str, *, cascade: bool = False) -> "SchemaBuilder":
        return self._push("drop_schema", schema_name, False, cascade)

    def drop_schema_if_exists(self, schema_name: str, *, cascade: bool = False) -> "SchemaBuilder":
        return self._push("drop_schema", schema_name, True, cascade)

    def raw(self, sql: str, bindings: Sequence[Any] = ()) -> "SchemaBuilder":
        return self._push("raw", sql, tuple(bindings))

    def query_context(self, context: Any) -> "SchemaBuilder":
        self.context = context
        return self

    def to_sql(self) -> List[CompiledQuery]:
        return self.adapter.schema_compiler(self).to_sql()

    def run(self, connection: Any) -> Any:
        return self.adapter.run(connection, self.to_sql())


class SchemaCompiler:
    """
    Compile recorded ``SchemaBuilder`` calls in order.
    """

    def __init__(self, adapter: "BaseAdapter", builder: SchemaBuilder) -> None:
        self.adapter = adapter
        self.dialect = adapter.dialect
        self.logger = adapter.logger
        self.builder = builder
        self.context = builder.context
        self.sequence: List[CompiledQuery] = []

    def to_sql(self) -> List[CompiledQuery]:
        for method, args in self.builder.sequence:
            getattr(self, method)(*args)
        return list(self.sequence)

    def push_query(
        self,
        sql: str,
        bindings: Sequence[Any] = (),
        output: Callable[[QueryResponse], Any] | None = None,
    ) -> None:
        self.sequence.append(CompiledQuery(sql=sql, bindings=tuple(bindings), method="schema", output=output))

    def wrap(self, value: str) -> str:
        return self.dialect.wrap(value, self.context)

    # Tables ------------------------------------------------------------
    def create_table(self, table_name: str, callback: TableCallback, if_not_exists: bool) -> None:
        table = TableBuilder(self.adapter, "create", table_name, if_not_exists=if_not_exists, context=self.context)
        callback(table)
        self.sequence.extend(self.adapter.table_compiler(table).to_sql())

    def alter_table(self, table_name: str, callback: TableCallback) -> None:
        table = TableBuilder(self.adapter, "alter", table_name, context=self.context)
        callback(table)
        self.sequence.extend(self.adapter.table_compiler(table).to_sql())

    def drop_table(self, table_name: str) -> None:
        self.push_query(f"drop table {self.wrap(table_name)}")

    def drop_table_if_exists(self, table_name: str) -> None:
        self.push_query(f"drop table if exists {self.wrap(table_name)}")

    def rename_table(self, old_name: str, new_name: str) -> None:
        self.push_query(f"rename table {self.wrap(old_name)} to {self.wrap(new_name)}")

    # Schemas -----------------------------------------------------------
    def create_schema(self, schema_name: str, if_not_exists: bool) -> None:
        clause = "if not exists " if if_not_exists else ""
        self.push_query(f"create schema {clause}{self.wrap(schema_name)}")

    def drop_schema(self, schema_name: str, if_exists: bool, cascade: bool) -> None:
        clause = "if exists " if if_exists else ""
        suffix = " cascade" if cascade else ""
        self.push_query(f"drop schema {clause}{self.wrap(schema_name)}{suffix}")

    def raw(self, sql: str, bindings: Sequence[Any]) -> None:
        self.push_query(sql, bindings)

    # Introspection -----------------------------------------------------
    def has_table(self, table_name: str) -> None:
        self.push_query(
            "select * from information_schema.tables where table_name = ? and table_schema = database()",
            [table_name],
            output=lambda response: len(response.rows) > 0,
        )

    def has_column(self, table_name: str, column_name: str) -> None:
        self.push_query(
            "select * from information_schema.columns where table_name = ? and column_name = ? "
            "and table_schema = database()",
            [table_name, column_name],
            output=lambda response: len(response.rows) > 0,
        )

    def column_info(self, table_name: str, column_name: Optional[str]) -> None:
        self.push_query(
            "select * from information_schema.columns where table_name = ? and table_schema = database()",
            [table_name],
            output=self.column_info_output(column_name),
        )

    @staticmethod
    def column_info_output(column_name: Optional[str]) -> Callable[[QueryResponse], Any]:
        def output(response: QueryResponse) -> Any:
            columns: Dict[str, ColumnInfo] = {}
            for row in response.rows:
                columns[row_value(row, "column_name")] = ColumnInfo(
                    type=row_value(row, "data_type"),
                    max_length=row_value(row, "character_maximum_length"),
                    nullable=row_value(row, "is_nullable") == "YES",
                    default_value=row_value(row, "column_default"),
                )
            if column_name is not None and column_name in columns:
                return columns[column_name]
            return columns

        return output
