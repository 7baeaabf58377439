"""
Table builders and the compiler emitting create/alter statements.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

from ..dialects.base import is_quoted, split_identifier, unquote
from ..query.statement import CompiledQuery, Raw
from .columns import ColumnBuilder

if TYPE_CHECKING:
    from ..adapters.base import BaseAdapter


def _as_list(columns: str | Iterable[str]) -> List[str]:
    if isinstance(columns, str):
        return [columns]
    return list(columns)


@dataclass
class TableStatement:
    method: str
    args: tuple = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)


class TableBuilder:
    """
    Receives the callback passed to ``SchemaBuilder.create_table``/``table``.

    ``method`` is ``create`` or ``alter``; column factories return the column
    builder so modifiers can be chained.
    """

    def __init__(
        self,
        adapter: "BaseAdapter",
        method: str,
        table_name: str,
        *,
        if_not_exists: bool = False,
        context: Any = None,
    ) -> None:
        self.adapter = adapter
        self.method = method
        self.table_name = table_name
        self.if_not_exists = if_not_exists
        self.context = context
        self.columns: List[ColumnBuilder] = []
        self.statements: List[TableStatement] = []
        self.single: Dict[str, Any] = {}

    # Columns -----------------------------------------------------------
    def _column(self, column_type: str, name: str, *args: Any, **kwargs: Any) -> ColumnBuilder:
        column = self.adapter.column_builder(self, column_type, name, *args, **kwargs)
        self.columns.append(column)
        return column

    def increments(self, name: str = "id") -> ColumnBuilder:
        return self._column("increments", name)

    def big_increments(self, name: str = "id") -> ColumnBuilder:
        return self._column("big_increments", name)

    def integer(self, name: str) -> ColumnBuilder:
        return self._column("integer", name)

    def big_integer(self, name: str) -> ColumnBuilder:
        return self._column("big_integer", name)

    def medium_integer(self, name: str) -> ColumnBuilder:
        return self._column("medium_integer", name)

    def small_integer(self, name: str) -> ColumnBuilder:
        return self._column("small_integer", name)

    def tiny_integer(self, name: str) -> ColumnBuilder:
        return self._column("tiny_integer", name)

    def floating(self, name: str, precision: int | None = None, scale: int | None = None) -> ColumnBuilder:
        return self._column("floating", name, precision, scale)

    def double(self, name: str, precision: int | None = None, scale: int | None = None) -> ColumnBuilder:
        return self._column("double", name, precision, scale)

    def decimal(self, name: str, precision: int | None = None, scale: int | None = None) -> ColumnBuilder:
        return self._column("decimal", name, precision, scale)

    def boolean(self, name: str) -> ColumnBuilder:
        return self._column("boolean", name)

    def string(self, name: str, length: int | None = None) -> ColumnBuilder:
        return self._column("string", name, length)

    def text(self, name: str, text_type: str | None = None) -> ColumnBuilder:
        column_type = {"mediumtext": "medium_text", "longtext": "long_text"}.get(text_type or "", "text")
        return self._column(column_type, name)

    def json(self, name: str) -> ColumnBuilder:
        return self._column("json", name)

    def jsonb(self, name: str) -> ColumnBuilder:
        return self._column("jsonb", name)

    def uuid(self, name: str) -> ColumnBuilder:
        return self._column("uuid", name)

    def date(self, name: str) -> ColumnBuilder:
        return self._column("date", name)

    def time(self, name: str) -> ColumnBuilder:
        return self._column("time", name)

    def datetime(self, name: str, *, use_tz: bool = True, precision: int | None = None) -> ColumnBuilder:
        return self._column("datetime", name, use_tz=use_tz, precision=precision)

    def timestamp(self, name: str, *, use_tz: bool = True, precision: int | None = None) -> ColumnBuilder:
        return self._column("timestamp", name, use_tz=use_tz, precision=precision)

    def binary(self, name: str, length: int | None = None) -> ColumnBuilder:
        return self._column("binary", name, length)

    def varbinary(self, name: str) -> ColumnBuilder:
        return self._column("varbinary", name)

    def blob(self, name: str, blob_type: str | None = None) -> ColumnBuilder:
        column_type = {"tinyblob": "tiny_blob", "mediumblob": "medium_blob", "longblob": "long_blob"}.get(
            blob_type or "", "blob"
        )
        return self._column(column_type, name)

    def bit(self, name: str, length: int | None = None) -> ColumnBuilder:
        return self._column("bit", name, length)

    def enum(self, name: str, values: Sequence[str]) -> ColumnBuilder:
        return self._column("enum", name, tuple(values))

    def set(self, name: str, values: Sequence[str]) -> ColumnBuilder:
        return self._column("set", name, tuple(values))

    def specific_type(self, name: str, sql: str) -> ColumnBuilder:
        return self._column("specific_type", name, sql)

    def timestamps(self, *, use_tz: bool = True, default_to_now: bool = False) -> List[ColumnBuilder]:
        columns = [self.timestamp("created_at", use_tz=use_tz), self.timestamp("updated_at", use_tz=use_tz)]
        if default_to_now:
            for column in columns:
                column.not_nullable().default_to(Raw(self.adapter.current_timestamp_sql))
        return columns

    # Table statements --------------------------------------------------
    def _statement(self, method: str, *args: Any, **kwargs: Any) -> "TableBuilder":
        self.statements.append(TableStatement(method, args, kwargs))
        return self

    def primary(self, columns: str | Iterable[str], constraint_name: Optional[str] = None) -> "TableBuilder":
        return self._statement("primary", _as_list(columns), constraint_name)

    def drop_primary(self, constraint_name: Optional[str] = None) -> "TableBuilder":
        return self._statement("drop_primary", constraint_name)

    def unique(self, columns: str | Iterable[str], index_name: Optional[str] = None) -> "TableBuilder":
        return self._statement("unique", _as_list(columns), index_name)

    def drop_unique(self, columns: str | Iterable[str], index_name: Optional[str] = None) -> "TableBuilder":
        return self._statement("drop_unique", _as_list(columns), index_name)

    def index(
        self,
        columns: str | Iterable[str],
        index_name: Optional[str] = None,
        index_type: Optional[str] = None,
    ) -> "TableBuilder":
        return self._statement("index", _as_list(columns), index_name, index_type)

    def drop_index(self, columns: str | Iterable[str], index_name: Optional[str] = None) -> "TableBuilder":
        return self._statement("drop_index", _as_list(columns), index_name)

    def foreign(
        self,
        columns: str | Iterable[str],
        references_table: str,
        references_columns: str | Iterable[str] = ("id",),
        *,
        constraint_name: Optional[str] = None,
        on_delete: Optional[str] = None,
        on_update: Optional[str] = None,
    ) -> "TableBuilder":
        return self._statement(
            "foreign",
            _as_list(columns),
            references_table,
            _as_list(references_columns),
            constraint_name=constraint_name,
            on_delete=on_delete,
            on_update=on_update,
        )

    def drop_foreign(self, columns: str | Iterable[str], constraint_name: Optional[str] = None) -> "TableBuilder":
        return self._statement("drop_foreign", _as_list(columns), constraint_name)

    def drop_column(self, *names: str | Iterable[str]) -> "TableBuilder":
        flattened: List[str] = []
        for name in names:
            flattened.extend(_as_list(name))
        return self._statement("drop_column", flattened)

    def drop_timestamps(self) -> "TableBuilder":
        return self.drop_column("created_at", "updated_at")

    def rename_column(self, old_name: str, new_name: str) -> "TableBuilder":
        return self._statement("rename_column", old_name, new_name)

    def comment(self, text: str | None) -> "TableBuilder":
        self.single["comment"] = text
        return self

    def inherits(self, parent_table: str) -> "TableBuilder":
        self.single["inherits"] = parent_table
        return self


class TableCompiler:
    """
    Compile a ``TableBuilder`` into an ordered list of statements.

    The main create/alter statement comes first, then statements scheduled
    by column compilers (``push_additional``), then table statements.
    """

    def __init__(self, adapter: "BaseAdapter", builder: TableBuilder) -> None:
        self.adapter = adapter
        self.dialect = adapter.dialect
        self.logger = adapter.logger
        self.builder = builder
        self.context = builder.context
        self.sequence: List[CompiledQuery] = []
        self._additional: List[CompiledQuery] = []

    def to_sql(self) -> List[CompiledQuery]:
        added = [column for column in self.builder.columns if column.method == "add"]
        altered = [column for column in self.builder.columns if column.method == "alter"]
        if self.builder.method == "create":
            self.create_query(self.get_columns(added), self.builder.if_not_exists)
        else:
            if added:
                self.add_columns(self.get_columns(added))
            for column in altered:
                self.alter_column(column)
            if "comment" in self.builder.single:
                self.comment(self.builder.single["comment"])
        self.sequence.extend(self._additional)
        self._additional = []
        for statement in self.builder.statements:
            getattr(self, statement.method)(*statement.args, **statement.kwargs)
        return list(self.sequence)

    # Sequence helpers --------------------------------------------------
    def push_query(self, sql: str, bindings: Sequence[Any] = ()) -> None:
        self.sequence.append(CompiledQuery(sql=sql, bindings=tuple(bindings), method="schema"))

    def push_additional(self, sql: str, bindings: Sequence[Any] = ()) -> None:
        self._additional.append(CompiledQuery(sql=sql, bindings=tuple(bindings), method="schema"))

    def get_columns(self, columns: List[ColumnBuilder]) -> List[str]:
        return [self.adapter.column_compiler(self, column).compile_column() for column in columns]

    def table_name(self) -> str:
        return self.dialect.format_table(self.builder.table_name, self.context)

    @property
    def table_name_raw(self) -> str:
        return unquote(split_identifier(self.builder.table_name)[-1])

    def wrap(self, value: str) -> str:
        return self.dialect.wrap(value, self.context)

    def columnize(self, columns: List[str]) -> str:
        return self.dialect.columnize(columns, self.context)

    @property
    def _table_quoted(self) -> bool:
        return is_quoted(split_identifier(self.builder.table_name)[-1])

    def _default_name(self, name: str) -> str:
        # quoted tables keep their case in derived constraint names
        if self._table_quoted:
            return self.dialect.quote_identifier(name)
        return name

    def _index_name(self, columns: List[str], suffix: str) -> str:
        name = f"{self.table_name_raw}_{'_'.join(columns)}_{suffix}"
        if self._table_quoted:
            return self._default_name(name)
        return name.lower()

    # Create / alter ----------------------------------------------------
    def create_query(self, columns: List[str], if_not_exists: bool) -> None:
        create_statement = "create table if not exists " if if_not_exists else "create table "
        sql = f"{create_statement}{self.table_name()} ({', '.join(columns)})"
        if "inherits" in self.builder.single:
            self.logger.warning("Table inheritance is not supported by the %s dialect.", self.dialect.name)
        if "comment" in self.builder.single:
            sql += f" comment = {self._literal(self.builder.single['comment'])}"
        self.push_query(sql)

    def add_columns(self, columns: List[str]) -> None:
        additions = ", ".join(f"add {column}" for column in columns)
        self.push_query(f"alter table {self.table_name()} {additions}")

    def alter_column(self, column: ColumnBuilder) -> None:
        compiler = self.adapter.column_compiler(self, column)
        self.push_query(
            f"alter table {self.table_name()} alter column {compiler.wrapped_name()} type {compiler.get_type()}"
        )

    def comment(self, text: str | None) -> None:
        self.push_query(f"alter table {self.table_name()} comment = {self._literal(text)}")

    # Constraints -------------------------------------------------------
    def primary(self, columns: List[str], constraint_name: Optional[str] = None) -> None:
        name = self.wrap(constraint_name or self._default_name(f"{self.table_name_raw}_pkey"))
        self.push_query(
            f"alter table {self.table_name()} add constraint {name} primary key ({self.columnize(columns)})"
        )

    def drop_primary(self, constraint_name: Optional[str] = None) -> None:
        name = self.wrap(constraint_name or self._default_name(f"{self.table_name_raw}_pkey"))
        self.push_query(f"alter table {self.table_name()} drop constraint {name}")

    def unique(self, columns: List[str], index_name: Optional[str] = None) -> None:
        name = self.wrap(index_name or self._index_name(columns, "unique"))
        self.push_query(f"alter table {self.table_name()} add constraint {name} unique ({self.columnize(columns)})")

    def drop_unique(self, columns: List[str], index_name: Optional[str] = None) -> None:
        name = self.wrap(index_name or self._index_name(columns, "unique"))
        self.push_query(f"alter table {self.table_name()} drop constraint {name}")

    def index(self, columns: List[str], index_name: Optional[str] = None, index_type: Optional[str] = None) -> None:
        name = self.wrap(index_name or self._index_name(columns, "index"))
        kind = f"{index_type} " if index_type else ""
        self.push_query(f"create {kind}index {name} on {self.table_name()} ({self.columnize(columns)})")

    def drop_index(self, columns: List[str], index_name: Optional[str] = None) -> None:
        name = self.wrap(index_name or self._index_name(columns, "index"))
        self.push_query(f"drop index {name}")

    def foreign(
        self,
        columns: List[str],
        references_table: str,
        references_columns: List[str],
        *,
        constraint_name: Optional[str] = None,
        on_delete: Optional[str] = None,
        on_update: Optional[str] = None,
    ) -> None:
        name = self.wrap(constraint_name or self._index_name(columns, "foreign"))
        sql = (
            f"alter table {self.table_name()} add constraint {name} "
            f"foreign key ({self.columnize(columns)}) "
            f"references {self.wrap(references_table)} ({self.columnize(references_columns)})"
        )
        if on_delete:
            sql += f" on delete {on_delete}"
        if on_update:
            sql += f" on update {on_update}"
        self.push_query(sql)

    def drop_foreign(self, columns: List[str], constraint_name: Optional[str] = None) -> None:
        name = self.wrap(constraint_name or self._index_name(columns, "foreign"))
        self.push_query(f"alter table {self.table_name()} drop constraint {name}")

    # Columns -----------------------------------------------------------
    def drop_column(self, columns: List[str]) -> None:
        drops = ", ".join(f"drop column {self.wrap(column)}" for column in columns)
        self.push_query(f"alter table {self.table_name()} {drops}")

    def rename_column(self, old_name: str, new_name: str) -> None:
        self.push_query(
            f"alter table {self.table_name()} rename column {self.wrap(old_name)} to {self.wrap(new_name)}"
        )

    @staticmethod
    def _literal(text: str | None) -> str:
        escaped = (text or "").replace("'", "''")
        return f"'{escaped}'"
