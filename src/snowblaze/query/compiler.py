"""
SQL compilation utilities translating builder state into SQL statements.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, List, Tuple

from .expressions import Q
from .statement import CompiledQuery, Raw

if TYPE_CHECKING:
    from ..adapters.base import BaseAdapter
    from .builder import QueryState


LOOKUP_OPERATORS = {
    "exact": "=",
    "ne": "<>",
    "iexact": "ilike",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "contains": "like",
    "in": "in",
}

_METHOD_COMPILERS = {
    "select": "select",
    "first": "select",
    "pluck": "select",
    "insert": "insert",
    "update": "update",
    "delete": "delete",
    "truncate": "truncate",
}


class QueryCompiler:
    """
    Compile ``QueryState`` into SQL and ordered bindings.

    Statement methods return either SQL text, which ``to_sql`` wraps using the
    bindings collected so far, or a finished ``CompiledQuery``.
    """

    def __init__(self, adapter: "BaseAdapter", state: "QueryState") -> None:
        self.adapter = adapter
        self.dialect = adapter.dialect
        self.logger = adapter.logger
        self.state = state
        self.bindings: List[Any] = []

    def to_sql(self) -> CompiledQuery:
        method = self.state.method
        compiler_name = _METHOD_COMPILERS.get(method)
        if compiler_name is None:
            raise ValueError(f"Unsupported query method '{method}'")
        result = getattr(self, compiler_name)()
        if not isinstance(result, CompiledQuery):
            result = CompiledQuery(sql=result, bindings=tuple(self.bindings))
        return replace(
            result,
            method=method,
            pluck=self.state.pluck,
            options=self.state.options,
        )

    # Statements --------------------------------------------------------
    def select(self) -> str:
        columns = self.state.columns or ("*",)
        sql_parts: List[str] = [
            f"select {self.dialect.columnize(list(columns), self.state.context)}",
            "from",
            self.table_name(),
        ]
        where_sql = self._where()
        if where_sql:
            sql_parts.append(where_sql)

        if self.state.ordering:
            order_sql = ", ".join(self._compile_ordering(field) for field in self.state.ordering)
            sql_parts.append(f"order by {order_sql}")

        limit = 1 if self.state.method == "first" else self.state.limit
        limit_clause = self.dialect.limit_clause(limit, self.state.offset)
        if limit_clause:
            sql_parts.append(limit_clause)

        lock_clause = self._lock()
        if lock_clause:
            sql_parts.append(lock_clause)
        return " ".join(sql_parts)

    def insert(self) -> str:
        rows = list(self.state.values or [])
        if not rows:
            return ""
        table = self.table_name()
        columns = sorted({column for row in rows for column in row})
        if not columns:
            return f"insert into {table} default values"

        tuples: List[str] = []
        for row in rows:
            slots = [self._parameter(row[column]) if column in row else "DEFAULT" for column in columns]
            tuples.append(f"({', '.join(slots)})")
        sql = (
            f"insert into {table} ({self.dialect.columnize(columns, self.state.context)}) "
            f"values {', '.join(tuples)}"
        )
        return self._append_returning(sql)

    def update(self) -> str:
        values = self.state.values or {}
        if not values:
            raise ValueError("update() requires at least one column value.")
        assignments = ", ".join(
            f"{self.dialect.wrap(column, self.state.context)} = {self._parameter(value)}"
            for column, value in values.items()
        )
        sql = f"update {self.table_name()} set {assignments}"
        where_sql = self._where()
        if where_sql:
            sql = f"{sql} {where_sql}"
        return self._append_returning(sql)

    def delete(self) -> str:
        sql = f"delete from {self.table_name()}"
        where_sql = self._where()
        if where_sql:
            sql = f"{sql} {where_sql}"
        return self._append_returning(sql)

    def truncate(self) -> str:
        return f"truncate table {self.table_name()}"

    # Locks -------------------------------------------------------------
    def for_update(self) -> str:
        return "for update"

    def for_share(self) -> str:
        return "for share"

    def _lock(self) -> str:
        if self.state.lock == "update":
            return self.for_update()
        if self.state.lock == "share":
            return self.for_share()
        return ""

    # Helpers -----------------------------------------------------------
    def table_name(self) -> str:
        if not self.state.table:
            raise ValueError("A table name is required to compile a query.")
        return self.dialect.format_table(self.state.table, self.state.context)

    def _parameter(self, value: Any) -> str:
        if isinstance(value, Raw):
            return value.sql
        self.bindings.append(value)
        return self.dialect.parameter_placeholder(len(self.bindings))

    def _append_returning(self, sql: str) -> str:
        if self.state.returning and self.dialect.capabilities.supports_returning:
            return f"{sql} returning {self.dialect.columnize(list(self.state.returning), self.state.context)}"
        return sql

    def _where(self) -> str:
        where = self.state.where
        if where is None or where.is_empty():
            return ""
        where_sql, params = self._compile_q(where)
        if not where_sql:
            return ""
        self.bindings.extend(params)
        return f"where {where_sql}"

    def _compile_ordering(self, field_name: str) -> str:
        descending = field_name.startswith("-")
        name = field_name[1:] if descending else field_name
        direction = "desc" if descending else "asc"
        return f"{self.dialect.wrap(name, self.state.context)} {direction}"

    def _compile_q(self, q: Q) -> Tuple[str, List[Any]]:
        if not q.children:
            return "", []

        parts: List[str] = []
        params: List[Any] = []

        for child in q.children:
            if isinstance(child, Q):
                child_sql, child_params = self._compile_q(child)
                if child_sql:
                    parts.append(f"({child_sql})")
                    params.extend(child_params)
            elif isinstance(child, tuple):
                column_lookup, value = child
                sql, child_params = self._compile_lookup(column_lookup, value)
                parts.append(sql)
                params.extend(child_params)

        if not parts:
            return "", []

        sql = f" {q.connector} ".join(parts)
        if q.negated:
            sql = f"not ({sql})"
        return sql, params

    def _compile_lookup(self, column_lookup: str, value: Any) -> Tuple[str, List[Any]]:
        if "__" in column_lookup:
            column_name, lookup = column_lookup.split("__", 1)
        else:
            column_name, lookup = column_lookup, "exact"

        column = self.dialect.wrap(column_name, self.state.context)

        if value is None:
            if lookup not in ("exact", "ne"):
                raise ValueError("NULL comparison only supported for equality.")
            return f"{column} is {'not ' if lookup == 'ne' else ''}null", []

        operator = LOOKUP_OPERATORS.get(lookup)
        if operator is None:
            raise ValueError(f"Unsupported lookup '{lookup}'")

        placeholder = self.dialect.parameter_placeholder()
        if lookup == "in":
            values = list(value)
            if not values:
                raise ValueError("'in' lookup requires at least one value.")
            placeholders = ", ".join(placeholder for _ in values)
            return f"{column} in ({placeholders})", values
        if isinstance(value, Raw):
            return f"{column} {operator} {value.sql}", []
        if lookup == "contains":
            value = f"%{value}%"
        return f"{column} {operator} {placeholder}", [value]
