"""
Chainable query builder handing its state to the adapter's compiler.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Tuple

from .expressions import Q
from .statement import CompiledQuery

if TYPE_CHECKING:
    from ..adapters.base import BaseAdapter


@dataclass(frozen=True)
class QueryState:
    """
    Snapshot of builder calls consumed by ``QueryCompiler``.
    """

    table: str | None = None
    method: str = "select"
    columns: Tuple[str, ...] = ()
    where: Q | None = None
    ordering: Tuple[str, ...] = ()
    limit: int | None = None
    offset: int | None = None
    values: Any = None
    returning: Tuple[str, ...] = ()
    lock: str | None = None
    pluck: str | None = None
    context: Any = None
    options: Mapping[str, Any] | None = None


class QueryBuilder:
    """
    Immutable builder; every call returns a new instance.
    """

    def __init__(
        self,
        adapter: "BaseAdapter",
        table: str | None = None,
        *,
        state: Optional[QueryState] = None,
    ) -> None:
        self.adapter = adapter
        self.state = state or QueryState(table=table)

    # Reads ---------------------------------------------------------------
    def select(self, *columns: str) -> "QueryBuilder":
        return self._clone(method="select", columns=self.state.columns + columns)

    def first(self, *columns: str) -> "QueryBuilder":
        return self._clone(method="first", columns=self.state.columns + columns)

    def pluck(self, column: str) -> "QueryBuilder":
        return self._clone(method="pluck", columns=(column,), pluck=column)

    def filter(self, **lookups: Any) -> "QueryBuilder":
        return self._clone(where=self._add_q(Q(**lookups)))

    def exclude(self, **lookups: Any) -> "QueryBuilder":
        return self._clone(where=self._add_q(~Q(**lookups)))

    def where(self, q_object: Q) -> "QueryBuilder":
        return self._clone(where=self._add_q(q_object))

    def order_by(self, *fields: str) -> "QueryBuilder":
        return self._clone(ordering=tuple(fields))

    def limit(self, value: int) -> "QueryBuilder":
        return self._clone(limit=value)

    def offset(self, value: int) -> "QueryBuilder":
        return self._clone(offset=value)

    def for_update(self) -> "QueryBuilder":
        return self._clone(lock="update")

    def for_share(self) -> "QueryBuilder":
        return self._clone(lock="share")

    # Writes --------------------------------------------------------------
    def insert(
        self,
        rows: Mapping[str, Any] | Iterable[Mapping[str, Any]],
        returning: Iterable[str] = (),
    ) -> "QueryBuilder":
        if isinstance(rows, Mapping):
            values: list[Mapping[str, Any]] = [rows]
        else:
            values = list(rows)
        return self._clone(method="insert", values=values, returning=tuple(returning))

    def update(self, values: Mapping[str, Any], returning: Iterable[str] = ()) -> "QueryBuilder":
        return self._clone(method="update", values=dict(values), returning=tuple(returning))

    def delete(self, returning: Iterable[str] = ()) -> "QueryBuilder":
        return self._clone(method="delete", returning=tuple(returning))

    def truncate(self) -> "QueryBuilder":
        return self._clone(method="truncate")

    # Misc ----------------------------------------------------------------
    def query_context(self, context: Any) -> "QueryBuilder":
        return self._clone(context=context)

    def options(self, **options: Any) -> "QueryBuilder":
        merged = dict(self.state.options or {})
        merged.update(options)
        return self._clone(options=merged)

    def to_sql(self) -> CompiledQuery:
        if not self.state.table:
            raise ValueError("A table name is required to compile a query.")
        return self.adapter.query_compiler(self.state).to_sql()

    def run(self, connection: Any) -> Any:
        return self.adapter.run(connection, self.to_sql())

    def _add_q(self, q_object: Q) -> Q:
        if self.state.where is None or self.state.where.is_empty():
            return q_object
        return self.state.where & q_object

    def _clone(self, **changes: Any) -> "QueryBuilder":
        return QueryBuilder(self.adapter, state=replace(self.state, **changes))
