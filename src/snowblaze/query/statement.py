"""
Compiled statement containers passed between compilers and adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping


@dataclass(frozen=True)
class Raw:
    """
    Verbatim SQL fragment, emitted without quoting or bindings.
    """

    sql: str

    def __str__(self) -> str:
        return self.sql


@dataclass(frozen=True)
class QueryResponse:
    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int | None = None
    statement: Any = None


@dataclass(frozen=True)
class CompiledQuery:
    """
    SQL text with ordered bindings, produced once per compile call.

    ``output`` reshapes the driver response for the caller; ``response`` is
    only set on the copy returned by the adapter after execution.
    """

    sql: str
    bindings: tuple[Any, ...] = ()
    method: str = "raw"
    output: Callable[[QueryResponse], Any] | None = None
    pluck: str | None = None
    options: Mapping[str, Any] | None = None
    response: QueryResponse | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.bindings, tuple):
            object.__setattr__(self, "bindings", tuple(self.bindings))


def row_value(row: Mapping[str, Any], key: str) -> Any:
    """
    Read ``key`` from a result row regardless of the catalog's case.
    """

    for candidate in (key, key.upper(), key.lower()):
        if candidate in row:
            return row[candidate]
    wanted = key.lower()
    for name, value in row.items():
        if str(name).lower() == wanted:
            return value
    return None
