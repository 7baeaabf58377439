"""
Where-clause expressions for the query builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List


AND = "and"
OR = "or"


@dataclass
class Q:
    """
    Boolean filter tree built from ``column__lookup=value`` keywords.

    ``Q(email="a") | ~Q(age__lt=18)`` compiles to
    ``("EMAIL" = ?) or (not ("AGE" < ?))`` under the Snowflake dialect.
    """

    children: List[Any] = field(default_factory=list)
    connector: str = AND
    negated: bool = False

    def __init__(self, *children: Any, **lookups: Any) -> None:
        self.children = [*children, *lookups.items()]
        self.connector = AND
        self.negated = False

    def __or__(self, other: "Q") -> "Q":
        return self._combine(other, OR)

    def __and__(self, other: "Q") -> "Q":
        return self._combine(other, AND)

    def __invert__(self) -> "Q":
        q = self._clone()
        q.negated = not q.negated
        return q

    def _clone(self) -> "Q":
        clone = Q(*self.children)
        clone.connector = self.connector
        clone.negated = self.negated
        return clone

    def _combine(self, other: "Q", connector: str) -> "Q":
        if self.is_empty():
            return other._clone()
        if other.is_empty():
            return self._clone()
        q = Q(self._clone(), other._clone())
        q.connector = connector
        return q

    def is_empty(self) -> bool:
        return not self.children
