"""
Dialect strategy interfaces describing SQL compilation behaviors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Protocol

WrapIdentifierHook = Callable[[str, Callable[[str], str], Any], str]

_ALIAS_RE = re.compile(r"\s+as\s+", re.IGNORECASE)


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.
    """

    supports_returning: bool = False


class Dialect(Protocol):
    """
    Strategy interface consumed across query, schema, and adapter layers.
    """

    @property
    def name(self) -> str: ...

    @property
    def param_style(self) -> str: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def wrap_identifier(self, identifier: str, context: Any = None) -> str: ...

    def wrap(self, value: str, context: Any = None) -> str: ...

    def format_table(self, table_name: str, context: Any = None) -> str: ...

    def columnize(self, columns: list[str], context: Any = None) -> str: ...

    def limit_clause(self, limit: int | None, offset: int | None) -> str: ...

    def parameter_placeholder(self, position: int | None = None) -> str: ...


def is_quoted(identifier: str) -> bool:
    return len(identifier) >= 2 and identifier.startswith('"') and identifier.endswith('"')


def split_identifier(value: str) -> list[str]:
    """
    Split a dotted reference, keeping dots inside quoted atoms.
    """

    atoms: list[str] = []
    current = ""
    in_quotes = False
    for char in value:
        if char == '"':
            in_quotes = not in_quotes
        if char == "." and not in_quotes:
            atoms.append(current)
            current = ""
            continue
        current += char
    atoms.append(current)
    return atoms


def unquote(identifier: str) -> str:
    if is_quoted(identifier):
        return identifier[1:-1].replace('""', '"')
    return identifier


class BaseDialect:
    """
    ANSI dialect: double-quoted identifiers and qmark parameters.

    ``wrap`` handles references such as ``schema.table`` or ``col as alias``
    and defers the per-atom decision to ``wrap_identifier``.
    """

    name: str = "ansi"
    param_style: str = "qmark"
    capabilities: DialectCapabilities = DialectCapabilities()

    def quote_identifier(self, identifier: str) -> str:
        if identifier == "*" or is_quoted(identifier):
            return identifier
        escaped = identifier.replace('"', '""')
        return f'"{escaped}"'

    def wrap_identifier(self, identifier: str, context: Any = None) -> str:
        return self.quote_identifier(identifier)

    def wrap(self, value: str, context: Any = None) -> str:
        value = value.strip()
        parts = _ALIAS_RE.split(value, maxsplit=1)
        if len(parts) == 2:
            return f"{self.wrap(parts[0], context)} as {self.wrap_identifier(parts[1].strip(), context)}"
        return ".".join(self._wrap_atom(atom, context) for atom in split_identifier(value))

    def format_table(self, table_name: str, context: Any = None) -> str:
        return self.wrap(table_name, context)

    def columnize(self, columns: list[str], context: Any = None) -> str:
        return ", ".join(self.wrap(column, context) for column in columns)

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"limit {int(limit)}")
        if offset is not None:
            parts.append(f"offset {int(offset)}")
        return " ".join(parts)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "?"

    def _wrap_atom(self, atom: str, context: Any) -> str:
        if atom == "*":
            return atom
        return self.wrap_identifier(atom, context)
