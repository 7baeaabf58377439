"""
Snowflake dialect implementation.
"""

from __future__ import annotations

from typing import Any, Callable, Final

from .base import BaseDialect, DialectCapabilities, WrapIdentifierHook


class SnowflakeDialect(BaseDialect):
    """
    Snowflake dialect emulating case folding of unquoted identifiers.

    Snowflake stores unquoted identifiers upper-case, so unquoted names are
    folded before quoting. Already quoted names keep their case, and a
    configured ``wrap_identifier`` hook takes over entirely.
    """

    name: Final[str] = "snowflake"
    param_style: Final[str] = "qmark"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(supports_returning=False)

    def __init__(
        self,
        *,
        wrap_identifier: WrapIdentifierHook | None = None,
        fold_identifiers: bool = True,
    ) -> None:
        self.wrap_identifier_hook = wrap_identifier
        self.fold_identifiers = fold_identifiers

    def custom_wrap_identifier(
        self,
        value: str,
        orig_impl: Callable[[str], str],
        context: Any = None,
    ) -> str:
        if self.wrap_identifier_hook is not None:
            return self.wrap_identifier_hook(value, orig_impl, context)
        if value.startswith('"') or not self.fold_identifiers:
            return orig_impl(value)
        return orig_impl(value.upper())

    def wrap_identifier(self, identifier: str, context: Any = None) -> str:
        return self.custom_wrap_identifier(identifier, self.quote_identifier, context)
