"""
Dialect strategy registry.
"""

from .base import BaseDialect, Dialect, DialectCapabilities, is_quoted, split_identifier, unquote
from .snowflake import SnowflakeDialect

__all__ = [
    "BaseDialect",
    "Dialect",
    "DialectCapabilities",
    "SnowflakeDialect",
    "is_quoted",
    "split_identifier",
    "unquote",
]
