"""
snowblaze public package initialization.

Exposes the Snowflake adapter together with the query and schema builders it
drives.
"""

from .adapters import ConnectionConfig, SnowflakeAdapter  # noqa: F401
from .dialects import SnowflakeDialect  # noqa: F401
from .persistence import SnowflakeTransaction, TransactionError  # noqa: F401
from .query import CompiledQuery, Q, QueryBuilder, Raw  # noqa: F401
from .schema import ColumnInfo, SchemaBuilder, SchemaError  # noqa: F401

__all__ = [
    "SnowflakeAdapter",
    "ConnectionConfig",
    "SnowflakeDialect",
    "SnowflakeTransaction",
    "TransactionError",
    "QueryBuilder",
    "CompiledQuery",
    "Q",
    "Raw",
    "SchemaBuilder",
    "ColumnInfo",
    "SchemaError",
]
