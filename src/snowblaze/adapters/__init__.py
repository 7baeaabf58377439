"""
Database adapter interfaces and implementations.
"""

from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterError,
    AdapterExecutionError,
    BaseAdapter,
    ConnectionConfig,
)
from .events import ConnectionEvents
from .snowflake import SnowflakeAdapter, SnowflakeConnection

__all__ = [
    "BaseAdapter",
    "ConnectionConfig",
    "ConnectionEvents",
    "AdapterError",
    "AdapterConfigurationError",
    "AdapterConnectionError",
    "AdapterExecutionError",
    "SnowflakeAdapter",
    "SnowflakeConnection",
]
