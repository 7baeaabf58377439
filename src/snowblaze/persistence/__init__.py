"""
Transaction handling.
"""

from .transaction import SnowflakeTransaction, TransactionError, TransactionManager

__all__ = ["SnowflakeTransaction", "TransactionError", "TransactionManager"]
