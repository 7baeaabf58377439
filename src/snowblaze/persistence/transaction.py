"""
Transaction manager handling nested transactions and savepoints.
"""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Generator, List

if TYPE_CHECKING:
    from ..adapters.base import BaseAdapter


class TransactionError(RuntimeError):
    pass


class TransactionManager:
    """
    Coordinates begin/commit/rollback on one connection; nested ``begin``
    calls open savepoints.
    """

    def __init__(self, adapter: "BaseAdapter", connection: Any) -> None:
        self.adapter = adapter
        self.connection = connection
        self.logger = adapter.logger
        self._stack: List[str | None] = []
        self._savepoint_counter = itertools.count(1)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def begin(self) -> None:
        if self.depth == 0:
            self._execute("begin")
            self._stack.append(None)
            return

        name = self._next_savepoint_name()
        self.savepoint(name)
        self._stack.append(name)

    def commit(self) -> None:
        if self.depth == 0:
            raise TransactionError("No active transaction to commit.")

        savepoint_name = self._stack.pop()
        if savepoint_name is None:
            self._execute("commit")
            return

        self.release(savepoint_name)

    def rollback(self) -> None:
        if self.depth == 0:
            raise TransactionError("No active transaction to roll back.")

        savepoint_name = self._stack.pop()
        if savepoint_name is None:
            self._execute("rollback")
            return

        self.rollback_to(savepoint_name)

    def savepoint(self, name: str) -> None:
        self._execute(f"savepoint {name}")

    def release(self, name: str) -> None:
        self._execute(f"release savepoint {name}")

    def rollback_to(self, name: str) -> None:
        self._execute(f"rollback to savepoint {name}")

    @contextmanager
    def transaction(self) -> Generator["TransactionManager", None, None]:
        self.begin()
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        else:
            self.commit()

    def _execute(self, sql: str) -> Any:
        return self.adapter.run(self.connection, sql)

    def _next_savepoint_name(self) -> str:
        return f"sp_{next(self._savepoint_counter)}"


class SnowflakeTransaction(TransactionManager):
    """
    Snowflake has no savepoints; nested boundaries only log a warning.
    """

    def savepoint(self, name: str) -> None:
        self.logger.warning("Snowflake does not support savepoints.")

    def release(self, name: str) -> None:
        self.logger.warning("Snowflake does not support savepoints.")

    def rollback_to(self, name: str) -> None:
        self.logger.warning("Snowflake does not support savepoints.")
