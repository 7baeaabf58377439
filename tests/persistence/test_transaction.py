import logging

import pytest

from snowblaze.adapters import BaseAdapter, SnowflakeAdapter
from snowblaze.persistence import SnowflakeTransaction, TransactionError, TransactionManager


class RecordingMixin:
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.executed = []

    def run(self, connection, statements):
        self.executed.append(statements)


class RecordingAdapter(RecordingMixin, BaseAdapter):
    pass


class RecordingSnowflakeAdapter(RecordingMixin, SnowflakeAdapter):
    pass


def test_nested_transactions_use_savepoints():
    adapter = RecordingAdapter()
    manager = adapter.transaction(object())
    assert isinstance(manager, TransactionManager)

    manager.begin()
    manager.begin()
    assert manager.depth == 2
    manager.rollback()
    manager.commit()
    assert adapter.executed == ["begin", "savepoint sp_1", "rollback to savepoint sp_1", "commit"]


def test_transaction_context_rolls_back_on_error():
    adapter = RecordingAdapter()
    manager = adapter.transaction(object())
    with pytest.raises(ValueError):
        with manager.transaction():
            raise ValueError("boom")
    assert adapter.executed == ["begin", "rollback"]
    assert manager.depth == 0


def test_commit_without_transaction_raises():
    manager = RecordingAdapter().transaction(object())
    with pytest.raises(TransactionError):
        manager.commit()
    with pytest.raises(TransactionError):
        manager.rollback()


def test_snowflake_savepoints_only_warn(caplog):
    caplog.set_level(logging.WARNING, logger="snowblaze.adapters.snowflake")
    adapter = RecordingSnowflakeAdapter()
    manager = adapter.transaction(object())
    assert isinstance(manager, SnowflakeTransaction)

    with manager.transaction():
        with manager.transaction():
            pass
    assert adapter.executed == ["begin", "commit"]
    messages = [record.message for record in caplog.records]
    assert messages == ["Snowflake does not support savepoints."] * 2


def test_snowflake_savepoint_operations_warn_once_each(caplog):
    caplog.set_level(logging.WARNING, logger="snowblaze.adapters.snowflake")
    adapter = RecordingSnowflakeAdapter()
    manager = adapter.transaction(object())
    manager.savepoint("sp")
    manager.release("sp")
    manager.rollback_to("sp")
    assert adapter.executed == []
    assert len(caplog.records) == 3
