import logging

from snowblaze.utils.logging import get_logger, set_correlation_id, get_correlation_id, time_call
from snowblaze.utils.performance import resolve_slow_query_ms


def test_correlation_id_round_trip():
    token = set_correlation_id("test-token")
    assert token == "test-token"
    assert get_correlation_id() == "test-token"


def test_get_logger_is_namespaced():
    assert get_logger("tests.logging").name == "snowblaze.tests.logging"


def test_time_call_logs_duration(caplog):
    logger = get_logger("tests.logging")
    # ensure handler exists and capturing
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("unit-test", logger, threshold_ms=0):
        pass
    messages = [record.message for record in caplog.records if record.name == logger.name]
    assert any("unit-test took" in message for message in messages)


def test_time_call_warns_past_threshold(caplog):
    logger = get_logger("tests.logging")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("slow", logger, sql="select 1", threshold_ms=0):
        pass
    record = next(record for record in caplog.records if record.name == logger.name)
    assert record.levelno == logging.WARNING
    assert record.sql == "select 1"


def test_resolve_slow_query_ms(monkeypatch):
    monkeypatch.delenv("SNOWBLAZE_SLOW_QUERY_MS", raising=False)
    assert resolve_slow_query_ms(default=1000) == 1000
    monkeypatch.setenv("SNOWBLAZE_SLOW_QUERY_MS", "250")
    assert resolve_slow_query_ms(default=1000) == 250
    assert resolve_slow_query_ms(default=1000, override=5) == 5
    monkeypatch.setenv("SNOWBLAZE_SLOW_QUERY_MS", "fast")
    assert resolve_slow_query_ms(default=1000) == 1000
