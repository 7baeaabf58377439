"""
Utility helpers for running the snowblaze event-tracking example end-to-end.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from snowblaze.adapters import ConnectionConfig, SnowflakeAdapter
from snowblaze.query import Q, QueryBuilder
from snowblaze.schema import SchemaBuilder, TableBuilder
from snowblaze.utils import configure_logging

DSN_ENV = "SNOWBLAZE_DSN"


def _users_table(t: TableBuilder) -> None:
    t.increments()
    t.string("email", 320).not_nullable().unique()
    t.string("name")
    t.timestamps(default_to_now=True)


def _events_table(t: TableBuilder) -> None:
    t.big_increments()
    t.integer("user_id").not_nullable()
    t.string("kind", 64).not_nullable().comment("Event type, e.g. login or purchase")
    t.json("payload")
    t.timestamp("occurred_at", precision=3).not_nullable()
    t.foreign("user_id", "users", on_delete="cascade")
    t.index(["user_id", "occurred_at"])
    t.comment("Raw product events")


def create_schema(adapter: SnowflakeAdapter) -> SchemaBuilder:
    """
    Describe the users/events tables used by the example.
    """

    return (
        adapter.schema_builder()
        .create_table_if_not_exists("users", _users_table)
        .create_table_if_not_exists("events", _events_table)
    )


def render_migration(adapter: SnowflakeAdapter | None = None) -> List[str]:
    """
    Compile the example schema without connecting, for review before applying.
    """

    adapter = adapter or SnowflakeAdapter()
    return [statement.sql for statement in create_schema(adapter).to_sql()]


def record_events(adapter: SnowflakeAdapter, events: Iterable[Mapping[str, Any]]) -> QueryBuilder:
    return adapter.query_builder("events").insert(list(events))


def recent_events_query(adapter: SnowflakeAdapter, user_id: int, limit: int = 10) -> QueryBuilder:
    return (
        adapter.query_builder("events")
        .select("kind", "occurred_at")
        .where(Q(user_id=user_id) & ~Q(kind="heartbeat"))
        .order_by("-occurred_at")
        .limit(limit)
    )


def run_demo(dsn: str | None = None) -> List[Dict[str, Any]]:
    """
    Apply the schema, insert a couple of events, and read them back.

    Connection settings come from ``dsn`` or the ``SNOWBLAZE_DSN`` variable.
    """

    config = ConnectionConfig.from_dsn(dsn) if dsn else ConnectionConfig.from_env(DSN_ENV)
    adapter = SnowflakeAdapter(config)
    connection = adapter.acquire_raw_connection()
    try:
        create_schema(adapter).run(connection)
        with adapter.transaction(connection).transaction():
            adapter.query_builder("users").insert({"id": 1, "email": "ada@example.com"}).run(connection)
            record_events(
                adapter,
                [
                    {"user_id": 1, "kind": "login", "occurred_at": "2024-01-01 09:00:00"},
                    {"user_id": 1, "kind": "purchase", "occurred_at": "2024-01-01 09:05:00"},
                ],
            ).run(connection)
        return recent_events_query(adapter, user_id=1).run(connection)
    finally:
        adapter.destroy_raw_connection(connection)


if __name__ == "__main__":
    configure_logging()
    for sql in render_migration():
        print(f"{sql};")
