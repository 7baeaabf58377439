"""
Event-tracking sample application showcasing snowblaze on Snowflake.
"""

from .demo import create_schema, recent_events_query, record_events, render_migration, run_demo

__all__ = [
    "create_schema",
    "recent_events_query",
    "record_events",
    "render_migration",
    "run_demo",
]
