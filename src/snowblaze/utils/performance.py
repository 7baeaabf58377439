"""
Slow-query threshold resolution.
"""

from __future__ import annotations

import os

SLOW_QUERY_ENV = "SNOWBLAZE_SLOW_QUERY_MS"


def resolve_slow_query_ms(*, default: int, override: int | None = None) -> int:
    """
    Pick the slow-query threshold: explicit override, then the environment,
    then ``default``. Unparseable or negative environment values are ignored.
    """

    if override is not None:
        return int(override)
    raw = os.getenv(SLOW_QUERY_ENV)
    if raw:
        try:
            value = int(raw)
        except ValueError:
            return default
        if value >= 0:
            return value
    return default
