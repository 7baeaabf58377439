"""
Per-connection event listeners.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict, List

ConnectionListener = Callable[..., None]


class ConnectionEvents:
    """
    Holds listeners registered on one raw connection, such as the ``error``
    listener that marks the connection disposed.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[ConnectionListener]] = defaultdict(list)

    def on(self, event: str, handler: ConnectionListener) -> None:
        self._handlers[event].append(handler)

    def emit(self, event: str, *args: Any) -> bool:
        handlers = list(self._handlers.get(event, []))
        for handler in handlers:
            handler(*args)
        return bool(handlers)

    def listener_count(self, event: str | None = None) -> int:
        if event is not None:
            return len(self._handlers.get(event, []))
        return sum(len(handlers) for handlers in self._handlers.values())

    def remove_all_listeners(self) -> None:
        self._handlers.clear()
