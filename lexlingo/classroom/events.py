"""
ChangeFeed - In-process row change notifications.

Stores publish a ChangeEvent after every committed write. Subscribers treat
events as an invalidation signal and reload; delivery is best-effort and a
failing listener never breaks the writer.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ALL_TABLES = "*"


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    table: str
    event: ChangeType
    row: dict = field(default_factory=dict)


Listener = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by subscribe(); usable as a context manager."""

    def __init__(self, release: Callable[[], None]):
        self._release: Optional[Callable[[], None]] = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self):
        """Release the listener. Safe to call more than once."""
        if self._release is not None:
            release, self._release = self._release, None
            release()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()


class ChangeFeed:
    """Fan out change events to listeners keyed by table name."""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, table: str, callback: Listener) -> Subscription:
        """Listen to any event on `table` ("*" for every table)."""
        self._listeners.setdefault(table, []).append(callback)

        def release():
            listeners = self._listeners.get(table, [])
            if callback in listeners:
                listeners.remove(callback)

        return Subscription(release)

    def listener_count(self, table: Optional[str] = None) -> int:
        if table is None:
            return sum(len(v) for v in self._listeners.values())
        return len(self._listeners.get(table, []))

    def publish(self, table: str, event: ChangeType, row: Optional[dict] = None):
        change = ChangeEvent(table=table, event=event, row=dict(row or {}))
        targets = list(self._listeners.get(table, [])) + list(self._listeners.get(ALL_TABLES, []))
        for listener in targets:
            try:
                listener(change)
            except Exception:
                logger.exception(f"Change listener failed for {table} {event.value}")
