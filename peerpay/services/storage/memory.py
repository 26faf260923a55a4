"""
In-Memory Storage Implementation

Nothing here survives the process. Used by tests and by throwaway
sessions that should not touch the user's data directory.
"""

from collections import deque
from typing import Optional

from peerpay.models.audit import AuditEvent
from peerpay.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStore,
)


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed key/value store."""

    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def keys(self) -> list[str]:
        return sorted(self._data)


class InMemoryAuditStorage(AuditStorageInterface):
    """
    Append-only list of audit events.

    With max_events set, only the newest max_events are kept.
    """

    def __init__(self, max_events: Optional[int] = None):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
