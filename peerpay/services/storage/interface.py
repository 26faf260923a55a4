"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Persist to plain files on a device today
2. Use in-memory storage for testing
3. Swap in a real database later without touching the ledger

The interface is intentionally tiny: opaque bytes under string keys.
Encoding is the codec's job, not the store's. There is no delete and
no transaction spanning several keys.
"""

from abc import ABC, abstractmethod
from typing import Optional

from peerpay.models.audit import AuditEvent


class KeyValueStore(ABC):
    """
    Abstract interface for durable key/value byte storage.

    Writes are synchronous: when set() returns, the value is stored.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """
        Read the value stored under a key.

        Args:
            key: The key to read

        Returns:
            The stored bytes, or None if nothing was ever written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: The key to write
            value: Opaque bytes

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class InvalidKeyError(StorageError):
    """Key cannot be represented by the backend."""
    pass
