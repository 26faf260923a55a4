"""Services package."""

from peerpay.services.storage import (
    AuditStorageInterface,
    FileKeyValueStore,
    InMemoryAuditStorage,
    InMemoryKeyValueStore,
    InvalidKeyError,
    KeyValueStore,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "FileKeyValueStore",
    "InMemoryAuditStorage",
    "InMemoryKeyValueStore",
    "InvalidKeyError",
    "KeyValueStore",
    "StorageError",
]
