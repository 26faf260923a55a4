"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements plain files and in-memory dicts, but designed to be swappable.
"""

from peerpay.services.storage.interface import (
    AuditStorageInterface,
    InvalidKeyError,
    KeyValueStore,
    StorageError,
)
from peerpay.services.storage.file_store import FileKeyValueStore
from peerpay.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryKeyValueStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStore",
    # Exceptions
    "InvalidKeyError",
    "StorageError",
    # Implementations
    "FileKeyValueStore",
    "InMemoryAuditStorage",
    "InMemoryKeyValueStore",
]
