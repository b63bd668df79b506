"""
Storage Services Package

Provides the abstract snapshot interface and concrete implementations.
The JSON file backend is the default; the in-memory backend is used in
tests and as a fallback when the snapshot file cannot be opened.
"""

from paisapal.services.storage.interface import (
    SnapshotCorruptError,
    SnapshotStorageInterface,
    SnapshotWriteError,
    StorageError,
)
from paisapal.services.storage.codec import decode_snapshot, encode_snapshot
from paisapal.services.storage.json_file import JsonFileSnapshotStorage
from paisapal.services.storage.memory import InMemorySnapshotStorage

__all__ = [
    # Interface
    "SnapshotStorageInterface",
    # Exceptions
    "SnapshotCorruptError",
    "SnapshotWriteError",
    "StorageError",
    # Codec
    "decode_snapshot",
    "encode_snapshot",
    # Implementations
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
]
