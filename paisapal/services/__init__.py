"""Services package."""

from paisapal.services.storage import (
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    SnapshotCorruptError,
    SnapshotStorageInterface,
    SnapshotWriteError,
    StorageError,
)

__all__ = [
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "SnapshotCorruptError",
    "SnapshotStorageInterface",
    "SnapshotWriteError",
    "StorageError",
]
