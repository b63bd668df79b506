"""
Abstract Storage Interface

DESIGN DECISION: The whole application state is one snapshot, read once at
startup and written back whole after every change. Storage backends only
need two operations:
1. load() - return the stored snapshot, or None when nothing is stored
2. save(snapshot) - replace whatever is stored

This allows us to:
1. Keep the snapshot in a JSON file on the device
2. Use in-memory storage for testing
3. Move to another backend without touching the session logic

CONCURRENCY: last writer wins. Two app instances pointed at the same
snapshot will overwrite each other's changes.
"""

from abc import ABC, abstractmethod
from typing import Optional

from paisapal.models.ledger import Snapshot


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for snapshot persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> Optional[Snapshot]:
        """
        Load the stored snapshot.

        Fields that are missing or unreadable are left at their defaults;
        individual malformed records are dropped.

        Returns:
            The snapshot, or None if nothing has been stored yet

        Raises:
            SnapshotCorruptError: If the stored data cannot be parsed at all
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, snapshot: Snapshot) -> bool:
        """
        Replace the stored snapshot.

        Args:
            snapshot: The full application state

        Returns:
            True if saved successfully

        Raises:
            SnapshotWriteError: If the snapshot could not be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SnapshotCorruptError(StorageError):
    """Stored snapshot exists but is not a readable snapshot."""
    pass


class SnapshotWriteError(StorageError):
    """Snapshot could not be written to the backend."""
    pass
