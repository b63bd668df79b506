"""
In-Memory Storage Implementation

Keeps the encoded snapshot in a dict. Used by tests and by the app when
no snapshot file can be opened. The payload goes through the same codec
as the JSON file, so load() behaves exactly like reading from disk.
"""

import copy
from typing import Any, Optional

from paisapal.models.ledger import Snapshot
from paisapal.services.storage.codec import decode_snapshot, encode_snapshot
from paisapal.services.storage.interface import SnapshotStorageInterface


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """Snapshot storage held in process memory."""

    def __init__(self, payload: Optional[Any] = None):
        """
        Args:
            payload: Raw stored form to start from, as it would appear in
                     the JSON file. None means nothing is stored yet.
        """
        self._payload = copy.deepcopy(payload)
        self.save_count = 0
        self.skipped: list[tuple[str, int, str]] = []

    @property
    def payload(self) -> Optional[Any]:
        """The currently stored raw form."""
        return copy.deepcopy(self._payload)

    def load(self) -> Optional[Snapshot]:
        if self._payload is None:
            return None
        return decode_snapshot(copy.deepcopy(self._payload), on_skip=self._on_skip)

    def save(self, snapshot: Snapshot) -> bool:
        self._payload = encode_snapshot(snapshot)
        self.save_count += 1
        return True

    def _on_skip(self, section: str, index: int, error: str) -> None:
        self.skipped.append((section, index, error))
