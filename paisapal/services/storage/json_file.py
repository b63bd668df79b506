"""
JSON File Storage Implementation

DESIGN DECISION: The snapshot lives in a single JSON file on the device:
1. No database setup required
2. Users can back it up or inspect it with any text editor
3. The format matches what the app has always written

TRADEOFFS:
- The whole file is rewritten on every change (fine at personal scale)
- No locking; a second app instance on the same file wins or loses silently

Writes go to a temporary file first and are then renamed over the
snapshot, so an interrupted write leaves the previous snapshot intact. A
snapshot that cannot be parsed is copied to ``<name>.corrupt`` before the
caller falls back to defaults.
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from paisapal.config import get_settings
from paisapal.models.ledger import Snapshot
from paisapal.services.storage.codec import decode_snapshot, encode_snapshot
from paisapal.services.storage.interface import (
    SnapshotCorruptError,
    SnapshotStorageInterface,
    SnapshotWriteError,
    StorageError,
)

if TYPE_CHECKING:
    from paisapal.activity import ActivityLogger


class JsonFileSnapshotStorage(SnapshotStorageInterface):
    """
    Snapshot storage backed by one JSON file.

    Transient OS errors on write (a locked file, a busy network drive) are
    retried with exponential backoff before giving up.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        retry_attempts: Optional[int] = None,
        activity_logger: Optional["ActivityLogger"] = None,
    ):
        """
        Args:
            path: Snapshot file. Defaults to the configured snapshot path.
            retry_attempts: Write attempts before failing. Defaults to the
                            configured ``save_retry_attempts``.
            activity_logger: Receives a warning for every dropped record.
        """
        settings = get_settings().storage
        self._path = Path(path) if path is not None else settings.snapshot_path
        self._retry_attempts = retry_attempts or settings.save_retry_attempts
        self._activity_logger = activity_logger

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[Snapshot]:
        """Read and decode the snapshot file."""
        if not self._path.exists():
            return None

        try:
            data = self._path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read snapshot {self._path}: {e}")

        try:
            raw = data.decode("utf-8")
        except UnicodeDecodeError as e:
            self._keep_corrupt_copy(data)
            raise SnapshotCorruptError(f"Snapshot {self._path} is not UTF-8 text: {e}")

        if not raw.strip():
            return None

        try:
            payload = json.loads(raw)
            return decode_snapshot(payload, on_skip=self._on_skip)
        except json.JSONDecodeError as e:
            self._keep_corrupt_copy(data)
            raise SnapshotCorruptError(f"Snapshot {self._path} is not valid JSON: {e}")
        except RecursionError:
            self._keep_corrupt_copy(data)
            raise SnapshotCorruptError(f"Snapshot {self._path} is nested too deeply to read")
        except SnapshotCorruptError:
            self._keep_corrupt_copy(data)
            raise

    def save(self, snapshot: Snapshot) -> bool:
        """Write the snapshot, replacing the previous file atomically."""
        text = json.dumps(encode_snapshot(snapshot), ensure_ascii=False, indent=2)

        retryer = Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            retryer(self._write_atomic, text)
        except OSError as e:
            raise SnapshotWriteError(f"Failed to write snapshot {self._path}: {e}") from e
        return True

    def _write_atomic(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(self._path)

    def _on_skip(self, section: str, index: int, error: str) -> None:
        if self._activity_logger is not None:
            self._activity_logger.log_record_skipped(section, index, error)

    def _keep_corrupt_copy(self, data: bytes) -> None:
        """Preserve an unreadable snapshot next to the original before it gets replaced."""
        corrupt_path = self._path.with_name(self._path.name + ".corrupt")
        try:
            corrupt_path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Snapshot {self._path} is unreadable and could not be backed up: {e}") from e
