from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

INBOX_KEY = "inbox_items"
CALENDAR_KEY = "calendar_events"
NOTES_KEY = "notes"


class BlobStore(ABC):
    """Key-value persistence collaborator: one opaque blob per key."""

    @abstractmethod
    def save(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    @abstractmethod
    def load(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    @abstractmethod
    def clear(self, key: str) -> None:
        raise NotImplementedError


class FileBlobStore(BlobStore):
    """One ``<key>.json`` file per blob under ``base_dir``."""

    def __init__(self, base_dir: str = "data"):
        self.base_dir = Path(base_dir)

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def save(self, key: str, data: bytes) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_bytes(data)
        os.replace(tmp, path)

    def load(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def clear(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
        logger.info(f"Cleared blob '{key}'")


class MemoryBlobStore(BlobStore):
    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        self._blobs: dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def save(self, key: str, data: bytes) -> None:
        with self._lock:
            self._blobs[key] = bytes(data)

    def load(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._blobs.get(key)

    def clear(self, key: str) -> None:
        with self._lock:
            self._blobs.pop(key, None)
