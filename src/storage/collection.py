from __future__ import annotations

import logging
import threading
from typing import Callable, ClassVar, Generic, Iterator, Optional, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storage.blob_store import BlobStore
from violet.models import MutationResult

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class BlobCollection(Generic[M]):
    """
    In-memory list of models mirrored to a single blob.

    All mutations go through ``_commit`` under one lock: the new list is
    serialized and saved first, and only swapped in once the write succeeded.
    A failed write leaves memory and blob both at the previous state.
    """

    blob_key: ClassVar[str]
    adapter: ClassVar[TypeAdapter]
    label: ClassVar[str] = "items"

    def __init__(self, blob_store: BlobStore, blob_key: Optional[str] = None):
        self._blobs = blob_store
        self.blob_key = blob_key or type(self).blob_key
        self._lock = threading.RLock()
        self._items: list[M] = self._load()

    @classmethod
    def serialize_items(cls, items: list[M]) -> bytes:
        return cls.adapter.dump_json(items)

    @classmethod
    def deserialize(cls, data: Optional[bytes]) -> list[M]:
        """Decode a blob. Missing or corrupt data yields an empty list."""
        if not data:
            return []
        try:
            return list(cls.adapter.validate_json(data))
        except (PydanticValidationError, ValueError) as e:
            logger.error(f"Corrupt {cls.label} blob, starting empty: {e}")
            return []

    def serialize(self) -> bytes:
        with self._lock:
            return self.serialize_items(self._items)

    def _load(self) -> list[M]:
        try:
            data = self._blobs.load(self.blob_key)
        except Exception as e:
            logger.error(f"Failed to load {self.label} from '{self.blob_key}': {e}")
            return []
        if data is None:
            logger.info(f"No {self.label} found in '{self.blob_key}' - starting fresh")
            return []
        items = self.deserialize(data)
        logger.info(f"Loaded {len(items)} {self.label}")
        return items

    def _commit(self, items: list[M]) -> Optional[str]:
        """Persist ``items`` and make them current. Returns an error message on failure."""
        try:
            self._blobs.save(self.blob_key, self.serialize_items(items))
        except Exception as e:
            logger.error(f"Failed to save {self.label} to '{self.blob_key}': {e}")
            return f"Failed to save {self.label}: {e}"
        self._items = items
        return None

    def _index_of(self, item_id: str) -> int:
        for i, item in enumerate(self._items):
            if item.id == item_id:
                return i
        return -1

    def get(self, item_id: str) -> Optional[M]:
        with self._lock:
            i = self._index_of(item_id)
            return self._items[i] if i >= 0 else None

    def clear(self) -> MutationResult:
        with self._lock:
            error = self._commit([])
            if error is not None:
                return MutationResult.failure(error)
            logger.info(f"All {self.label} cleared")
            return MutationResult.success()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return isinstance(item_id, str) and self._index_of(item_id) >= 0

    def __iter__(self) -> Iterator[M]:
        with self._lock:
            return iter(list(self._items))

    def snapshot(self, key: Callable[[M], object] | None = None, reverse: bool = False) -> list[M]:
        with self._lock:
            items = list(self._items)
        if key is not None:
            items.sort(key=key, reverse=reverse)
        return items
