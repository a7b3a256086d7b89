from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from pydantic import TypeAdapter

from storage.blob_store import INBOX_KEY, BlobStore
from storage.collection import BlobCollection
from violet.errors import ValidationError
from violet.models import CapturedThought, MutationResult

logger = logging.getLogger(__name__)


class InboxStore(BlobCollection[CapturedThought]):
    """Touch Later: captured thoughts waiting to be routed by hand, newest first."""

    blob_key = INBOX_KEY
    adapter = TypeAdapter(list[CapturedThought])
    label = "Touch Later items"

    def __init__(
        self,
        blob_store: BlobStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.clock = clock
        super().__init__(blob_store)

    def capture(self, text: str) -> MutationResult[CapturedThought]:
        if not text or not text.strip():
            raise ValidationError("Cannot capture an empty thought")
        thought = CapturedThought(text=text.strip(), created_at=self.clock())
        return self.insert(thought)

    def insert(self, thought: CapturedThought) -> MutationResult[CapturedThought]:
        with self._lock:
            if self._index_of(thought.id) >= 0:
                return MutationResult.failure(f"Thought {thought.id} is already in the inbox", thought)
            error = self._commit([thought, *self._items])
            if error is not None:
                return MutationResult.failure(error, thought)
        logger.info(f"Added to Touch Later: '{thought.text[:50]}'")
        return MutationResult.success(thought)

    def remove(self, thought_id: str) -> MutationResult[CapturedThought]:
        with self._lock:
            i = self._index_of(thought_id)
            if i < 0:
                return MutationResult.success()
            removed = self._items[i]
            error = self._commit(self._items[:i] + self._items[i + 1 :])
            if error is not None:
                return MutationResult.failure(error, removed)
        logger.info(f"Removed from Touch Later: '{removed.text[:50]}'")
        return MutationResult.success(removed)

    def list(self) -> list[CapturedThought]:
        return self.snapshot()
