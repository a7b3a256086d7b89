from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import TypeAdapter

from storage.blob_store import BlobStore, NOTES_KEY
from storage.collection import BlobCollection
from violet.models import MutationResult, Note

logger = logging.getLogger(__name__)


class NotesCollection(BlobCollection[Note]):
    blob_key = NOTES_KEY
    adapter = TypeAdapter(list[Note])
    label = "notes"

    def __init__(
        self,
        blob_store: BlobStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.clock = clock
        super().__init__(blob_store)

    def add(self, title: str, content: str) -> MutationResult[Note]:
        now = self.clock()
        note = Note(title=title, content=content, created_at=now, last_modified_at=now)
        return self.insert(note)

    def insert(self, note: Note) -> MutationResult[Note]:
        with self._lock:
            if self._index_of(note.id) >= 0:
                return MutationResult.failure(f"Note {note.id} already exists", note)
            error = self._commit([*self._items, note])
            if error is not None:
                return MutationResult.failure(error, note)
        logger.info(f"Added note: '{note.title}'")
        return MutationResult.success(note)

    def update(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> MutationResult[Note]:
        with self._lock:
            i = self._index_of(note_id)
            if i < 0:
                return MutationResult.failure(f"Note {note_id} not found")
            current = self._items[i]
            if title is None and content is None:
                return MutationResult.success(current)
            updated = Note(
                id=current.id,
                title=current.title if title is None else title,
                content=current.content if content is None else content,
                created_at=current.created_at,
                last_modified_at=self.clock(),
            )
            items = list(self._items)
            items[i] = updated
            error = self._commit(items)
            if error is not None:
                return MutationResult.failure(error, current)
        logger.info(f"Updated note: '{updated.title}'")
        return MutationResult.success(updated)

    def remove(self, note_id: str) -> MutationResult[Note]:
        with self._lock:
            i = self._index_of(note_id)
            if i < 0:
                return MutationResult.success()
            removed = self._items[i]
            error = self._commit(self._items[:i] + self._items[i + 1 :])
            if error is not None:
                return MutationResult.failure(error, removed)
        logger.info(f"Removed note: '{removed.title}'")
        return MutationResult.success(removed)

    def list(self) -> list[Note]:
        """Most recently modified first."""
        return self.snapshot(key=lambda n: n.last_modified_at, reverse=True)

    def search(self, query: str) -> list[Note]:
        """Notes whose title or content contains ``query``, ignoring case.

        A blank query matches every note. Same order as ``list``.
        """
        needle = query.strip().casefold()
        if not needle:
            return self.list()
        return [
            n for n in self.list()
            if needle in n.title.casefold() or needle in n.content.casefold()
        ]
