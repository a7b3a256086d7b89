from datetime import datetime

import pytest

from llm.providers.base import LLMProvider
from storage.blob_store import MemoryBlobStore

# A Tuesday
NOW = datetime(2025, 7, 29, 10, 30)


class FakeProvider(LLMProvider):
    """Replies with the given texts in order; the last one repeats."""

    def __init__(self, *responses, error: Exception = None):
        self._responses = list(responses) or [""]
        self._error = error
        self.calls = []

    async def generate(self, *, user, system=None, temperature=0.1, max_tokens=300) -> str:
        self.calls.append({"user": user, "system": system, "max_tokens": max_tokens})
        if self._error is not None:
            raise self._error
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]


class FailingBlobStore(MemoryBlobStore):
    """In-memory store whose saves can be made to fail per key."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.failing_keys = set()

    def save(self, key: str, data: bytes) -> None:
        if key in self.failing_keys:
            raise OSError(f"disk full while writing {key}")
        super().save(key, data)


@pytest.fixture
def fake_provider_factory():
    def _make(*responses, error=None):
        return FakeProvider(*responses, error=error)
    return _make


@pytest.fixture
def blobs():
    return FailingBlobStore()


@pytest.fixture
def clock():
    return lambda: NOW
