from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from classification.thought_classifier import ThoughtClassifier
from extraction.event_extractor import EventExtractor
from llm.llm_client import LLMClient
from llm.providers.base import LLMProvider
from llm.providers.openai_provider import OpenAIProvider
from llm.providers.rules_provider import RuleBasedProvider
from routing.state_machine import ThoughtRouter
from storage.blob_store import BlobStore, FileBlobStore
from storage.calendar_store import CalendarCollection
from storage.inbox_store import InboxStore
from storage.notes_store import NotesCollection
from violet.config import Settings

logger = logging.getLogger(__name__)


def build_provider(settings: Settings) -> LLMProvider:
    if settings.llm_provider == "rules":
        logger.info("Using offline rule-based provider")
        return RuleBasedProvider()
    logger.info(f"Using OpenAI provider (model={settings.openai_model})")
    return OpenAIProvider(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        timeout_s=settings.http_timeout_s,
    )


@dataclass
class BackendAPI:
    """Central wiring of the capture-and-routing core."""

    llm: LLMClient
    classifier: ThoughtClassifier
    extractor: EventExtractor
    inbox: InboxStore
    calendar: CalendarCollection
    notes: NotesCollection
    router: ThoughtRouter

    async def aclose(self) -> None:
        await self.llm.aclose()


def build_backend(
    settings: Settings,
    provider: Optional[LLMProvider] = None,
    blob_store: Optional[BlobStore] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> BackendAPI:
    llm = LLMClient(provider=provider or build_provider(settings))
    blobs = blob_store or FileBlobStore(settings.data_dir)

    classifier = ThoughtClassifier(llm_client=llm)
    extractor = EventExtractor(llm_client=llm, clock=clock)
    inbox = InboxStore(blobs, clock=clock)
    calendar = CalendarCollection(blobs)
    notes = NotesCollection(blobs, clock=clock)
    router = ThoughtRouter(classifier, extractor, inbox, calendar, notes, clock=clock)

    logger.info(
        f"Backend ready: {len(inbox)} Touch Later items, {len(calendar)} events, {len(notes)} notes"
    )
    return BackendAPI(
        llm=llm,
        classifier=classifier,
        extractor=extractor,
        inbox=inbox,
        calendar=calendar,
        notes=notes,
        router=router,
    )
