"""
Lifecycle of a captured thought.

    CAPTURED -> CLASSIFYING -> EXTRACTING -> ROUTED_CALENDAR
                            -> AWAITING_MANUAL_ROUTE
                            -> FAILED

From AWAITING_MANUAL_ROUTE the user moves a thought to the calendar (via
extraction, no classification) or to notes. A move inserts into the target
first and only then removes the thought from the inbox; if the removal
cannot be persisted the insert is undone, so a thought is never in two
places and never lost.
"""

from __future__ import annotations

import logging
import re
import threading
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from classification.thought_classifier import ThoughtClassifier
from extraction.event_extractor import EventExtractor
from routing import responses
from storage.calendar_store import CalendarCollection
from storage.inbox_store import InboxStore
from storage.notes_store import NotesCollection
from violet.errors import RoutingError, ValidationError
from violet.models import (
    UNTITLED_NOTE,
    CalendarEvent,
    CalendarEventDraft,
    CapturedThought,
    ClassificationOutcome,
    MutationResult,
    Note,
    NoteDraft,
)

logger = logging.getLogger(__name__)

NOTE_TITLE_MAX = 50

_SENTENCE_END = re.compile(r"[.!?]\s+|\n")


class RouteState(str, Enum):
    CAPTURED = "captured"
    CLASSIFYING = "classifying"
    EXTRACTING = "extracting"
    ROUTED_CALENDAR = "routed_calendar"
    ROUTED_NOTES = "routed_notes"
    AWAITING_MANUAL_ROUTE = "awaiting_manual_route"
    FAILED = "failed"


# Only these are tracked. Terminal states live on in the RoutingResult alone.
_IN_FLIGHT = frozenset({RouteState.CAPTURED, RouteState.CLASSIFYING, RouteState.EXTRACTING})


class RoutingResult(BaseModel):
    thought: CapturedThought
    state: RouteState
    outcome: Optional[ClassificationOutcome] = None
    event: Optional[CalendarEvent] = None
    note: Optional[Note] = None
    draft: Optional[CalendarEventDraft] = None
    message: str

    @property
    def ok(self) -> bool:
        return self.state != RouteState.FAILED


def derive_note_title(text: str) -> str:
    """First sentence of ``text``, capped at 50 characters."""
    first = _SENTENCE_END.split(text.strip(), maxsplit=1)[0].strip()
    first = first.rstrip(".!?").strip()
    return first[:NOTE_TITLE_MAX].rstrip() or UNTITLED_NOTE


class ThoughtRouter:
    """Moves captured thoughts into the inbox, the calendar or the notes."""

    def __init__(
        self,
        classifier: ThoughtClassifier,
        extractor: EventExtractor,
        inbox: InboxStore,
        calendar: CalendarCollection,
        notes: NotesCollection,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.classifier = classifier
        self.extractor = extractor
        self.inbox = inbox
        self.calendar = calendar
        self.notes = notes
        self.clock = clock

        # In-flight states only; inbox membership implies AWAITING_MANUAL_ROUTE.
        self._states: dict[str, RouteState] = {}
        self._pending: dict[str, Union[CalendarEventDraft, NoteDraft]] = {}
        self._state_lock = threading.Lock()
        self._move_lock = threading.Lock()

    # state bookkeeping

    def state_of(self, thought_id: str) -> Optional[RouteState]:
        """Current state, or None once a thought is routed, failed or unknown."""
        with self._state_lock:
            state = self._states.get(thought_id)
        if state is not None:
            return state
        if thought_id in self.inbox:
            return RouteState.AWAITING_MANUAL_ROUTE
        return None

    def _set_state(self, thought_id: str, state: RouteState) -> None:
        with self._state_lock:
            if state in _IN_FLIGHT:
                self._states[thought_id] = state
                return
            self._states.pop(thought_id, None)
            if state != RouteState.AWAITING_MANUAL_ROUTE:
                self._pending.pop(thought_id, None)

    def _awaiting(self, thought_id: str) -> CapturedThought:
        state = self.state_of(thought_id)
        if state is None:
            raise RoutingError(f"Thought {thought_id} not found", thought_id, missing=True)
        if state != RouteState.AWAITING_MANUAL_ROUTE:
            raise RoutingError(
                f"Thought {thought_id} is {state.value}, not awaiting a manual route", thought_id
            )
        thought = self.inbox.get(thought_id)
        if thought is None:
            with self._state_lock:
                self._pending.pop(thought_id, None)
            raise RoutingError(f"Thought {thought_id} not found", thought_id, missing=True)
        return thought

    def _failed(self, thought: CapturedThought, error: str, **extra: Any) -> RoutingResult:
        self._set_state(thought.id, RouteState.FAILED)
        logger.error(f"Routing failed for '{thought.text[:50]}': {error}")
        return RoutingResult(
            thought=thought,
            state=RouteState.FAILED,
            message=responses.error_message(error),
            **extra,
        )

    # capture

    async def submit(self, text: str) -> RoutingResult:
        if not text or not text.strip():
            raise ValidationError("Cannot submit an empty thought")

        thought = CapturedThought(text=text.strip(), created_at=self.clock())
        self._set_state(thought.id, RouteState.CAPTURED)
        logger.info(f"Captured thought: '{thought.text[:50]}'")
        try:
            return await self._classify_and_route(thought)
        finally:
            with self._state_lock:
                if self._states.get(thought.id) in _IN_FLIGHT:
                    logger.error(f"Routing aborted for '{thought.text[:50]}'")
                    del self._states[thought.id]

    async def _classify_and_route(self, thought: CapturedThought) -> RoutingResult:
        self._set_state(thought.id, RouteState.CLASSIFYING)
        outcome = await self.classifier.classify(thought.text)

        if outcome.is_error:
            return self._failed(thought, outcome.message or "Unknown error", outcome=outcome)

        if outcome.kind == "deferred":
            result = self.inbox.insert(thought)
            if not result.ok:
                return self._failed(thought, result.error, outcome=outcome)
            self._set_state(thought.id, RouteState.AWAITING_MANUAL_ROUTE)
            return RoutingResult(
                thought=thought,
                state=RouteState.AWAITING_MANUAL_ROUTE,
                outcome=outcome,
                message=responses.deferred_message(thought.text),
            )

        self._set_state(thought.id, RouteState.EXTRACTING)
        draft = await self.extractor.extract(thought.text)
        result = self.calendar.add_from_draft(draft)
        if not result.ok:
            return self._failed(thought, result.error, outcome=outcome, draft=draft)

        self._set_state(thought.id, RouteState.ROUTED_CALENDAR)
        return RoutingResult(
            thought=thought,
            state=RouteState.ROUTED_CALENDAR,
            outcome=outcome,
            event=result.item,
            draft=draft,
            message=responses.calendar_message(result.item, draft.confidence),
        )

    def defer(self, text: str) -> RoutingResult:
        """Put text straight into the inbox without asking the oracle."""
        result = self.inbox.capture(text)
        thought = result.item
        if not result.ok:
            return self._failed(thought, result.error)
        return RoutingResult(
            thought=thought,
            state=RouteState.AWAITING_MANUAL_ROUTE,
            message=responses.deferred_message(thought.text),
        )

    # manual routes

    async def begin_calendar_route(self, thought_id: str) -> CalendarEventDraft:
        thought = self._awaiting(thought_id)
        self._set_state(thought_id, RouteState.EXTRACTING)
        try:
            draft = await self.extractor.extract(thought.text)
        finally:
            self._set_state(thought_id, RouteState.AWAITING_MANUAL_ROUTE)
        if thought_id in self.inbox:
            with self._state_lock:
                self._pending[thought_id] = draft
        return draft

    def confirm_calendar_route(
        self,
        thought_id: str,
        draft: Optional[CalendarEventDraft] = None,
        **edits: Any,
    ) -> RoutingResult:
        thought = self._awaiting(thought_id)
        with self._state_lock:
            pending = self._pending.get(thought_id)
        if draft is None:
            if not isinstance(pending, CalendarEventDraft):
                raise RoutingError(f"No calendar route in progress for {thought_id}", thought_id)
            draft = pending
        if edits:
            try:
                draft = CalendarEventDraft.model_validate({**draft.model_dump(), **edits})
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid event: {e.errors()[0]['msg']}") from e

        event = CalendarEvent.from_draft(draft)
        with self._move_lock:
            self._awaiting(thought_id)
            error = self._move(thought, self.calendar.add(event), self.calendar.remove)
            if error is not None:
                return RoutingResult(
                    thought=thought,
                    state=RouteState.FAILED,
                    draft=draft,
                    message=responses.error_message(error),
                )
            self._set_state(thought_id, RouteState.ROUTED_CALENDAR)

        return RoutingResult(
            thought=thought,
            state=RouteState.ROUTED_CALENDAR,
            event=event,
            draft=draft,
            message=responses.calendar_message(event, draft.confidence),
        )

    async def route_to_calendar(self, thought_id: str) -> RoutingResult:
        draft = await self.begin_calendar_route(thought_id)
        return self.confirm_calendar_route(thought_id, draft)

    def begin_notes_route(self, thought_id: str) -> NoteDraft:
        thought = self._awaiting(thought_id)
        draft = NoteDraft(title=derive_note_title(thought.text), content=thought.text)
        with self._state_lock:
            self._pending[thought_id] = draft
        return draft

    def confirm_notes_route(
        self,
        thought_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> RoutingResult:
        thought = self._awaiting(thought_id)
        with self._state_lock:
            pending = self._pending.get(thought_id)
        if not isinstance(pending, NoteDraft):
            pending = NoteDraft(title=derive_note_title(thought.text), content=thought.text)

        with self._move_lock:
            self._awaiting(thought_id)
            inserted = self.notes.add(
                pending.title if title is None else title,
                pending.content if content is None else content,
            )
            error = self._move(thought, inserted, self.notes.remove)
            if error is not None:
                return RoutingResult(
                    thought=thought,
                    state=RouteState.FAILED,
                    message=responses.error_message(error),
                )
            self._set_state(thought_id, RouteState.ROUTED_NOTES)

        return RoutingResult(
            thought=thought,
            state=RouteState.ROUTED_NOTES,
            note=inserted.item,
            message=responses.note_message(inserted.item),
        )

    def route_to_notes(self, thought_id: str) -> RoutingResult:
        self.begin_notes_route(thought_id)
        return self.confirm_notes_route(thought_id)

    def cancel_route(self, thought_id: str) -> RouteState:
        self._awaiting(thought_id)
        with self._state_lock:
            self._pending.pop(thought_id, None)
        logger.info(f"Cancelled manual route for {thought_id}")
        return RouteState.AWAITING_MANUAL_ROUTE

    def discard(self, thought_id: str) -> MutationResult[CapturedThought]:
        """Delete a thought from Touch Later along with any route in progress."""
        with self._move_lock:
            result = self.inbox.remove(thought_id)
            if result.ok:
                with self._state_lock:
                    self._pending.pop(thought_id, None)
        return result

    def _move(self, thought: CapturedThought, inserted, undo: Callable) -> Optional[str]:
        """Finish a move whose target insert has run. Returns an error message on failure.

        The thought leaves the inbox only if the insert succeeded; if the inbox
        write fails the insert is undone and the thought stays awaiting.
        """
        if not inserted.ok:
            return inserted.error

        removed = self.inbox.remove(thought.id)
        if not removed.ok:
            undone = undo(inserted.item.id)
            if not undone.ok:
                logger.error(f"Could not undo insert of {inserted.item.id}: {undone.error}")
            return removed.error

        with self._state_lock:
            self._pending.pop(thought.id, None)
        logger.info(f"Moved '{thought.text[:50]}' out of Touch Later")
        return None
