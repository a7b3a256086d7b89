from __future__ import annotations

import logging
from datetime import date, datetime, time, tzinfo
from typing import Any, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storage.blob_store import CALENDAR_KEY
from storage.collection import BlobCollection
from violet.errors import ValidationError
from violet.models import (
    CalendarEvent,
    CalendarEventDraft,
    EventCategory,
    MutationResult,
)

logger = logging.getLogger(__name__)

_EDITABLE = frozenset({"title", "start_at", "end_at", "description", "category", "is_all_day"})


def _local_day(dt: datetime, tz: Optional[tzinfo]) -> date:
    # stored values are naive local time
    if tz is None:
        return dt.date()
    return dt.astimezone(tz).date()


class CalendarCollection(BlobCollection[CalendarEvent]):
    """Confirmed calendar events, kept in insertion order and listed by start time."""

    blob_key = CALENDAR_KEY
    adapter = TypeAdapter(list[CalendarEvent])
    label = "calendar events"

    def add(self, event: CalendarEvent) -> MutationResult[CalendarEvent]:
        with self._lock:
            if self._index_of(event.id) >= 0:
                return MutationResult.failure(f"Event {event.id} already exists", event)
            error = self._commit([*self._items, event])
            if error is not None:
                return MutationResult.failure(error, event)
        logger.info(f"Added event: '{event.title}' at {event.start_at.isoformat()}")
        return MutationResult.success(event)

    def create(
        self,
        title: str,
        start_at: datetime,
        end_at: Optional[datetime] = None,
        description: Optional[str] = None,
        category: Optional[EventCategory] = None,
        is_all_day: bool = False,
    ) -> MutationResult[CalendarEvent]:
        try:
            event = CalendarEvent(
                title=title,
                start_at=start_at,
                end_at=end_at,
                description=description,
                category=category,
                is_all_day=is_all_day,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid event: {e.errors()[0]['msg']}") from e
        return self.add(event)

    def create_all_day(
        self,
        title: str,
        day: date,
        description: Optional[str] = None,
        category: Optional[EventCategory] = None,
    ) -> MutationResult[CalendarEvent]:
        return self.create(
            title,
            datetime.combine(day, time(0, 0)),
            description=description,
            category=category,
            is_all_day=True,
        )

    def add_from_draft(self, draft: CalendarEventDraft) -> MutationResult[CalendarEvent]:
        return self.add(CalendarEvent.from_draft(draft))

    def update(self, event_id: str, **changes: Any) -> MutationResult[CalendarEvent]:
        """Apply field changes to an existing event.

        Moving ``start_at`` without an explicit ``end_at`` keeps the duration.
        Switching to all-day snaps the event to midnight..midnight.
        """
        unknown = set(changes) - _EDITABLE
        if unknown:
            raise ValidationError(f"Cannot update event fields: {', '.join(sorted(unknown))}")

        with self._lock:
            i = self._index_of(event_id)
            if i < 0:
                return MutationResult.failure(f"Event {event_id} not found")
            current = self._items[i]

            data = current.model_dump()
            data.update(changes)
            if "start_at" in changes and "end_at" not in changes:
                data["end_at"] = changes["start_at"] + current.duration
            try:
                updated = CalendarEvent.model_validate(data)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid event: {e.errors()[0]['msg']}") from e

            items = list(self._items)
            items[i] = updated
            error = self._commit(items)
            if error is not None:
                return MutationResult.failure(error, current)
        logger.info(f"Updated event: '{updated.title}'")
        return MutationResult.success(updated)

    def remove(self, event_id: str) -> MutationResult[CalendarEvent]:
        with self._lock:
            i = self._index_of(event_id)
            if i < 0:
                return MutationResult.success()
            removed = self._items[i]
            error = self._commit(self._items[:i] + self._items[i + 1 :])
            if error is not None:
                return MutationResult.failure(error, removed)
        logger.info(f"Removed event: '{removed.title}'")
        return MutationResult.success(removed)

    def list(self) -> list[CalendarEvent]:
        return self.snapshot(key=lambda e: e.start_at)

    def events_on(self, day: date | datetime) -> list[CalendarEvent]:
        """Events whose start falls on ``day`` in local time, earliest first.

        A timezone-aware ``datetime`` selects the day in its own zone.
        """
        tz = None
        if isinstance(day, datetime):
            tz = day.tzinfo
            day = day.date()
        return [e for e in self.list() if _local_day(e.start_at, tz) == day]
