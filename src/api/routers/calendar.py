import logging
import time
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_backend, get_calendar
from api.backend import BackendAPI
from api.metrics import EXTRACTION_FALLBACKS_TOTAL, record_request
from routing import responses
from storage.calendar_store import CalendarCollection
from violet.models import CalendarEvent, EventCategory

router = APIRouter()
logger = logging.getLogger(__name__)


class EventIn(BaseModel):
    title: str
    start_at: datetime
    end_at: Optional[datetime] = None
    description: Optional[str] = None
    category: Optional[EventCategory] = None
    is_all_day: bool = False


class EventPatch(BaseModel):
    title: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    description: Optional[str] = None
    category: Optional[EventCategory] = None
    is_all_day: Optional[bool] = None


class TextIn(BaseModel):
    text: str


@router.get("/events")
async def list_events(
    day: Optional[date] = None,
    calendar: CalendarCollection = Depends(get_calendar),
) -> dict:
    """All events by start time, or only those on ``day`` (YYYY-MM-DD)."""
    events = calendar.events_on(day) if day is not None else calendar.list()
    return {
        "events": [e.model_dump(mode="json") for e in events],
        "total": len(events),
    }


@router.post("/events")
async def create_event(
    payload: EventIn,
    calendar: CalendarCollection = Depends(get_calendar),
) -> dict:
    start = time.time()
    result = calendar.create(
        payload.title,
        payload.start_at,
        end_at=payload.end_at,
        description=payload.description,
        category=payload.category,
        is_all_day=payload.is_all_day,
    )
    if not result.ok:
        record_request("/events", "error", start)
        raise HTTPException(status_code=500, detail=result.error)
    record_request("/events", "created", start)
    return result.item.model_dump(mode="json")


@router.post("/events/ai")
async def preview_event(payload: TextIn, backend: BackendAPI = Depends(get_backend)) -> dict:
    """Parse free text into an event draft. Nothing is saved until POST /events."""
    start = time.time()
    draft = await backend.extractor.extract(payload.text)
    if draft.source == "fallback":
        EXTRACTION_FALLBACKS_TOTAL.inc()
    record_request("/events/ai", draft.source, start)
    return {
        "draft": draft.model_dump(mode="json"),
        "message": responses.calendar_message(CalendarEvent.from_draft(draft), draft.confidence),
    }


@router.patch("/events/{event_id}")
async def update_event(
    event_id: str,
    payload: EventPatch,
    calendar: CalendarCollection = Depends(get_calendar),
) -> dict:
    if calendar.get(event_id) is None:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
    result = calendar.update(event_id, **payload.model_dump(exclude_unset=True))
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.error)
    return result.item.model_dump(mode="json")


@router.delete("/events/{event_id}")
async def delete_event(
    event_id: str,
    calendar: CalendarCollection = Depends(get_calendar),
) -> dict:
    result = calendar.remove(event_id)
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.error)
    return {"status": "removed"}
