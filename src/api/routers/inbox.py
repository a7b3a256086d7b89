import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_inbox, get_router
from api.metrics import INBOX_DEPTH, record_request, record_routing
from routing.state_machine import RoutingResult, ThoughtRouter
from storage.inbox_store import InboxStore
from violet.models import EventCategory

router = APIRouter()
logger = logging.getLogger(__name__)


class ThoughtIn(BaseModel):
    text: str


class CalendarConfirmIn(BaseModel):
    """Edits applied to the extracted draft before it is saved."""

    title: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    description: Optional[str] = None
    category: Optional[EventCategory] = None
    is_all_day: Optional[bool] = None


class NoteConfirmIn(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


def _routed(endpoint: str, result: RoutingResult, start: float, inbox: InboxStore) -> dict:
    record_routing(result)
    record_request(endpoint, result.state.value, start)
    INBOX_DEPTH.set(len(inbox))
    return {"ok": result.ok, **result.model_dump(mode="json")}


@router.get("/inbox")
async def list_inbox(inbox: InboxStore = Depends(get_inbox)) -> dict:
    """Touch Later items, newest first."""
    items = inbox.list()
    INBOX_DEPTH.set(len(items))
    return {
        "items": [t.model_dump(mode="json") for t in items],
        "total": len(items),
    }


@router.post("/inbox")
async def add_to_inbox(
    payload: ThoughtIn,
    thought_router: ThoughtRouter = Depends(get_router),
    inbox: InboxStore = Depends(get_inbox),
) -> dict:
    start = time.time()
    result = thought_router.defer(payload.text)
    return _routed("/inbox", result, start, inbox)


@router.delete("/inbox/{thought_id}")
async def delete_from_inbox(
    thought_id: str,
    thought_router: ThoughtRouter = Depends(get_router),
    inbox: InboxStore = Depends(get_inbox),
) -> dict:
    result = thought_router.discard(thought_id)
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.error)
    INBOX_DEPTH.set(len(inbox))
    return {"status": "removed"}


@router.post("/inbox/{thought_id}/calendar")
async def begin_calendar_route(
    thought_id: str,
    thought_router: ThoughtRouter = Depends(get_router),
) -> dict:
    """Extract an event draft for review. The item stays in Touch Later."""
    draft = await thought_router.begin_calendar_route(thought_id)
    return {"thought_id": thought_id, "draft": draft.model_dump(mode="json")}


@router.post("/inbox/{thought_id}/calendar/confirm")
async def confirm_calendar_route(
    thought_id: str,
    payload: Optional[CalendarConfirmIn] = None,
    thought_router: ThoughtRouter = Depends(get_router),
    inbox: InboxStore = Depends(get_inbox),
) -> dict:
    start = time.time()
    edits = payload.model_dump(exclude_none=True) if payload else {}
    result = thought_router.confirm_calendar_route(thought_id, **edits)
    return _routed("/inbox/calendar/confirm", result, start, inbox)


@router.post("/inbox/{thought_id}/notes")
async def route_to_notes(
    thought_id: str,
    payload: Optional[NoteConfirmIn] = None,
    thought_router: ThoughtRouter = Depends(get_router),
    inbox: InboxStore = Depends(get_inbox),
) -> dict:
    start = time.time()
    payload = payload or NoteConfirmIn()
    result = thought_router.confirm_notes_route(
        thought_id, title=payload.title, content=payload.content
    )
    return _routed("/inbox/notes", result, start, inbox)


@router.post("/inbox/{thought_id}/cancel")
async def cancel_route(
    thought_id: str,
    thought_router: ThoughtRouter = Depends(get_router),
) -> dict:
    state = thought_router.cancel_route(thought_id)
    return {"thought_id": thought_id, "state": state.value}
