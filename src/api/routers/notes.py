import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_notes
from storage.notes_store import NotesCollection

router = APIRouter()
logger = logging.getLogger(__name__)


class NoteIn(BaseModel):
    title: str = ""
    content: str = ""


class NotePatch(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


@router.get("/notes")
async def list_notes(
    q: Optional[str] = None,
    notes: NotesCollection = Depends(get_notes),
) -> dict:
    """Notes, most recently modified first. ``q`` filters on title or content."""
    items = notes.search(q) if q else notes.list()
    return {
        "notes": [n.model_dump(mode="json") for n in items],
        "total": len(items),
    }


@router.post("/notes")
async def create_note(payload: NoteIn, notes: NotesCollection = Depends(get_notes)) -> dict:
    result = notes.add(payload.title, payload.content)
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.error)
    return result.item.model_dump(mode="json")


@router.patch("/notes/{note_id}")
async def update_note(
    note_id: str,
    payload: NotePatch,
    notes: NotesCollection = Depends(get_notes),
) -> dict:
    if notes.get(note_id) is None:
        raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
    result = notes.update(note_id, title=payload.title, content=payload.content)
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.error)
    return result.item.model_dump(mode="json")


@router.delete("/notes/{note_id}")
async def delete_note(note_id: str, notes: NotesCollection = Depends(get_notes)) -> dict:
    result = notes.remove(note_id)
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.error)
    return {"status": "removed"}
