from fastapi import Depends, HTTPException

from api import state
from api.backend import BackendAPI
from routing.state_machine import ThoughtRouter
from storage.calendar_store import CalendarCollection
from storage.inbox_store import InboxStore
from storage.notes_store import NotesCollection


def get_backend() -> BackendAPI:
    if state.backend is None:
        raise HTTPException(status_code=503, detail="Backend not initialized")
    return state.backend


def get_router(backend: BackendAPI = Depends(get_backend)) -> ThoughtRouter:
    return backend.router


def get_inbox(backend: BackendAPI = Depends(get_backend)) -> InboxStore:
    return backend.inbox


def get_calendar(backend: BackendAPI = Depends(get_backend)) -> CalendarCollection:
    return backend.calendar


def get_notes(backend: BackendAPI = Depends(get_backend)) -> NotesCollection:
    return backend.notes
