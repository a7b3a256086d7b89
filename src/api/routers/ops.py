import logging

from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api import state
from api.metrics import INBOX_DEPTH

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint for container orchestration."""
    backend = state.backend
    if backend is None:
        return {"status": "starting"}
    return {
        "status": "healthy",
        "inbox_size": len(backend.inbox),
        "events": len(backend.calendar),
        "notes": len(backend.notes),
    }


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    if state.backend is not None:
        INBOX_DEPTH.set(len(state.backend.inbox))

    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
