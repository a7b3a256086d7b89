import logging
import time

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.dependencies import get_router
from api.metrics import record_request, record_routing
from routing.state_machine import ThoughtRouter

router = APIRouter()
logger = logging.getLogger(__name__)


class ThoughtIn(BaseModel):
    text: str


@router.post("/thoughts")
async def submit_thought(
    payload: ThoughtIn,
    thought_router: ThoughtRouter = Depends(get_router),
) -> dict:
    """Classify a new thought and route it to the calendar or Touch Later."""
    start = time.time()
    logger.info(f"Received thought: {payload.text[:50]}...")

    result = await thought_router.submit(payload.text)

    record_routing(result)
    record_request("/thoughts", result.state.value, start)
    return {"ok": result.ok, **result.model_dump(mode="json")}
