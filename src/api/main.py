import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api import state
from api.backend import build_backend
from api.routers import calendar, inbox, notes, ops, thoughts
from violet.config import load_settings
from violet.errors import RoutingError, ValidationError

# Logging configuration
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    owned = state.backend is None
    if owned:
        settings = load_settings()
        state.backend = build_backend(settings)
        logger.info(f"Violet started (provider={settings.llm_provider}, data={settings.data_dir})")
    try:
        yield
    finally:
        if owned and state.backend is not None:
            await state.backend.aclose()
            state.backend = None
            logger.info("Violet stopped")


app = FastAPI(title="Violet", lifespan=lifespan)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(RoutingError)
async def routing_error_handler(request: Request, exc: RoutingError) -> JSONResponse:
    logger.warning(f"Rejected route on {request.url.path}: {exc}")
    status = 404 if exc.missing else 409
    return JSONResponse(status_code=status, content={"detail": str(exc)})


app.include_router(thoughts.router)
app.include_router(inbox.router)
app.include_router(calendar.router)
app.include_router(notes.router)
app.include_router(ops.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
