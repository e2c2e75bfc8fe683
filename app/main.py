from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.db import engine
from app.log import configure_logging
from app.tracker import schema
from app.tracker.bot import router as bot_router
from app.tracker.errors import InvalidFormat, MissingFields, TrackerError
from app.tracker.router import router as tracker_router

configure_logging(settings.log_level, settings.log_json)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.tracker_create_schema:
        async with engine.begin() as conn:
            await schema.create_all(conn)
        logger.info("schema ready")
    yield
    await engine.dispose()


app = FastAPI(title="Nightlog", version="0.1.0", lifespan=lifespan)
app.include_router(tracker_router)
app.include_router(bot_router)

if Path(settings.static_dir).is_dir():
    app.mount("/app", StaticFiles(directory=settings.static_dir, html=True), name="webapp")


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    logger.info("request rejected", path=request.url.path, kind=exc.kind, detail=exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.kind})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    kind = MissingFields if errors and all(e.get("type") == "missing" for e in errors) else InvalidFormat
    logger.info("request rejected", path=request.url.path, kind=kind.kind, errors=len(errors))
    return JSONResponse(status_code=kind.status_code, content={"error": kind.kind})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": TrackerError.kind})


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "webapp": "/app/",
        "api": {
            "users": "/api/users",
            "sleep": "/api/sleep",
            "sleep_delete": "/api/sleep/{owner_id}/{date}",
            "weight": "/api/weight",
            "weight_delete": "/api/weight/{owner_id}/{date}",
            "settings": "/api/settings",
            "dashboard": "/api/dashboard/{owner_id}",
            "streak": "/api/streak/{owner_id}",
        },
        "webhook": "/webhook",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
