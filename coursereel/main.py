"""CourseReel - FastAPI app entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from coursereel.core.config import get_settings
from coursereel.core.errors import (
    AttemptStateError,
    CourseReelError,
    GenerationValidationError,
    NotFoundError,
    PersistenceError,
)
from coursereel.db.base import Base
from coursereel.db.session import engine
from coursereel.routers import api

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# error class -> HTTP status; first match wins
ERROR_STATUS = [
    (GenerationValidationError, 400),
    (NotFoundError, 404),
    (AttemptStateError, 409),
    (PersistenceError, 500),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title="CourseReel",
    description="Training video and branching scenario generation",
    lifespan=lifespan,
)

app.include_router(api.router)


@app.exception_handler(CourseReelError)
async def course_reel_error_handler(request: Request, exc: CourseReelError):
    status = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 500)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@app.get("/health")
async def health():
    return {"status": "ok"}
