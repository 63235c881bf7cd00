"""
Ideation platform — FastAPI application entry-point.

Run with:
    uvicorn ideation.main:app --reload
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from ideation.config import settings
from ideation.database import create_tables, engine
from ideation.errors import MalformedRecordError

# ── Import routers ──
from ideation.routers import (
    admin,
    auth,
    comments,
    evaluations,
    ideas,
    navigation,
    notifications,
    phases,
    players,
    rankings,
    votes,
)
from ideation.scheduler import seconds_until, start_periodic
from ideation.services.recap import send_daily_recap
from ideation.utils.timeutil import utcnow

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: create tables, run the recap job ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables(engine)

    recap_task = None
    if settings.RECAP_ENABLED:
        recap_task = start_periodic(
            timedelta(hours=settings.RECAP_INTERVAL_HOURS),
            send_daily_recap,
            "daily-recap",
            first_delay=seconds_until(settings.RECAP_HOUR_UTC, utcnow()),
        )
    yield
    if recap_task:
        recap_task.cancel()
        with suppress(asyncio.CancelledError):
            await recap_task


app = FastAPI(
    title=settings.APP_NAME,
    description="Gamified ideation platform — share ideas, tag colleagues, climb the ranking.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=("*",))

# ── Uploaded images ──
app.mount("/media", StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False), name="media")


@app.exception_handler(MalformedRecordError)
async def malformed_record_handler(request: Request, exc: MalformedRecordError):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": f"Stored {exc.entity} {exc.entity_id} is malformed"},
    )


# ── Register API routers ──
app.include_router(auth.router)
app.include_router(players.router)
app.include_router(ideas.router)
app.include_router(comments.router)
app.include_router(evaluations.router)
app.include_router(votes.router)
app.include_router(rankings.router)
app.include_router(notifications.router)
app.include_router(phases.router)
app.include_router(admin.router)
app.include_router(navigation.router)


@app.get("/")
async def root():
    return {"app": settings.APP_NAME, "status": "ok"}
