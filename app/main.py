import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.db.session import AsyncSessionLocal, engine
from app.services.notifications import dispatch_events
from app.services.peak_monitor import DailyPeakState, run_peak_monitor
from app.services.windows import billing_tz

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)

    monitor: asyncio.Task | None = None
    if settings.peak_monitor_enabled:
        app.state.peak_state = DailyPeakState()
        monitor = asyncio.create_task(
            run_peak_monitor(
                app.state.peak_state,
                session_factory=AsyncSessionLocal,
                dispatch=dispatch_events,
                interval_seconds=settings.peak_poll_interval_seconds,
                threshold_kw=settings.peak_threshold_kw,
                tz=billing_tz(),
            )
        )

    yield

    if monitor is not None:
        monitor.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await monitor
    logger.info("Shutting down — disposing DB engine")
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Electricity usage and billing API — integrates raw power samples into "
        "daily, hourly and monthly energy and bills, sizes solar, and pushes "
        "peak / threshold notifications."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to process data", "message": str(exc)},
    )


# ── Root liveness check ────────────────────────────────────────────────────────
@app.get("/health", tags=["System"], summary="Liveness check")
async def health():
    """Returns 200 OK if the service is running."""
    return {"status": "ok", "service": settings.app_name, "version": settings.app_version}


# ── Versioned API routes ────────────────────────────────────────────────────────
from app.api.v1.router import api_v1_router  # noqa: E402 — imported after app creation

app.include_router(api_v1_router, prefix="/api/v1")
