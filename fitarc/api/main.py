"""FitArc API — FastAPI application serving resolved workout and meal plans."""
from __future__ import annotations

import logging

from fitarc.logging_config import setup_logging
setup_logging()
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from fitarc import __version__
from fitarc.api.meals import router as meals_router
from fitarc.api.plans import router as plans_router
from fitarc.db.engine import engine, get_session
from fitarc.db.tables import Base
from fitarc.errors import InvalidElementIdError, MissingReferenceError, PlanOwnershipError, StaleDayError
from fitarc.middleware.request_id import RequestIDMiddleware

# ── Sentry Error Tracking ────────────────────────
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR),
        ],
        send_default_pii=False,
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate config and create tables on startup."""
    from fitarc.startup_checks import validate_settings
    validate_settings()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

    yield

    logger.info("Shutting down — draining connections...")
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="FitArc API",
    version=__version__,
    description="Plan resolution API — scheduled workouts and meals with per-day edits",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID tracing (X-Request-ID header, stamped on log lines)
app.add_middleware(RequestIDMiddleware)

app.include_router(plans_router)
app.include_router(meals_router)


@app.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    """Deep health check — validates DB connectivity."""
    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        logger.exception("Health check could not reach the database")
        db_status = "error"
    status = "ok" if db_status == "connected" else "degraded"
    return {"status": status, "db": db_status, "version": __version__}


@app.get("/ready")
async def readiness(session: AsyncSession = Depends(get_session)):
    """Readiness probe. Returns 503 if not ready to serve traffic."""
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Readiness check could not reach the database")
        return JSONResponse(status_code=503, content={"ready": False, "reason": "database unavailable"})
    return {"ready": True}


# --- Structured Error Responses ---


def _error(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message, **extra})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return clean, structured validation errors instead of raw Pydantic output."""
    errors = []
    for err in exc.errors():
        field = " → ".join(str(loc) for loc in err["loc"]) if err.get("loc") else "unknown"
        errors.append({"field": field, "message": err["msg"]})
    return _error(422, "validation_error", "Invalid request data", details=errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Consistent error envelope for all HTTP errors."""
    return _error(
        exc.status_code,
        exc.detail if isinstance(exc.detail, str) else "error",
        exc.detail,
    )


@app.exception_handler(PlanOwnershipError)
async def ownership_error_handler(request: Request, exc: PlanOwnershipError):
    return _error(403, "forbidden", str(exc))


@app.exception_handler(MissingReferenceError)
async def missing_reference_handler(request: Request, exc: MissingReferenceError):
    return _error(422, "missing_reference", str(exc), position=exc.position, field=exc.field)


@app.exception_handler(InvalidElementIdError)
async def invalid_element_id_handler(request: Request, exc: InvalidElementIdError):
    return _error(400, "invalid_element_id", str(exc))


@app.exception_handler(StaleDayError)
async def stale_day_handler(request: Request, exc: StaleDayError):
    return _error(409, "stale_day", str(exc), revision=exc.actual)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions — never leak stack traces."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "Something went wrong. Please try again.")
