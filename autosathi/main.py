"""
AutoSathi - Backend API
FastAPI + SQLModel + PostgreSQL
"""
from dotenv import load_dotenv
load_dotenv()  # Load .env before any other imports

import time
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager

from autosathi import __version__
from autosathi.api.errors import register_exception_handlers
from autosathi.api.v1 import (
    auth,
    vehicles,
    fuel,
    insurance,
    puc,
    services,
    notifications,
    dashboard,
)
from autosathi.config import settings
from autosathi.infrastructure.database import dispose_engine, get_session_maker
from autosathi.jobs import ReminderScheduler

# Setup structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ]
)

logger = structlog.get_logger()

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    scheduler = None
    if settings.reminder_scheduler_enabled:
        scheduler = ReminderScheduler(get_session_maker())
        await scheduler.start(run_on_startup=settings.environment == "development")

    logger.info("backend_api_started", environment=settings.environment)

    yield

    # Shutdown
    if scheduler:
        await scheduler.stop()
    await dispose_engine()
    logger.info("backend_api_stopping")

app = FastAPI(
    title="AutoSathi API",
    description="Vehicle maintenance tracking: fuel, renewals and service reminders",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


# Routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(vehicles.router, prefix="/api/vehicles", tags=["vehicles"])
app.include_router(fuel.router, prefix="/api/fuel", tags=["fuel"])
app.include_router(insurance.router, prefix="/api/insurance", tags=["insurance"])
app.include_router(puc.router, prefix="/api/puc", tags=["puc"])
app.include_router(services.router, prefix="/api/services", tags=["services"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])

@app.get("/health")
async def health_check():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 1),
        "environment": settings.environment,
    }

@app.get("/")
async def root():
    return {"message": "AutoSathi API", "docs": "/docs"}
