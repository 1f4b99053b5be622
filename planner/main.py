from __future__ import annotations
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planner import __version__
from planner.api.v1.appointments import router as appointments_router
from planner.api.v1.auth import router as auth_router
from planner.api.v1.health import router as health_router
from planner.config import settings

logging.basicConfig(level=settings.LOG_LEVEL.upper())
log = logging.getLogger(__name__)

description = """
Personal planner backend.

Appointments may repeat daily, weekly or monthly. Listing endpoints expand
series into concrete occurrences; writes are rejected when any occurrence
would overlap an existing appointment of the same user.
"""
tags_metadata = [
    {"name": "Authentication", "description": "Registration, login and the current user."},
    {"name": "Appointments", "description": "Appointments, recurring series and their occurrences."},
    {"name": "Health", "description": "Liveness and database connectivity."},
]

app = FastAPI(
    title="Planner API",
    description=description,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(appointments_router)
app.include_router(health_router)

log.info("\U0001F331 FastAPI application configured. Environment: %s", settings.ENVIRONMENT)


@app.on_event("startup")
async def startup_event() -> None:
    log.info("\U0001F680 FastAPI application startup complete.")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    log.info("\U0001F44B FastAPI application shutdown.")
