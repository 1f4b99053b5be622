from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from planner.config import settings
from planner.db.base import engine

router = APIRouter(tags=["Health"])
log = logging.getLogger(__name__)


@router.get("/healthz")
async def healthz():
    out: dict[str, str] = {"environment": settings.ENVIRONMENT}

    # DB
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        out["db"] = "ok"
    except SQLAlchemyError as exc:
        log.exception("DB health check failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="db error") from exc

    out["status"] = "ok"
    return out
