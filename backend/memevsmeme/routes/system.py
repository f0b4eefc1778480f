from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from datetime import datetime, timezone
import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from memevsmeme.config import settings
from memevsmeme.db import get_session

router = APIRouter(tags=["system"])
log = structlog.get_logger()

@router.get("/health")
async def health(request: Request, session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(text("SELECT 1"))
        db = "ok"
    except SQLAlchemyError as e:
        log.warning("health_db_unreachable", error=str(e))
        db = "unavailable"
    return {
        "status": "ok",
        "db": db,
        "env": settings.environment,
        "time": datetime.now(timezone.utc).isoformat(),
        "request_id": request.headers.get("x-request-id") or request.state.request_id,
    }

@router.get("/version")
async def version():
    return {
        "name": settings.app_name,
        "display_name": settings.app_display_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
    }
