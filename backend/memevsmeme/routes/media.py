from __future__ import annotations
from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool
from memevsmeme.services.storage import get_bytes

router = APIRouter(prefix="/api/media", tags=["media"])

@router.get("/{key:path}")
async def get_media(key: str):
    """Stream a stored meme image back to the browser."""
    try:
        data, content_type = await run_in_threadpool(get_bytes, key)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Image not found")
    return Response(content=data, media_type=content_type)
