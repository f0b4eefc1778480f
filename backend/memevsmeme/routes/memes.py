from __future__ import annotations
from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, Form, UploadFile, File
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from memevsmeme.auth_deps import get_current_user, get_optional_user
from memevsmeme.db import get_session
from memevsmeme.errors import MemeNotFound, UploadRejected
from memevsmeme.models.challenge import Challenge
from memevsmeme.models.comment import Comment
from memevsmeme.models.meme import Meme
from memevsmeme.models.template import Template
from memevsmeme.models.user import User
from memevsmeme.schemas.community import CommentCreate, CommentPublic
from memevsmeme.schemas.meme import (
    MemePublic, MemeWithCreator, MemeGenerateRequest, MemeGenerateResponse, LikeResponse,
)
from memevsmeme.services import storage
from memevsmeme.services.ai import GeminiClient, get_gemini
from memevsmeme.services.catalog import random_placeholder_image
from memevsmeme.services.challenges import meme_with_creator_query, to_meme_with_creator, list_challenge_memes
from memevsmeme.services.clock import utcnow
from memevsmeme.services.media import validate_upload, new_object_key
from memevsmeme.services.tally import like_meme, record_view

router = APIRouter(prefix="/api/memes", tags=["memes"])
log = structlog.get_logger()

TRENDING_WINDOW = timedelta(hours=24)
TRENDING_LIMIT = 10


async def _require_challenge(session: AsyncSession, challenge_id: int | None) -> None:
    if challenge_id is not None and not await session.get(Challenge, challenge_id):
        raise HTTPException(status_code=404, detail="Challenge not found")


@router.get("", response_model=list[MemePublic])
async def list_memes(session: AsyncSession = Depends(get_session)):
    rows = await session.execute(select(Meme).order_by(Meme.created_at.desc(), Meme.id.desc()))
    return [MemePublic.model_validate(m) for m in rows.scalars().all()]


@router.get("/trending", response_model=list[MemePublic])
async def trending_memes(session: AsyncSession = Depends(get_session)):
    since = utcnow() - TRENDING_WINDOW
    rows = await session.execute(
        select(Meme).where(Meme.created_at >= since).order_by(Meme.likes.desc(), Meme.id.desc()).limit(TRENDING_LIMIT)
    )
    return [MemePublic.model_validate(m) for m in rows.scalars().all()]


@router.get("/user/{user_id}", response_model=list[MemePublic])
async def user_memes(user_id: int, session: AsyncSession = Depends(get_session)):
    rows = await session.execute(
        select(Meme).where(Meme.user_id == user_id).order_by(Meme.created_at.desc(), Meme.id.desc())
    )
    return [MemePublic.model_validate(m) for m in rows.scalars().all()]


@router.get("/challenge/{challenge_id}", response_model=list[MemeWithCreator])
async def challenge_memes(challenge_id: int, session: AsyncSession = Depends(get_session)):
    return await list_challenge_memes(session, challenge_id, order="created")


@router.post("/generate", status_code=201, response_model=MemeGenerateResponse)
async def generate_meme(
    payload: MemeGenerateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    gemini: GeminiClient = Depends(get_gemini),
):
    await _require_challenge(session, payload.daily_challenge_id)
    caption = None
    template = await session.get(Template, payload.template_id) if payload.template_id else None

    if payload.generation_type == "template" and template:
        image_url = template.image_url
    elif payload.generation_type == "ai":
        result = await gemini.generate_image(f"{payload.prompt_text} in {payload.style} style")
        if not result.success:
            raise HTTPException(status_code=400, detail=result.error or "Failed to generate meme image")
        image_url = result.image_url
        caption = await gemini.generate_caption(payload.prompt_text) or None
    else:
        image_url = random_placeholder_image()

    meme = Meme(
        prompt_text=payload.prompt_text,
        image_url=image_url,
        user_id=user.id,
        daily_challenge_id=payload.daily_challenge_id,
    )
    session.add(meme)
    await session.commit()
    log.info("meme_generated", meme_id=meme.id, generation_type=payload.generation_type, user_id=user.id)
    return MemeGenerateResponse(**MemePublic.model_validate(meme).model_dump(), caption=caption)


@router.post("/upload", status_code=201, response_model=MemePublic)
async def upload_meme(
    image: UploadFile = File(..., description="JPEG, PNG or GIF meme image"),
    prompt_text: str | None = Form(default=None),
    daily_challenge_id: int | None = Form(default=None),
    user: User | None = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
):
    await _require_challenge(session, daily_challenge_id)
    data = await image.read()
    try:
        mime = validate_upload(data)
    except UploadRejected as e:
        raise HTTPException(status_code=400, detail=str(e))

    key = new_object_key("uploads", mime)
    image_url = await run_in_threadpool(storage.put_bytes, key, data, mime)
    meme = Meme(
        prompt_text=prompt_text or "Uploaded meme",
        image_url=image_url,
        user_id=user.id if user else None,
        daily_challenge_id=daily_challenge_id,
    )
    session.add(meme)
    await session.commit()
    log.info("meme_uploaded", meme_id=meme.id, key=key, bytes=len(data))
    return MemePublic.model_validate(meme)


@router.get("/{meme_id}", response_model=MemeWithCreator)
async def get_meme(meme_id: int, session: AsyncSession = Depends(get_session)):
    if not await record_view(session, meme_id):
        raise HTTPException(status_code=404, detail="Meme not found")
    row = (await session.execute(meme_with_creator_query().where(Meme.id == meme_id))).first()
    if row is None:
        raise HTTPException(status_code=404, detail="Meme not found")
    return to_meme_with_creator(row)


async def _like(meme_id: int, session: AsyncSession) -> LikeResponse:
    try:
        meme = await like_meme(session, meme_id)
    except MemeNotFound:
        raise HTTPException(status_code=404, detail="Meme not found")
    return LikeResponse(meme=MemePublic.model_validate(meme))


@router.post("/{meme_id}/like", response_model=LikeResponse)
async def like(meme_id: int, session: AsyncSession = Depends(get_session)):
    return await _like(meme_id, session)


@router.post("/{meme_id}/vote", response_model=LikeResponse)
async def vote(meme_id: int, session: AsyncSession = Depends(get_session)):
    """Alias of /like kept for the challenge detail page."""
    return await _like(meme_id, session)


@router.get("/{meme_id}/comments", response_model=list[CommentPublic])
async def list_comments(meme_id: int, session: AsyncSession = Depends(get_session)):
    rows = (await session.execute(
        select(Comment, User.username, User.profile_image_url, User.avatar_seed, User.avatar_style)
        .outerjoin(User, User.id == Comment.user_id)
        .where(Comment.meme_id == meme_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )).all()
    out = []
    for comment, username, profile_image_url, avatar_seed, avatar_style in rows:
        pub = CommentPublic.model_validate(comment)
        pub.username = username
        pub.profile_image_url = profile_image_url
        pub.avatar_seed = avatar_seed
        pub.avatar_style = avatar_style
        out.append(pub)
    return out


@router.post("/{meme_id}/comments", status_code=201, response_model=CommentPublic)
async def add_comment(
    meme_id: int,
    payload: CommentCreate,
    user: User | None = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
):
    if not await session.get(Meme, meme_id):
        raise HTTPException(status_code=404, detail="Meme not found")
    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Comment text is required")
    comment = Comment(meme_id=meme_id, user_id=user.id if user else None, text=text)
    session.add(comment)
    await session.commit()
    pub = CommentPublic.model_validate(comment)
    if user:
        pub.username = user.username
        pub.profile_image_url = user.profile_image_url
        pub.avatar_seed = user.avatar_seed
        pub.avatar_style = user.avatar_style
    return pub
