from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Header
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from memevsmeme.auth_deps import get_current_user
from memevsmeme.db import get_session
from memevsmeme.models.user import User
from memevsmeme.schemas.auth import (
    RegisterRequest, LoginRequest, UserPublic, TokenPair, ProfileUpdate, AvatarRequest, AvatarResponse,
)
from memevsmeme.security import (
    InvalidToken, hash_password, verify_password, make_access_token, make_refresh_token, user_id_from_token,
)
from memevsmeme.services.avatars import avatar_url, random_seed
from memevsmeme.services.clock import utcnow

router = APIRouter(prefix="/api/auth", tags=["auth"])
log = structlog.get_logger()

@router.post("/register", status_code=201, response_model=UserPublic)
async def register(payload: RegisterRequest, session: AsyncSession = Depends(get_session)):
    if await session.scalar(select(User).where(User.username == payload.username)):
        raise HTTPException(status_code=400, detail="Username already exists")
    if payload.email and await session.scalar(select(User).where(User.email == payload.email)):
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        profile_image_url=payload.profile_image_url,
        avatar_seed=payload.avatar_seed or payload.username,
        avatar_style=payload.avatar_style or "avataaars",
        avatar_background_color=payload.avatar_background_color,
    )
    session.add(user)
    await session.commit()
    log.info("user_registered", user_id=user.id)
    return UserPublic.model_validate(user)

@router.post("/login", response_model=TokenPair)
async def login(payload: LoginRequest, session: AsyncSession = Depends(get_session)):
    user = await session.scalar(select(User).where(User.username == payload.username))
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid username or password")
    return TokenPair(access=make_access_token(user.id), refresh=make_refresh_token(user.id))

@router.post("/refresh", response_model=TokenPair)
async def refresh(authorization: str | None = Header(None)):
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing refresh token")
    try:
        user_id = user_id_from_token(authorization.split(" ", 1)[1], "refresh")
    except InvalidToken as e:
        raise HTTPException(status_code=401, detail=str(e))
    return TokenPair(access=make_access_token(user_id), refresh=make_refresh_token(user_id))

@router.get("/user", response_model=UserPublic)
async def current_user(user: User = Depends(get_current_user)):
    return UserPublic.model_validate(user)

@router.put("/profile", response_model=UserPublic)
async def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    changes = payload.model_dump(exclude_unset=True)
    new_name = changes.get("username")
    if new_name and new_name != user.username:
        if await session.scalar(select(User).where(User.username == new_name)):
            raise HTTPException(status_code=400, detail="Username already exists")
    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    await session.commit()
    return UserPublic.model_validate(user)

@router.post("/generate-avatar", response_model=AvatarResponse)
async def generate_avatar(payload: AvatarRequest):
    seed = payload.seed or random_seed()
    return AvatarResponse(
        avatar_url=avatar_url(seed, payload.style, payload.background_color),
        seed=seed,
        style=payload.style,
        background_color=payload.background_color,
    )
