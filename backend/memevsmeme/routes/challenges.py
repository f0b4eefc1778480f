from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from memevsmeme.auth_deps import get_current_user
from memevsmeme.db import get_session
from memevsmeme.models.user import User
from memevsmeme.schemas.challenge import (
    ChallengeCreate, ChallengePublic, ChallengeWithMemes, ChallengeSubmission, UserBattleCreate,
)
from memevsmeme.schemas.meme import MemePublic
from memevsmeme.services import challenges as store
from memevsmeme.errors import ChallengeClosed, ChallengeNotFound, IncompleteSubmission

router = APIRouter(prefix="/api/daily-challenges", tags=["daily-challenges"])
user_battles_router = APIRouter(prefix="/api/user-battles", tags=["user-battles"])
log = structlog.get_logger()

@router.get("/current", response_model=ChallengeWithMemes)
async def current_challenge(session: AsyncSession = Depends(get_session)):
    ch = await store.get_current_daily_challenge(session)
    if ch is None:
        raise HTTPException(status_code=404, detail="No active daily challenge found")
    out = await store.get_challenge_with_memes(session, ch.id)
    if out is None:
        raise HTTPException(status_code=404, detail="No active daily challenge found")
    return out

@router.get("", response_model=list[ChallengePublic])
async def list_challenges(session: AsyncSession = Depends(get_session)):
    return [ChallengePublic.model_validate(c) for c in await store.list_official_challenges(session)]

@router.post("", status_code=201, response_model=ChallengePublic)
async def create_challenge(
    payload: ChallengeCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    ch = await store.create_user_challenge(session, user.id, payload)
    log.info("user_challenge_created", challenge_id=ch.id, prompt_id=ch.prompt_id, user_id=user.id)
    return ChallengePublic.model_validate(ch)

@router.get("/{challenge_id}", response_model=ChallengeWithMemes)
async def get_challenge(challenge_id: int, session: AsyncSession = Depends(get_session)):
    out = await store.get_challenge_with_memes(session, challenge_id)
    if out is None:
        raise HTTPException(status_code=404, detail="Challenge not found")
    return out

@router.post("/{challenge_id}/submit", status_code=201, response_model=MemePublic)
async def submit_to_challenge(
    challenge_id: int,
    payload: ChallengeSubmission | None = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    payload = payload or ChallengeSubmission()
    try:
        meme = await store.submit_meme(session, challenge_id, user.id, payload.prompt_text, payload.image_url)
    except ChallengeNotFound:
        raise HTTPException(status_code=404, detail="Challenge not found")
    except ChallengeClosed:
        raise HTTPException(status_code=400, detail="This daily challenge has ended")
    except IncompleteSubmission as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MemePublic.model_validate(meme)

@user_battles_router.get("", response_model=list[ChallengePublic])
async def list_user_battles(session: AsyncSession = Depends(get_session)):
    return await store.list_user_battles(session)

@user_battles_router.post("/create", status_code=201, response_model=ChallengePublic)
async def create_user_battle(
    payload: UserBattleCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    ch = await store.create_user_challenge(session, user.id, payload, prompt_id=payload.prompt_id)
    log.info("user_battle_created", challenge_id=ch.id, prompt_id=ch.prompt_id, user_id=user.id)
    return ChallengePublic.model_validate(ch)
