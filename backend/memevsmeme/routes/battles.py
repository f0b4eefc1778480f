from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from memevsmeme.auth_deps import get_optional_user
from memevsmeme.db import get_session
from memevsmeme.errors import BattleNotFound, MemeNotInBattle, NotEnoughMemes
from memevsmeme.models.user import User
from memevsmeme.schemas.battle import BattlePublic, BattleWithMemes, VoteCreate, VotePublic, VoteResponse
from memevsmeme.schemas.challenge import ChallengeWithMemes
from memevsmeme.schemas.meme import LeaderboardEntry, MemePublic, MemeWithCreator
from memevsmeme.services.battles import create_random_battle, get_latest_battle
from memevsmeme.services.challenges import get_challenge_with_memes, list_challenge_memes
from memevsmeme.services.tally import cast_battle_vote, get_leaderboard

router = APIRouter(prefix="/api/battles", tags=["battles"])
leaderboard_router = APIRouter(prefix="/api/leaderboard", tags=["battles"])

def _with_memes(battle, meme_one, meme_two) -> BattleWithMemes:
    return BattleWithMemes(
        battle=BattlePublic.model_validate(battle),
        meme_one=MemePublic.model_validate(meme_one),
        meme_two=MemePublic.model_validate(meme_two),
    )

@router.get("/current", response_model=BattleWithMemes)
async def current_battle(session: AsyncSession = Depends(get_session)):
    try:
        return _with_memes(*await get_latest_battle(session))
    except BattleNotFound:
        raise HTTPException(status_code=404, detail="No battles found")

@router.post("/new", status_code=201, response_model=BattleWithMemes)
async def new_battle(session: AsyncSession = Depends(get_session)):
    try:
        return _with_memes(*await create_random_battle(session))
    except NotEnoughMemes:
        raise HTTPException(status_code=409, detail="Not enough memes to create a battle")

@router.post("/vote", response_model=VoteResponse)
async def vote(
    payload: VoteCreate,
    user: User | None = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
):
    try:
        v = await cast_battle_vote(session, payload.battle_id, payload.meme_id, user.id if user else None)
    except BattleNotFound:
        raise HTTPException(status_code=404, detail="Battle not found")
    except MemeNotInBattle:
        raise HTTPException(status_code=400, detail="Meme is not part of this battle")
    return VoteResponse(vote=VotePublic.model_validate(v))

# /api/battles/{id} addresses a community battle (a user-created challenge)
@router.get("/{challenge_id}", response_model=ChallengeWithMemes)
async def get_user_battle(challenge_id: int, session: AsyncSession = Depends(get_session)):
    out = await get_challenge_with_memes(session, challenge_id)
    if out is None:
        raise HTTPException(status_code=404, detail="Battle not found")
    return out

@router.get("/{challenge_id}/memes", response_model=list[MemeWithCreator])
async def user_battle_memes(challenge_id: int, session: AsyncSession = Depends(get_session)):
    return await list_challenge_memes(session, challenge_id, order="likes")

@leaderboard_router.get("", response_model=list[LeaderboardEntry])
async def leaderboard(session: AsyncSession = Depends(get_session)):
    return await get_leaderboard(session)
