from __future__ import annotations
from typing import Iterable
import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from memevsmeme.errors import BattleNotFound, MemeNotFound, MemeNotInBattle
from memevsmeme.models.battle import Battle, Vote
from memevsmeme.models.meme import Meme
from memevsmeme.schemas.meme import LeaderboardEntry, MemePublic

log = structlog.get_logger()


async def _increment(session: AsyncSession, meme_id: int, column) -> bool:
    # Single UPDATE ... SET col = col + 1; no read-modify-write window
    result = await session.execute(
        update(Meme)
        .where(Meme.id == meme_id)
        .values({column: column + 1})
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) > 0


async def like_meme(session: AsyncSession, meme_id: int) -> Meme:
    """Direct like. Not idempotent per user: every call adds one."""
    if not await _increment(session, meme_id, Meme.likes):
        await session.rollback()
        raise MemeNotFound(meme_id)
    await session.commit()
    meme = await session.get(Meme, meme_id, populate_existing=True)
    log.info("meme_liked", meme_id=meme_id, likes=meme.likes)
    return meme


async def record_view(session: AsyncSession, meme_id: int) -> bool:
    found = await _increment(session, meme_id, Meme.views)
    await session.commit()
    return found


async def cast_battle_vote(
    session: AsyncSession, battle_id: int, meme_id: int, user_id: int | None = None
) -> Vote:
    battle = await session.get(Battle, battle_id)
    if not battle:
        raise BattleNotFound(battle_id)
    if meme_id not in (battle.meme_one_id, battle.meme_two_id):
        raise MemeNotInBattle(meme_id)

    vote = Vote(meme_id=meme_id, battle_id=battle_id, user_id=user_id)
    session.add(vote)
    # First vote decides the winner; the WHERE makes concurrent first votes safe
    await session.execute(
        update(Battle)
        .where(Battle.id == battle_id, Battle.winner_id.is_(None))
        .values(winner_id=meme_id)
        .execution_options(synchronize_session=False)
    )
    await _increment(session, meme_id, Meme.likes)
    await session.commit()
    log.info("battle_vote", battle_id=battle_id, meme_id=meme_id, user_id=user_id, vote_id=vote.id)
    return vote


def win_rate(won: int, total: int) -> int:
    """Percentage rounded half up; 0 when the meme never battled."""
    if total <= 0:
        return 0
    return (200 * won + total) // (2 * total)


def compute_leaderboard(memes: Iterable[Meme], battles: Iterable[Battle]) -> list[LeaderboardEntry]:
    won: dict[int, int] = {}
    total: dict[int, int] = {}
    for b in battles:
        if b.winner_id is not None:
            won[b.winner_id] = won.get(b.winner_id, 0) + 1
        for mid in {b.meme_one_id, b.meme_two_id}:
            total[mid] = total.get(mid, 0) + 1

    rows = []
    for m in memes:
        base = MemePublic.model_validate(m).model_dump()
        w, t = won.get(m.id, 0), total.get(m.id, 0)
        rows.append(LeaderboardEntry(**base, win_rate=win_rate(w, t), battles_won=w, battles_total=t))
    rows.sort(key=lambda r: (-r.win_rate, -r.likes))
    return rows


async def get_leaderboard(session: AsyncSession) -> list[LeaderboardEntry]:
    memes = (await session.execute(select(Meme))).scalars().all()
    battles = (await session.execute(select(Battle))).scalars().all()
    return compute_leaderboard(memes, battles)
