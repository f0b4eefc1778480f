from __future__ import annotations
import random
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from memevsmeme.errors import BattleNotFound, NotEnoughMemes
from memevsmeme.models.battle import Battle
from memevsmeme.models.meme import Meme
from memevsmeme.services.catalog import seed_demo_memes


async def get_latest_battle(session: AsyncSession) -> tuple[Battle, Meme, Meme]:
    battle = await session.scalar(select(Battle).order_by(Battle.created_at.desc(), Battle.id.desc()).limit(1))
    if not battle:
        raise BattleNotFound(None)
    meme_one = await session.get(Meme, battle.meme_one_id)
    meme_two = await session.get(Meme, battle.meme_two_id)
    if not meme_one or not meme_two:
        raise BattleNotFound(battle.id)
    return battle, meme_one, meme_two


async def create_random_battle(session: AsyncSession, rng: random.Random | None = None) -> tuple[Battle, Meme, Meme]:
    memes = list((await session.execute(select(Meme))).scalars().all())
    if len(memes) < 2:
        await seed_demo_memes(session)
        memes = list((await session.execute(select(Meme))).scalars().all())
        if len(memes) < 2:
            raise NotEnoughMemes(len(memes))
    meme_one, meme_two = (rng or random).sample(memes, 2)
    battle = Battle(meme_one_id=meme_one.id, meme_two_id=meme_two.id)
    session.add(battle)
    await session.commit()
    return battle, meme_one, meme_two
