import asyncio
from datetime import datetime, timezone
import pytest
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from memevsmeme.db import Base
from memevsmeme.errors import BattleNotFound, MemeNotFound, MemeNotInBattle
from memevsmeme.models.battle import Battle, Vote
from memevsmeme.models.meme import Meme
from memevsmeme.services import tally


async def _memes(session, *likes):
    rows = [Meme(prompt_text=f"meme {i}", image_url=f"/m{i}.png", likes=n) for i, n in enumerate(likes)]
    session.add_all(rows)
    await session.commit()
    return rows


@pytest.mark.asyncio
async def test_like_increments_and_is_not_idempotent(session):
    (meme,) = await _memes(session, 0)
    await tally.like_meme(session, meme.id)
    liked = await tally.like_meme(session, meme.id)
    assert liked.likes == 2


@pytest.mark.asyncio
async def test_like_missing_meme(session):
    with pytest.raises(MemeNotFound):
        await tally.like_meme(session, 12345)


@pytest.mark.asyncio
async def test_concurrent_likes_are_all_counted(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'likes.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as s:
        (meme,) = await _memes(s, 0)

    async def like_once():
        async with factory() as s:
            await tally.like_meme(s, meme.id)

    n = 10
    await asyncio.gather(*(like_once() for _ in range(n)))
    async with factory() as s:
        assert await s.scalar(select(Meme.likes).where(Meme.id == meme.id)) == n
    await engine.dispose()


@pytest.mark.asyncio
async def test_battle_vote_sets_winner_once(session):
    a, b = await _memes(session, 0, 0)
    battle = Battle(meme_one_id=a.id, meme_two_id=b.id)
    session.add(battle)
    await session.commit()

    await tally.cast_battle_vote(session, battle.id, a.id)
    await tally.cast_battle_vote(session, battle.id, b.id, user_id=None)

    fresh = await session.get(Battle, battle.id, populate_existing=True)
    assert fresh.winner_id == a.id
    likes = dict((await session.execute(select(Meme.id, Meme.likes))).all())
    assert likes == {a.id: 1, b.id: 1}
    assert await session.scalar(select(func.count()).select_from(Vote)) == 2


@pytest.mark.asyncio
async def test_battle_vote_rejects_outside_meme_without_mutation(session):
    a, b, outsider = await _memes(session, 3, 4, 5)
    battle = Battle(meme_one_id=a.id, meme_two_id=b.id)
    session.add(battle)
    await session.commit()

    with pytest.raises(MemeNotInBattle):
        await tally.cast_battle_vote(session, battle.id, outsider.id)
    with pytest.raises(BattleNotFound):
        await tally.cast_battle_vote(session, 999, a.id)

    assert await session.scalar(select(func.count()).select_from(Vote)) == 0
    fresh = await session.get(Battle, battle.id, populate_existing=True)
    assert fresh.winner_id is None
    likes = dict((await session.execute(select(Meme.id, Meme.likes))).all())
    assert likes == {a.id: 3, b.id: 4, outsider.id: 5}


def test_win_rate():
    assert tally.win_rate(0, 0) == 0
    assert tally.win_rate(1, 2) == 50
    assert tally.win_rate(1, 3) == 33
    assert tally.win_rate(2, 3) == 67
    assert tally.win_rate(1, 8) == 13  # 12.5 rounds half up
    assert tally.win_rate(3, 3) == 100


def test_leaderboard_sorting():
    memes = [
        Meme(id=1, prompt_text="a", image_url="/a", likes=50, views=0, rank=0),
        Meme(id=2, prompt_text="b", image_url="/b", likes=10, views=0, rank=0),
        Meme(id=3, prompt_text="c", image_url="/c", likes=30, views=0, rank=0),
        Meme(id=4, prompt_text="d", image_url="/d", likes=99, views=0, rank=0),
    ]
    for m in memes:
        m.created_at = datetime(2025, 5, 20, tzinfo=timezone.utc)
    battles = [
        Battle(id=1, meme_one_id=1, meme_two_id=2, winner_id=2),
        Battle(id=2, meme_one_id=1, meme_two_id=3, winner_id=3),
        Battle(id=3, meme_one_id=2, meme_two_id=3, winner_id=None),
    ]
    rows = tally.compute_leaderboard(memes, battles)
    assert [(r.id, r.win_rate) for r in rows] == [(3, 50), (2, 50), (4, 0), (1, 0)]
    never = next(r for r in rows if r.id == 4)
    assert never.battles_total == 0 and never.win_rate == 0
    for first, second in zip(rows, rows[1:]):
        assert (first.win_rate, first.likes) >= (second.win_rate, second.likes)


@pytest.mark.asyncio
async def test_like_and_vote_routes(client, session):
    (meme,) = await _memes(session, 0)
    r = await client.post(f"/api/memes/{meme.id}/like")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["meme"]["likes"] == 1
    r = await client.post(f"/api/memes/{meme.id}/vote")
    assert r.json()["meme"]["likes"] == 2
    assert (await client.post("/api/memes/777/like")).status_code == 404


@pytest.mark.asyncio
async def test_battle_routes(client, session):
    assert (await client.get("/api/battles/current")).status_code == 404

    r = await client.post("/api/battles/new")
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["meme_one"]["id"] != created["meme_two"]["id"]

    current = (await client.get("/api/battles/current")).json()
    assert current["battle"]["id"] == created["battle"]["id"]

    battle_id = created["battle"]["id"]
    chosen = created["meme_two"]["id"]
    r = await client.post("/api/battles/vote", json={"memeId": chosen, "battleId": battle_id})
    assert r.status_code == 200, r.text
    assert r.json()["vote"]["meme_id"] == chosen

    outsider = (await _memes(session, 0))[0]
    r = await client.post("/api/battles/vote", json={"meme_id": outsider.id, "battle_id": battle_id})
    assert r.status_code == 400
    assert (await client.post("/api/battles/vote", json={"memeId": chosen, "battleId": 999})).status_code == 404

    board = (await client.get("/api/leaderboard")).json()
    assert board[0]["id"] == chosen
    assert board[0]["win_rate"] == 100
    assert board[0]["battles_won"] == 1


@pytest.mark.asyncio
async def test_new_battle_seeds_demo_memes(client, session):
    r = await client.post("/api/battles/new")
    assert r.status_code == 201
    assert await session.scalar(select(func.count()).select_from(Meme)) == 4
