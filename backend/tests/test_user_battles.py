import pytest
from datetime import datetime, timedelta, timezone

from memevsmeme.models.meme import Meme
from memevsmeme.services.challenges import user_challenge_prompt_id


def _battle_payload(**overrides):
    start = datetime.now(timezone.utc)
    payload = {
        "title": "Cat vs Cucumber",
        "prompt_text": "Your best cat-meets-cucumber reaction",
        "date": start.isoformat(),
        "end_date": (start + timedelta(days=3)).isoformat(),
        "category": "Animals",
        "visibility": "public",
    }
    payload.update(overrides)
    return payload


def test_generated_prompt_id():
    at = datetime(2025, 5, 20, 8, 0, 0, 123000, tzinfo=timezone.utc)
    millis = str(int(at.timestamp() * 1000))
    assert user_challenge_prompt_id(at) == "UC" + millis[-6:]


@pytest.mark.asyncio
async def test_empty_listing_seeds_sample(client):
    r = await client.get("/api/user-battles")
    assert r.status_code == 200
    rows = r.json()
    assert len(rows) == 1
    assert rows[0]["prompt_text"] == "When AI starts finishing your sentences before you do"
    assert rows[0]["is_user_created"] is True
    assert rows[0]["participant_count"] == 0
    # seeded once
    assert len((await client.get("/api/user-battles")).json()) == 1


@pytest.mark.asyncio
async def test_create_and_list_user_battle(client, session, register_login):
    headers, user = await register_login()
    r = await client.post("/api/user-battles/create", headers=headers, json=_battle_payload(prompt_id="CATS01"))
    assert r.status_code == 201, r.text
    battle = r.json()
    assert battle["prompt_id"] == "CATS01"
    assert battle["title"] == "Cat vs Cucumber"
    assert battle["user_id"] == user["id"]

    session.add_all([
        Meme(prompt_text="jump", image_url="/j", daily_challenge_id=battle["id"], likes=1),
        Meme(prompt_text="scream", image_url="/s", daily_challenge_id=battle["id"], likes=7),
    ])
    await session.commit()

    listed = (await client.get("/api/user-battles")).json()
    assert [b["id"] for b in listed] == [battle["id"]]
    assert listed[0]["participant_count"] == 2

    detail = (await client.get(f"/api/battles/{battle['id']}")).json()
    assert detail["participant_count"] == 2
    assert [m["prompt_text"] for m in detail["memes"]] == ["scream", "jump"]
    memes = (await client.get(f"/api/battles/{battle['id']}/memes")).json()
    assert [m["likes"] for m in memes] == [7, 1]
    assert (await client.get("/api/battles/4040")).status_code == 404


@pytest.mark.asyncio
async def test_user_battle_validation(client, register_login):
    headers, _ = await register_login()
    payload = _battle_payload()
    del payload["title"]
    assert (await client.post("/api/user-battles/create", headers=headers, json=payload)).status_code == 400

    start = datetime.now(timezone.utc)
    inverted = _battle_payload(date=start.isoformat(), end_date=start.isoformat())
    assert (await client.post("/api/user-battles/create", headers=headers, json=inverted)).status_code == 400

    r = await client.post("/api/user-battles/create", json=_battle_payload())
    assert r.status_code in (401, 403)


@pytest.mark.asyncio
async def test_user_battles_never_become_daily(client, register_login):
    headers, _ = await register_login()
    created = (await client.post("/api/user-battles/create", headers=headers, json=_battle_payload())).json()
    current = (await client.get("/api/daily-challenges/current")).json()
    assert current["id"] != created["id"]
    official = (await client.get("/api/daily-challenges")).json()
    assert created["id"] not in [c["id"] for c in official]
