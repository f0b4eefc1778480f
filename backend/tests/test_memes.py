import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy import select

from memevsmeme.models.meme import Meme
from memevsmeme.routes import media as media_routes
from memevsmeme.services import storage
from test_media import image_bytes


@pytest.fixture
def fake_storage(monkeypatch):
    saved = {}

    def put_bytes(key, data, content_type):
        saved[key] = (data, content_type)
        return storage.media_url(key)

    def get_bytes(key):
        if key not in saved:
            raise FileNotFoundError(key)
        return saved[key]

    monkeypatch.setattr(storage, "put_bytes", put_bytes)
    monkeypatch.setattr(media_routes, "get_bytes", get_bytes)
    return saved


@pytest.mark.asyncio
async def test_upload_and_serve(client, register_login, fake_storage):
    headers, user = await register_login()
    png = image_bytes("PNG")
    r = await client.post(
        "/api/memes/upload",
        headers=headers,
        files={"image": ("meme.png", png, "image/png")},
        data={"prompt_text": "my upload"},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["prompt_text"] == "my upload"
    assert body["user_id"] == user["id"]
    assert body["image_url"].startswith("/api/media/uploads/meme-")

    served = await client.get(body["image_url"])
    assert served.status_code == 200
    assert served.content == png
    assert served.headers["content-type"] == "image/png"
    assert (await client.get("/api/media/uploads/missing.png")).status_code == 404


@pytest.mark.asyncio
async def test_upload_rejects_bad_files(client, fake_storage):
    r = await client.post("/api/memes/upload", files={"image": ("notes.txt", b"hello there", "text/plain")})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid file type, only JPEG, PNG and GIF is allowed!"

    # content type header is ignored; the bytes decide
    r = await client.post("/api/memes/upload", files={"image": ("fake.png", b"GIF89anope", "image/png")})
    assert r.status_code == 400
    assert fake_storage == {}


@pytest.mark.asyncio
async def test_anonymous_upload_to_challenge(client, session, fake_storage):
    await client.get("/api/seed/daily-challenges")
    current = (await client.get("/api/daily-challenges/current")).json()
    r = await client.post(
        "/api/memes/upload",
        files={"image": ("m.gif", image_bytes("GIF"), "image/gif")},
        data={"daily_challenge_id": str(current["id"])},
    )
    assert r.status_code == 201, r.text
    assert r.json()["user_id"] is None
    assert r.json()["prompt_text"] == "Uploaded meme"

    memes = (await client.get(f"/api/memes/challenge/{current['id']}")).json()
    assert len(memes) == 1
    assert memes[0]["username"] is None


@pytest.mark.asyncio
async def test_listing_trending_and_user_memes(client, session, register_login):
    _, user = await register_login()
    now = datetime.now(timezone.utc)
    session.add_all([
        Meme(prompt_text="old but loved", image_url="/1", likes=500, created_at=now - timedelta(days=2)),
        Meme(prompt_text="fresh", image_url="/2", likes=5, created_at=now - timedelta(hours=1), user_id=user["id"]),
        Meme(prompt_text="fresher", image_url="/3", likes=50, created_at=now - timedelta(minutes=5), user_id=user["id"]),
    ])
    await session.commit()

    everything = (await client.get("/api/memes")).json()
    assert [m["prompt_text"] for m in everything] == ["fresher", "fresh", "old but loved"]

    trending = (await client.get("/api/memes/trending")).json()
    assert [m["prompt_text"] for m in trending] == ["fresher", "fresh"]

    mine = (await client.get(f"/api/memes/user/{user['id']}")).json()
    assert [m["prompt_text"] for m in mine] == ["fresher", "fresh"]


@pytest.mark.asyncio
async def test_get_meme_counts_views(client, session):
    meme = Meme(prompt_text="watch me", image_url="/w")
    session.add(meme)
    await session.commit()

    first = await client.get(f"/api/memes/{meme.id}")
    assert first.status_code == 200
    assert first.json()["views"] == 1
    assert first.json()["username"] is None
    second = await client.get(f"/api/memes/{meme.id}")
    assert second.json()["views"] == 2
    assert (await client.get("/api/memes/31337")).status_code == 404

    views = await session.scalar(select(Meme.views).where(Meme.id == meme.id))
    assert views == 2


@pytest.mark.asyncio
async def test_comments(client, session, register_login):
    headers, user = await register_login()
    meme = Meme(prompt_text="discuss", image_url="/d")
    session.add(meme)
    await session.commit()

    r = await client.post(f"/api/memes/{meme.id}/comments", headers=headers, json={"text": "  first!  "})
    assert r.status_code == 201
    assert r.json()["text"] == "first!"
    assert r.json()["username"] == user["username"]

    r = await client.post(f"/api/memes/{meme.id}/comments", json={"text": "anon here"})
    assert r.status_code == 201
    assert r.json()["user_id"] is None

    assert (await client.post(f"/api/memes/{meme.id}/comments", json={"text": "   "})).status_code == 400
    assert (await client.post("/api/memes/9999/comments", json={"text": "hi"})).status_code == 404

    listed = (await client.get(f"/api/memes/{meme.id}/comments")).json()
    assert [c["text"] for c in listed] == ["anon here", "first!"]
    assert listed[1]["username"] == user["username"]
