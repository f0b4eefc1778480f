import base64
import json
import httpx
import pytest

from memevsmeme.services.ai import GeminiClient, extract_style, get_gemini
from memevsmeme.main import app

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def _text(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _image(data=PNG_BYTES, mime="image/png"):
    return {"candidates": [{"content": {"parts": [
        {"text": "Here is your meme"},
        {"inlineData": {"mimeType": mime, "data": base64.b64encode(data).decode()}},
    ]}}]}


class FakeStore:
    def __init__(self):
        self.saved = {}

    def __call__(self, key, data, content_type):
        self.saved[key] = (data, content_type)
        return f"/api/media/{key}"


def _client(handler, store=None, api_key="test-key"):
    return GeminiClient(
        api_key,
        base_url="https://gemini.test/v1beta",
        text_model="text-model",
        image_model="image-model",
        transport=httpx.MockTransport(handler),
        store=store or FakeStore(),
    )


def test_extract_style():
    assert extract_style("cats doing taxes in cartoon style") == "cartoon"
    assert extract_style("cats doing taxes In Anime Style") == "anime"
    assert extract_style("cats doing taxes") == "photo"


@pytest.mark.asyncio
async def test_missing_key_reports_error_without_calling_out():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=_text("x"))

    gemini = _client(handler, api_key="")
    result = await gemini.generate_image("a meme in photo style")
    assert result.success is False
    assert result.error == "Gemini API key is required"
    assert await gemini.optimize_prompt("raw idea") == "raw idea"
    assert await gemini.generate_caption("raw idea") == ""
    assert calls == []


@pytest.mark.asyncio
async def test_generate_image_success_uses_optimized_prompt():
    seen = []

    def handler(request):
        body = json.loads(request.content)
        seen.append((request.url.path, request.url.params.get("key"), body))
        if "text-model" in request.url.path:
            return httpx.Response(200, json=_text("a detailed office scene"))
        return httpx.Response(200, json=_image())

    store = FakeStore()
    result = await _client(handler, store).generate_image("boss on a weekend in cartoon style")
    assert result.success is True
    assert result.image_url.startswith("/api/media/generated/meme-")
    assert result.image_url.endswith(".png")
    (key, (data, mime)), = store.saved.items()
    assert data == PNG_BYTES and mime == "image/png"

    text_call, image_call = seen
    assert text_call[0] == "/v1beta/models/text-model:generateContent"
    assert text_call[1] == "test-key"
    assert "cartoon style" in text_call[2]["contents"][0]["parts"][0]["text"]
    assert image_call[2]["contents"][0]["parts"][0]["text"] == "a detailed office scene"
    assert image_call[2]["generationConfig"]["responseModalities"] == ["TEXT", "IMAGE"]


@pytest.mark.asyncio
async def test_prompt_optimization_failure_falls_back_to_original():
    image_prompts = []

    def handler(request):
        if "text-model" in request.url.path:
            return httpx.Response(503, json={"error": "overloaded"})
        image_prompts.append(json.loads(request.content)["contents"][0]["parts"][0]["text"])
        return httpx.Response(200, json=_image())

    result = await _client(handler).generate_image("original idea")
    assert result.success is True
    assert image_prompts == ["original idea"]


@pytest.mark.asyncio
async def test_image_status_error_is_surfaced():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        if "text-model" in request.url.path:
            return httpx.Response(200, json=_text("better"))
        return httpx.Response(429, json={"error": "quota"})

    result = await _client(handler).generate_image("idea")
    assert result.success is False
    assert result.error == "Gemini API returned status 429"
    # not retried
    assert sum("image-model" in c for c in calls) == 1


@pytest.mark.asyncio
async def test_image_without_inline_data():
    def handler(request):
        return httpx.Response(200, json=_text("only words, sorry"))

    result = await _client(handler).generate_image("idea")
    assert result.success is False
    assert result.error == "No image data returned from Gemini API"


@pytest.mark.asyncio
async def test_transport_error_on_image_step():
    def handler(request):
        if "text-model" in request.url.path:
            return httpx.Response(200, json=_text("better"))
        raise httpx.ConnectError("connection refused", request=request)

    result = await _client(handler).generate_image("idea")
    assert result.success is False
    assert "connection refused" in result.error


@pytest.mark.asyncio
async def test_caption():
    def ok(request):
        return httpx.Response(200, json=_text("MONDAY AGAIN\nWHY IS IT ALWAYS MONDAY"))

    def broken(request):
        return httpx.Response(500)

    assert await _client(ok).generate_caption("mondays") == "MONDAY AGAIN\nWHY IS IT ALWAYS MONDAY"
    assert await _client(broken).generate_caption("mondays") == ""


@pytest.mark.asyncio
async def test_generate_route(client, register_login):
    headers, user = await register_login()

    def handler(request):
        if "image-model" in request.url.path:
            return httpx.Response(200, json=_image())
        return httpx.Response(200, json=_text("TOP\nBOTTOM"))

    app.dependency_overrides[get_gemini] = lambda: _client(handler)
    try:
        r = await client.post("/api/memes/generate", headers=headers, json={"prompt_text": "dogs at standup", "style": "pixel"})
        assert r.status_code == 201, r.text
        body = r.json()
        assert body["image_url"].startswith("/api/media/generated/")
        assert body["caption"] == "TOP\nBOTTOM"
        assert body["user_id"] == user["id"]
    finally:
        app.dependency_overrides.pop(get_gemini, None)


@pytest.mark.asyncio
async def test_generate_route_surfaces_upstream_error(client, register_login):
    headers, _ = await register_login()

    def handler(request):
        return httpx.Response(500, json={"error": "boom"})

    app.dependency_overrides[get_gemini] = lambda: _client(handler)
    try:
        r = await client.post("/api/memes/generate", headers=headers, json={"prompt_text": "dogs at standup"})
        assert r.status_code == 400
        assert r.json()["detail"] == "Gemini API returned status 500"
    finally:
        app.dependency_overrides.pop(get_gemini, None)


@pytest.mark.asyncio
async def test_generate_route_template_and_placeholder(client, register_login):
    headers, _ = await register_login()
    await client.get("/api/seed/templates")
    templates = (await client.get("/api/templates")).json()

    r = await client.post("/api/memes/generate", headers=headers, json={
        "prompt_text": "classic", "generation_type": "template", "template_id": templates[0]["id"],
    })
    assert r.status_code == 201
    assert r.json()["image_url"] == templates[0]["image_url"]

    r = await client.post("/api/memes/generate", headers=headers, json={
        "prompt_text": "no template", "generation_type": "template",
    })
    assert r.status_code == 201
    assert r.json()["image_url"].startswith("https://i.imgflip.com/")

    r = await client.post("/api/memes/generate", headers=headers, json={
        "prompt_text": "orphan", "generation_type": "upload", "daily_challenge_id": 9999,
    })
    assert r.status_code == 404
