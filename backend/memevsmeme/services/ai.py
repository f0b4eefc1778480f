from __future__ import annotations
import base64
import re
from dataclasses import dataclass
from typing import Any, Callable
import httpx
import structlog
from starlette.concurrency import run_in_threadpool

from memevsmeme.config import settings
from memevsmeme.services.media import new_object_key
from memevsmeme.services.storage import put_bytes

log = structlog.get_logger()

_STYLE_RE = re.compile(r"in\s+(\w+)\s+style", re.IGNORECASE)

OPTIMIZE_TEMPLATE = """
I need to create a visually engaging and funny meme image, and I need your help crafting the perfect image prompt.

Here's the user's original idea: "{prompt}"

Please create an enhanced, detailed image generation prompt that will produce a high-quality, amusing meme image in {style} style.

Your prompt should:
- Include detailed visual elements and specific objects
- Describe expressions, poses, and emotions if people are involved
- Mention composition, lighting, and visual style
- Keep the spirit of the original concept
- Be suitable for a meme (humorous content)
- Not include text overlay (that will be added separately)

Write ONLY the improved prompt text with no other explanations.
"""

CAPTION_TEMPLATE = """
Create a funny meme caption based on this prompt: "{prompt}"

Give me:
1. A short top text (1-5 words)
2. A punchy bottom text (1-7 words)

Format your response as two lines of text only, separated by a newline.
Don't add any explanations or formatting.
"""


@dataclass
class GenerationResult:
    success: bool
    image_url: str | None = None
    error: str | None = None


def extract_style(prompt: str, default: str = "photo") -> str:
    m = _STYLE_RE.search(prompt)
    return m.group(1).lower() if m else default


def _first_text(data: dict[str, Any]) -> str:
    parts = ((data.get("candidates") or [{}])[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()


def _first_image(data: dict[str, Any]) -> tuple[bytes, str] | None:
    parts = ((data.get("candidates") or [{}])[0].get("content") or {}).get("parts") or []
    for part in parts:
        inline = part.get("inlineData") or part.get("inline_data") or {}
        mime = inline.get("mimeType") or inline.get("mime_type") or ""
        if mime.startswith("image/") and inline.get("data"):
            return base64.b64decode(inline["data"]), mime
    return None


class GeminiClient:
    """
    Two-step meme image generation against the Gemini REST API:
    optimize the user's prompt with the text model, then render it with the
    image model. Only prompt optimization degrades gracefully; an image
    failure is reported back to the caller, never retried.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        text_model: str | None = None,
        image_model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        store: Callable[[str, bytes, str], str] = put_bytes,
    ):
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.text_model = text_model or settings.gemini_text_model
        self.image_model = image_model or settings.gemini_image_model
        self.timeout = timeout or settings.gemini_timeout_seconds
        self._transport = transport
        self._store = store

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _generate(self, model: str, body: dict[str, Any]) -> httpx.Response:
        url = f"{self.base_url}/models/{model}:generateContent"
        async with self._client() as client:
            return await client.post(url, params={"key": self.api_key}, json=body)

    @staticmethod
    def _user_content(text: str) -> list[dict[str, Any]]:
        return [{"role": "user", "parts": [{"text": text}]}]

    async def optimize_prompt(self, prompt: str, style: str = "photo") -> str:
        if not self.api_key:
            log.warning("gemini_key_missing", step="optimize_prompt")
            return prompt
        body = {"contents": self._user_content(OPTIMIZE_TEMPLATE.format(prompt=prompt, style=style))}
        try:
            resp = await self._generate(self.text_model, body)
            resp.raise_for_status()
            enhanced = _first_text(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            log.warning("gemini_prompt_fallback", error=str(e))
            return prompt
        if not enhanced:
            log.warning("gemini_prompt_fallback", error="empty response")
            return prompt
        log.info("gemini_prompt_optimized", original=prompt, optimized=enhanced)
        return enhanced

    async def generate_image(self, prompt: str) -> GenerationResult:
        if not self.api_key:
            log.error("gemini_key_missing", step="generate_image")
            return GenerationResult(success=False, error="Gemini API key is required")

        optimized = await self.optimize_prompt(prompt, extract_style(prompt))
        body = {
            "contents": self._user_content(optimized),
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }
        try:
            resp = await self._generate(self.image_model, body)
        except httpx.HTTPError as e:
            log.error("gemini_image_request_failed", error=str(e))
            return GenerationResult(success=False, error=str(e) or "Unknown error occurred")

        if resp.is_error:
            log.error("gemini_image_status", status=resp.status_code, body=resp.text[:500])
            return GenerationResult(success=False, error=f"Gemini API returned status {resp.status_code}")

        try:
            image = _first_image(resp.json())
        except ValueError as e:
            log.error("gemini_image_bad_payload", error=str(e))
            return GenerationResult(success=False, error="Invalid response from Gemini API")
        if image is None:
            log.warning("gemini_image_missing")
            return GenerationResult(success=False, error="No image data returned from Gemini API")

        data, mime = image
        key = new_object_key("generated", mime)
        url = await run_in_threadpool(self._store, key, data, mime)
        log.info("gemini_image_saved", key=key, bytes=len(data))
        return GenerationResult(success=True, image_url=url)

    async def generate_caption(self, prompt: str) -> str:
        if not self.api_key:
            return ""
        body = {
            "contents": self._user_content(CAPTION_TEMPLATE.format(prompt=prompt)),
            "generationConfig": {"temperature": 0.9, "topP": 0.95, "topK": 32, "responseMimeType": "text/plain"},
        }
        try:
            resp = await self._generate(self.text_model, body)
            resp.raise_for_status()
            return _first_text(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            log.warning("gemini_caption_failed", error=str(e))
            return ""


def get_gemini() -> GeminiClient:
    return GeminiClient()
