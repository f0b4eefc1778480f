from __future__ import annotations
import secrets
from urllib.parse import quote

DICEBEAR_BASE = "https://api.dicebear.com/7.x"
DEFAULT_STYLE = "avataaars"

GRADIENTS = {
    "gradient-blue": ("a0c4ff", "3f83f8"),
    "gradient-pink": ("fda4af", "e11d48"),
    "gradient-purple": ("c084fc", "8b5cf6"),
    "gradient-orange": ("fdba74", "f97316"),
}
_GRADIENT_FALLBACK = ("a8a8a8", "e4e4e4")


def random_seed() -> str:
    return secrets.token_hex(6)


def avatar_url(seed: str, style: str = DEFAULT_STYLE, background_color: str | None = None) -> str:
    url = f"{DICEBEAR_BASE}/{quote(style, safe='')}/svg?seed={quote(seed, safe='')}"
    if not background_color:
        return url
    if background_color.startswith("gradient-"):
        start, end = GRADIENTS.get(background_color, _GRADIENT_FALLBACK)
        return (
            f"{url}&backgroundType=gradientLinear&backgroundColor={end}&backgroundRotation=135"
            f"&gradientColors[]={start}&gradientColors[]={end}"
        )
    return f"{url}&backgroundColor={quote(background_color, safe='')}"
