from __future__ import annotations
import random
import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from memevsmeme.models.meme import Meme
from memevsmeme.models.template import Template

log = structlog.get_logger()

PLACEHOLDER_IMAGES = [
    "https://i.imgflip.com/65tesb.jpg",
    "https://i.imgflip.com/56q38k.jpg",
    "https://i.imgflip.com/4fh0ct.jpg",
    "https://i.imgflip.com/29v4rt.jpg",
    "https://i.imgflip.com/30b1gx.jpg",
    "https://i.imgflip.com/24y43o.jpg",
    "https://i.imgflip.com/1jwhww.jpg",
    "https://i.imgflip.com/2kbn1e.jpg",
]

MEME_TEMPLATES = [
    ("Distracted Boyfriend", "https://i.imgflip.com/1ur9b0.jpg", "template"),
    ("Two Buttons", "https://i.imgflip.com/1g8my4.jpg", "template"),
    ("Drake Hotline Bling", "https://i.imgflip.com/30b1gx.jpg", "template"),
    ("Change My Mind", "https://i.imgflip.com/24y43o.jpg", "template"),
    ("Expanding Brain", "https://i.imgflip.com/1jwhww.jpg", "template"),
    ("Surprised Pikachu", "https://i.imgflip.com/2kbn1e.jpg", "template"),
    ("Shocked Face", "https://i.imgflip.com/65tesb.jpg", "reaction"),
    ("Confused Math Lady", "https://i.imgflip.com/56q38k.jpg", "reaction"),
    ("Thinking Face", "https://i.imgflip.com/4fh0ct.jpg", "reaction"),
    ("Confused Nick Young", "https://i.imgflip.com/29v4rt.jpg", "reaction"),
]

# (prompt, image, views, likes)
DEMO_MEMES = [
    ("When the boss says we need to work this weekend", "https://i.imgflip.com/65tesb.jpg", 1200, 342),
    ("When they ask if you know how to fix the printer", "https://i.imgflip.com/56q38k.jpg", 987, 256),
    ("When someone actually uses your code in production", "https://i.imgflip.com/4fh0ct.jpg", 854, 128),
    ("Me looking at new frameworks while my current project isn't finished", "https://i.imgflip.com/29v4rt.jpg", 562, 98),
]


def random_placeholder_image() -> str:
    return random.choice(PLACEHOLDER_IMAGES)


async def list_templates(session: AsyncSession) -> list[Template]:
    return list((await session.execute(select(Template).order_by(Template.id))).scalars().all())


async def seed_templates(session: AsyncSession) -> int:
    if await session.scalar(select(func.count()).select_from(Template)):
        return 0
    for name, url, kind in MEME_TEMPLATES:
        session.add(Template(name=name, image_url=url, type=kind))
    await session.commit()
    log.info("templates_seeded", count=len(MEME_TEMPLATES))
    return len(MEME_TEMPLATES)


async def seed_demo_memes(session: AsyncSession) -> int:
    if await session.scalar(select(func.count()).select_from(Meme)):
        return 0
    for prompt, url, views, likes in DEMO_MEMES:
        session.add(Meme(prompt_text=prompt, image_url=url, views=views, likes=likes))
    await session.commit()
    log.info("demo_memes_seeded", count=len(DEMO_MEMES))
    return len(DEMO_MEMES)
