from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from memevsmeme.models.meme import Meme
from memevsmeme.schemas.community import Achievement
from memevsmeme.services.clock import utcnow


@dataclass
class UserStats:
    total_memes: int = 0
    total_likes: int = 0
    total_views: int = 0
    battles_won: int = 0  # memes ranked first
    challenge_entries: int = 0


# (id, name, description, icon, tier, category, stat, threshold, tracks_progress)
_CATALOG = [
    ("create_first_meme", "Meme Apprentice", "Create your first meme", "Laugh", "bronze", "creation", "total_memes", 1, False),
    ("create_10_memes", "Meme Artisan", "Create 10 memes", "Laugh", "silver", "creation", "total_memes", 10, True),
    ("create_50_memes", "Meme Master", "Create 50 memes", "Laugh", "gold", "creation", "total_memes", 50, True),
    ("win_battle", "First Victory", "Win your first meme battle", "Trophy", "bronze", "battle", "battles_won", 1, False),
    ("win_5_battles", "Battle Veteran", "Win 5 meme battles", "Trophy", "silver", "battle", "battles_won", 5, True),
    ("get_10_likes", "Liked!", "Get 10 likes on your memes", "ThumbsUp", "bronze", "social", "total_likes", 10, False),
    ("get_100_likes", "Crowd Pleaser", "Get 100 likes on your memes", "ThumbsUp", "silver", "social", "total_likes", 100, True),
    ("daily_challenge_participation", "Challenge Accepted", "Participate in a daily challenge", "Award", "bronze", "special", "challenge_entries", 1, False),
    ("win_daily_challenge", "Daily Champion", "Win a daily challenge", "Award", "silver", "special", "battles_won", 1, False),
]


def stats_for(memes: list[Meme]) -> UserStats:
    return UserStats(
        total_memes=len(memes),
        total_likes=sum(m.likes or 0 for m in memes),
        total_views=sum(m.views or 0 for m in memes),
        battles_won=sum(1 for m in memes if m.rank == 1),
        challenge_entries=sum(1 for m in memes if m.daily_challenge_id),
    )


def evaluate(stats: UserStats, now: datetime | None = None) -> list[Achievement]:
    now = now or utcnow()
    out = []
    for (aid, name, desc, icon, tier, category, stat, threshold, tracks) in _CATALOG:
        value = getattr(stats, stat)
        earned = value >= threshold
        out.append(Achievement(
            id=aid, name=name, description=desc, icon=icon, tier=tier, category=category,
            earned=earned,
            # one-shot badges carry a date; tiered ones show progress instead
            date=now if earned and not tracks else None,
            progress=min(value, threshold) if tracks else None,
            max_progress=threshold if tracks else None,
        ))
    return out


async def achievements_for_user(session: AsyncSession, user_id: int) -> list[Achievement]:
    memes = list((await session.execute(select(Meme).where(Meme.user_id == user_id))).scalars().all())
    return evaluate(stats_for(memes))
