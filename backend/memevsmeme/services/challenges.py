from __future__ import annotations
from datetime import datetime, timedelta
from typing import Any, Literal
import structlog
from sqlalchemy import select, func, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from memevsmeme.config import settings
from memevsmeme.errors import ChallengeClosed, ChallengeNotFound, IncompleteSubmission
from memevsmeme.models.challenge import Challenge
from memevsmeme.models.meme import Meme
from memevsmeme.models.user import User
from memevsmeme.schemas.challenge import ChallengeCreate, ChallengePublic, ChallengeWithMemes
from memevsmeme.schemas.meme import MemeWithCreator
from memevsmeme.services.clock import as_utc, day_key, utcnow
from memevsmeme.services.daily_prompts import resolve_prompt

log = structlog.get_logger()

MemeOrder = Literal["likes", "created"]


# --- store ---

async def get_challenge(session: AsyncSession, challenge_id: int) -> Challenge | None:
    return await session.get(Challenge, challenge_id)


async def create_challenge(session: AsyncSession, **fields: Any) -> Challenge:
    if not fields.get("is_user_created") and fields.get("day_key") is None:
        fields["day_key"] = day_key(fields["date"])
    ch = Challenge(**fields)
    session.add(ch)
    await session.commit()
    return ch


async def update_challenge(session: AsyncSession, challenge_id: int, **fields: Any) -> Challenge | None:
    ch = await session.get(Challenge, challenge_id)
    if not ch:
        return None
    for key, value in fields.items():
        setattr(ch, key, value)
    if "date" in fields or "is_user_created" in fields:
        ch.day_key = None if ch.is_user_created else day_key(ch.date)
    await session.commit()
    return ch


async def list_official_challenges(session: AsyncSession) -> list[Challenge]:
    q = select(Challenge).where(Challenge.is_user_created.is_(False)).order_by(Challenge.date.desc())
    return list((await session.execute(q)).scalars().all())


async def _participant_counts(session: AsyncSession, challenge_ids: list[int]) -> dict[int, int]:
    if not challenge_ids:
        return {}
    rows = (await session.execute(
        select(Meme.daily_challenge_id, func.count(Meme.id))
        .where(Meme.daily_challenge_id.in_(challenge_ids))
        .group_by(Meme.daily_challenge_id)
    )).all()
    return {cid: int(n) for (cid, n) in rows}


async def list_user_battles(session: AsyncSession) -> list[ChallengePublic]:
    q = select(Challenge).where(Challenge.is_user_created.is_(True)).order_by(Challenge.date.desc())
    rows = list((await session.execute(q)).scalars().all())
    if not rows:
        log.info("user_battles_empty_seeding_sample")
        sample = await seed_sample_user_battle(session)
        rows = [sample]
    counts = await _participant_counts(session, [c.id for c in rows])
    out = []
    for c in rows:
        pub = ChallengePublic.model_validate(c)
        pub.participant_count = counts.get(c.id, 0)
        out.append(pub)
    return out


async def seed_sample_user_battle(session: AsyncSession, now: datetime | None = None) -> Challenge:
    now = now or utcnow()
    prompt = "When AI starts finishing your sentences before you do"
    return await create_challenge(
        session,
        prompt_id="UB-SAMPLE",
        prompt_text=prompt,
        title=prompt,
        description="Share your funniest AI interaction memes!",
        category="Technology",
        date=now,
        end_date=now + timedelta(days=7),
        is_active=True,
        is_user_created=True,
        max_submissions=settings.default_max_submissions,
        visibility="public",
    )


def user_challenge_prompt_id(now: datetime | None = None) -> str:
    # UC = user challenge; last six digits of epoch millis
    millis = int((now or utcnow()).timestamp() * 1000)
    return f"UC{str(millis)[-6:]}"


async def create_user_challenge(
    session: AsyncSession, user_id: int, payload: ChallengeCreate, prompt_id: str | None = None
) -> Challenge:
    return await create_challenge(
        session,
        prompt_id=prompt_id or user_challenge_prompt_id(),
        title=payload.title or payload.prompt_text[:50],
        prompt_text=payload.prompt_text,
        description=payload.description or "",
        category=payload.category or "community",
        date=payload.date,
        end_date=payload.end_date,
        max_submissions=payload.max_submissions or settings.default_max_submissions,
        style=payload.style or "",
        visibility=payload.visibility or "public",
        is_active=True,
        user_id=user_id,
        is_user_created=True,
    )


async def submit_meme(
    session: AsyncSession,
    challenge_id: int,
    user_id: int | None,
    prompt_text: str | None,
    image_url: str | None,
    now: datetime | None = None,
) -> Meme:
    """Enter a meme into a challenge. Checked in order: exists, still open, fields present."""
    ch = await session.get(Challenge, challenge_id)
    if not ch:
        raise ChallengeNotFound(challenge_id)
    if not ch.is_active or as_utc(ch.end_date) < (now or utcnow()):
        raise ChallengeClosed(challenge_id)
    if not (prompt_text or "").strip() or not (image_url or "").strip():
        raise IncompleteSubmission("Prompt text and image URL are required")
    meme = Meme(prompt_text=prompt_text, image_url=image_url, user_id=user_id, daily_challenge_id=ch.id)
    session.add(meme)
    await session.commit()
    log.info("challenge_submission", challenge_id=ch.id, meme_id=meme.id, user_id=user_id)
    return meme


async def seed_daily_challenges(session: AsyncSession, now: datetime | None = None) -> int:
    """Insert the historic P001-P005 prompts plus one for today. No-op when any challenge exists."""
    existing = await session.scalar(select(func.count()).select_from(Challenge))
    if existing:
        return 0
    now = now or utcnow()
    historic = [
        ("P001", "When your AI therapist starts overanalyzing your binary emotions", "Tech/AI", "2025-05-17"),
        ("P002", "Me trying to explain 'vibe check' to my robot coworker in 2025", "Work Life", "2025-05-18"),
        ("P003", "When you finally get revenge and the group chat is hyping you up", "Relatable Humor", "2025-05-19"),
        ("P004", "POV: You're waiting for the Nintendo Switch 2 to drop but it's sold out", "Gaming", "2025-05-20"),
        ("P005", "When your boss schedules a 7 AM Zoom but you're still in pajama mode", "Work Life", "2025-05-21"),
    ]
    for prompt_id, text, category, day in historic:
        start = as_utc(datetime.fromisoformat(day))
        session.add(Challenge(
            prompt_id=prompt_id, prompt_text=text, category=category,
            date=start, end_date=start + timedelta(days=1), is_active=True,
            is_user_created=False, day_key=day,
        ))
    session.add(Challenge(
        prompt_id="CURRENT",
        prompt_text="When you say skibidi too much and the internet memes take over",
        category="Internet Trends",
        date=now, end_date=now + timedelta(days=1), is_active=True,
        is_user_created=False, day_key=day_key(now),
    ))
    await session.commit()
    log.info("daily_challenges_seeded", count=len(historic) + 1)
    return len(historic) + 1


# --- resolver ---

async def _find_current_official(session: AsyncSession, now: datetime) -> Challenge | None:
    return await session.scalar(
        select(Challenge)
        .where(
            Challenge.is_active.is_(True),
            Challenge.end_date >= now,
            Challenge.is_user_created.is_(False),
        )
        .order_by(Challenge.date.desc())
        .limit(1)
    )


async def _release_stale_day(session: AsyncSession, today: str, now: datetime) -> int:
    """Clear `day_key` on today's official rows that are deactivated or already expired."""
    result = await session.execute(
        update(Challenge)
        .where(
            Challenge.day_key == today,
            Challenge.is_user_created.is_(False),
            or_(Challenge.is_active.is_(False), Challenge.end_date < now),
        )
        .values(day_key=None)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return result.rowcount or 0


async def _insert_for_day(session: AsyncSession, fields: dict[str, Any], today: str, now: datetime) -> Challenge | None:
    released = False
    while True:
        try:
            ch = await create_challenge(session, **fields)
        except IntegrityError:
            await session.rollback()
        else:
            log.info("daily_challenge_created", challenge_id=ch.id, prompt_id=ch.prompt_id, day=today)
            return ch
        existing = await _find_current_official(session, now)
        if existing or released:
            log.info("daily_challenge_rollover_race", day=today, found=existing is not None)
            return existing
        # the day is held by a row that is no longer live; free it and insert once more
        count = await _release_stale_day(session, today, now)
        log.info("daily_challenge_stale_day_released", day=today, released=count)
        released = True


async def create_daily_prompt_challenge(session: AsyncSession, now: datetime | None = None) -> Challenge | None:
    """
    Create today's official challenge from the prompt table.

    The unique (day_key, official) index turns a concurrent rollover into an
    IntegrityError; the loser rolls back and re-reads instead of inserting a
    duplicate. When the row holding today's key is deactivated or expired
    (durations under 24h), its key is released and the insert retried once.
    Returns None when nothing usable could be produced.
    """
    now = now or utcnow()
    today = day_key(now)
    prompt = resolve_prompt(today)
    if prompt.date != today:
        log.info("daily_prompt_missing_using_default", day=today, prompt_id=prompt.prompt_id)
    fields = dict(
        prompt_id=prompt.prompt_id,
        prompt_text=prompt.prompt_text,
        title=prompt.prompt_text,
        description=f"Today's challenge: {prompt.prompt_text}",
        category=prompt.category,
        date=now,
        end_date=now + timedelta(hours=settings.challenge_duration_hours),
        is_active=True,
        is_user_created=False,
        max_submissions=settings.default_max_submissions,
        visibility="public",
        day_key=today,
    )
    try:
        return await _insert_for_day(session, fields, today, now)
    except SQLAlchemyError as e:
        await session.rollback()
        log.error("daily_challenge_create_failed", day=today, error=str(e))
        return None


async def get_current_daily_challenge(session: AsyncSession, now: datetime | None = None) -> Challenge | None:
    now = now or utcnow()
    try:
        existing = await _find_current_official(session, now)
    except SQLAlchemyError as e:
        await session.rollback()
        log.error("current_daily_challenge_lookup_failed", error=str(e))
        existing = None
    if existing:
        return existing
    return await create_daily_prompt_challenge(session, now)


# --- aggregator ---

def format_time_remaining(end_date: datetime, now: datetime) -> str:
    end_date, now = as_utc(end_date), as_utc(now)
    if end_date <= now:
        return "Ended"
    diff = int((end_date - now).total_seconds())
    hours, rem = divmod(diff, 3600)
    return f"{hours}h {rem // 60}m"


def meme_with_creator_query():
    return (
        select(Meme, User.username, User.profile_image_url, User.avatar_seed, User.avatar_style)
        .outerjoin(User, User.id == Meme.user_id)
    )


def to_meme_with_creator(row) -> MemeWithCreator:
    meme, username, profile_image_url, avatar_seed, avatar_style = row
    out = MemeWithCreator.model_validate(meme)
    out.username = username
    out.profile_image_url = profile_image_url
    out.avatar_seed = avatar_seed
    out.avatar_style = avatar_style
    return out


async def list_challenge_memes(
    session: AsyncSession, challenge_id: int, order: MemeOrder = "likes"
) -> list[MemeWithCreator]:
    q = meme_with_creator_query().where(Meme.daily_challenge_id == challenge_id)
    if order == "likes":
        q = q.order_by(Meme.likes.desc(), Meme.id.asc())
    else:
        q = q.order_by(Meme.created_at.asc(), Meme.id.asc())
    rows = (await session.execute(q)).all()
    return [to_meme_with_creator(r) for r in rows]


async def get_challenge_with_memes(
    session: AsyncSession, challenge_id: int, now: datetime | None = None
) -> ChallengeWithMemes | None:
    ch = await session.get(Challenge, challenge_id)
    if not ch:
        return None
    memes = await list_challenge_memes(session, challenge_id, order="likes")
    base = ChallengePublic.model_validate(ch).model_dump(exclude={"participant_count"})
    return ChallengeWithMemes(
        **base,
        memes=memes,
        participant_count=len(memes),
        time_remaining=format_time_remaining(ch.end_date, now or utcnow()),
    )
