from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from memevsmeme.db import get_session
from memevsmeme.models.user import User
from memevsmeme.schemas.community import Achievement, TemplatePublic
from memevsmeme.services.achievements import achievements_for_user
from memevsmeme.services.catalog import list_templates, seed_templates
from memevsmeme.services.challenges import seed_daily_challenges

router = APIRouter(prefix="/api", tags=["community"])

@router.get("/templates", response_model=list[TemplatePublic])
async def templates(session: AsyncSession = Depends(get_session)):
    return [TemplatePublic.model_validate(t) for t in await list_templates(session)]

@router.get("/seed/templates")
async def seed_template_catalog(session: AsyncSession = Depends(get_session)):
    return {"seeded": await seed_templates(session)}

@router.get("/seed/daily-challenges")
async def seed_challenges(session: AsyncSession = Depends(get_session)):
    return {"seeded": await seed_daily_challenges(session)}

@router.get("/achievements/{user_id}", response_model=list[Achievement])
async def achievements(user_id: int, session: AsyncSession = Depends(get_session)):
    if not await session.get(User, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return await achievements_for_user(session, user_id)
