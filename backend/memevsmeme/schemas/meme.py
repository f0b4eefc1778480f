from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal
from datetime import datetime

GenerationType = Literal["ai", "template", "upload"]


class MemePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    prompt_text: str
    image_url: str
    created_at: datetime
    user_id: int | None = None
    daily_challenge_id: int | None = None
    views: int = 0
    likes: int = 0
    rank: int = 0


class MemeWithCreator(MemePublic):
    # null for anonymous submissions
    username: str | None = None
    profile_image_url: str | None = None
    avatar_seed: str | None = None
    avatar_style: str | None = None


class MemeGenerateRequest(BaseModel):
    prompt_text: str = Field(min_length=1)
    daily_challenge_id: int | None = None
    template_id: int | None = None
    generation_type: GenerationType = "ai"
    style: str = "photo"


class MemeGenerateResponse(MemePublic):
    caption: str | None = None


class LikeResponse(BaseModel):
    success: bool = True
    meme: MemePublic


class LeaderboardEntry(MemePublic):
    win_rate: int
    battles_won: int
    battles_total: int
