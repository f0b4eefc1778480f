from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal
from datetime import datetime

class CommentCreate(BaseModel):
    text: str = Field(min_length=1, max_length=2000)

class CommentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    meme_id: int
    user_id: int | None = None
    text: str
    created_at: datetime
    username: str | None = None
    profile_image_url: str | None = None
    avatar_seed: str | None = None
    avatar_style: str | None = None

class TemplatePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    image_url: str
    type: Literal["template", "reaction"]

class Achievement(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    earned: bool
    tier: Literal["bronze", "silver", "gold"]
    category: Literal["creation", "battle", "social", "special"]
    date: datetime | None = None
    progress: int | None = None
    max_progress: int | None = None
