from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Literal
from datetime import datetime
from memevsmeme.schemas.meme import MemeWithCreator
from memevsmeme.services.clock import as_utc

Visibility = Literal["public", "private"]

class ChallengePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    prompt_id: str
    title: str | None = None
    prompt_text: str
    description: str | None = None
    category: str
    date: datetime
    end_date: datetime
    is_active: bool
    max_submissions: int
    style: str | None = None
    visibility: str
    user_id: int | None = None
    is_user_created: bool
    created_at: datetime
    participant_count: int | None = None

class ChallengeWithMemes(ChallengePublic):
    memes: list[MemeWithCreator]
    participant_count: int
    time_remaining: str

class ChallengeCreate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    prompt_text: str = Field(min_length=1)
    description: str | None = None
    category: str | None = None
    date: datetime
    end_date: datetime
    max_submissions: int | None = Field(default=None, ge=1)
    style: str | None = None
    visibility: Visibility | None = None

    @field_validator("date", "end_date")
    @classmethod
    def to_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date <= self.date:
            raise ValueError("end_date must be after date")
        return self

class UserBattleCreate(ChallengeCreate):
    title: str = Field(min_length=1, max_length=200)
    prompt_id: str | None = Field(default=None, max_length=32)

class ChallengeSubmission(BaseModel):
    prompt_text: str | None = None
    image_url: str | None = None
