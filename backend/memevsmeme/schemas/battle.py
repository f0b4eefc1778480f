from __future__ import annotations
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from datetime import datetime
from memevsmeme.schemas.meme import MemePublic

class BattlePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    meme_one_id: int
    meme_two_id: int
    winner_id: int | None = None
    created_at: datetime

class BattleWithMemes(BaseModel):
    battle: BattlePublic
    meme_one: MemePublic
    meme_two: MemePublic

class VoteCreate(BaseModel):
    # web client sends camelCase
    meme_id: int = Field(validation_alias=AliasChoices("meme_id", "memeId"))
    battle_id: int = Field(validation_alias=AliasChoices("battle_id", "battleId"))

class VotePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    meme_id: int
    battle_id: int
    user_id: int | None = None
    created_at: datetime

class VoteResponse(BaseModel):
    success: bool = True
    vote: VotePublic
