from __future__ import annotations
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from datetime import datetime

class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=128)
    confirm_password: str = Field(min_length=6, max_length=128)
    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    avatar_seed: str | None = None
    avatar_style: str | None = None
    avatar_background_color: str | None = None

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

class LoginRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)

class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    avatar_seed: str | None = None
    avatar_style: str | None = None
    avatar_background_color: str | None = None
    created_at: datetime

class TokenPair(BaseModel):
    access: str
    refresh: str

class ProfileUpdate(BaseModel):
    username: str | None = Field(default=None, min_length=3, max_length=50)
    first_name: str | None = None
    last_name: str | None = None
    avatar_seed: str | None = None
    avatar_style: str | None = None
    avatar_background_color: str | None = None

class AvatarRequest(BaseModel):
    seed: str | None = None
    style: str = "avataaars"
    background_color: str | None = None

class AvatarResponse(BaseModel):
    avatar_url: str
    seed: str
    style: str
    background_color: str | None = None
