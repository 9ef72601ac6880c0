from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=8, max_length=128)
    full_name: str = Field(min_length=1, max_length=255)
    country: str | None = Field(default=None, max_length=64)
    investment_goals: str | None = Field(default=None, max_length=255)
    risk_tolerance: str | None = Field(default=None, max_length=64)
    preferred_industry: str | None = Field(default=None, max_length=255)


class SignInRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=8, max_length=128)


class AccessTokenOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    access_token: str
    token_type: str
    expires_in: int


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    country: str | None = None
    investment_goals: str | None = None
    risk_tolerance: str | None = None
    preferred_industry: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None


class SignOutOut(BaseModel):
    success: bool
