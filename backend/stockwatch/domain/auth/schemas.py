from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class User(BaseModel):
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


class UserCredentials(User):
    email_normalized: str
    password_hash: str


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class SignUpData(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=8, max_length=128)
    full_name: str = Field(min_length=1, max_length=255)
    country: str | None = None
    investment_goals: str | None = None
    risk_tolerance: str | None = None
    preferred_industry: str | None = None


class AuthResult(BaseModel):
    success: bool
    user: User | None = None
    token: AccessToken | None = None
    error: str | None = None
