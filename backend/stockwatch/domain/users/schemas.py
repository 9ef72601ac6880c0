from __future__ import annotations

from pydantic import BaseModel


class UserSummary(BaseModel):
    id: str
    email: str
    name: str
    country: str | None = None
