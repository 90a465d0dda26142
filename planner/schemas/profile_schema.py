# planner/schemas/profile_schema.py
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    created_at: datetime


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    avatar_url: str | None = None
