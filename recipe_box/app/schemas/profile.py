# recipe_box/app/schemas/profile.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(default=None, max_length=60)
    bio: Optional[str] = Field(default=None, max_length=500)
    profile_image_url: Optional[str] = None
