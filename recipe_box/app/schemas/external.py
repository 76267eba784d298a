# recipe_box/app/schemas/external.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ExternalRecipePayload(BaseModel):
    """Normalized TheMealDB recipe as sent back by the client when saving it."""

    id: str = Field(..., min_length=1)
    title: str = "Unknown Recipe"
    description: str = ""
    image_url: str = ""
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    cooking_time: int = 30
    category: str = "General"
    area: str = "International"
    source: str = "TheMealDB"
    external_id: Optional[str] = None
    youtube_url: Optional[str] = None
    source_url: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class ExternalRecipeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    image_url: str = ""
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    cooking_time: int = 30
    category: str = "General"
    area: str = "International"
    source: str = "TheMealDB"
    external_id: Optional[str] = None
    youtube_url: Optional[str] = None
    source_url: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    is_external: bool = True
    saved_at: Optional[datetime] = None
