# recipe_box/app/schemas/recipes.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RecipeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    image_url: str = ""
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    cooking_time: int = Field(default=0, ge=0)
    is_public: bool = True


class RecipeUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = None
    ingredients: Optional[list[str]] = None
    steps: Optional[list[str]] = None
    cooking_time: Optional[int] = Field(default=None, ge=0)
    is_public: Optional[bool] = None


class RecipeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    description: str = ""
    image_url: str = ""
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    cooking_time: int = 0
    is_public: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    saved_at: Optional[datetime] = None


class RecipeCount(BaseModel):
    count: int


class ImageUploadResponse(BaseModel):
    url: str
