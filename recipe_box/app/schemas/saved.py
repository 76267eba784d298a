# recipe_box/app/schemas/saved.py
from __future__ import annotations

from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, Field

from recipe_box.app.domain.models import ExternalRecipe, SavedItem
from recipe_box.app.schemas.external import ExternalRecipeResponse
from recipe_box.app.schemas.recipes import RecipeResponse

SavedSourceName = Literal["local", "external"]


class SavedItemResponse(BaseModel):
    id: str
    source: SavedSourceName
    saved_at: datetime
    # Local recipes are tried first; external ones fail it for lack of user_id
    recipe: Union[RecipeResponse, ExternalRecipeResponse] = Field(union_mode="left_to_right")

    @classmethod
    def from_item(cls, item: SavedItem) -> "SavedItemResponse":
        if isinstance(item.recipe, ExternalRecipe):
            recipe: Union[RecipeResponse, ExternalRecipeResponse] = ExternalRecipeResponse.model_validate(item.recipe)
        else:
            recipe = RecipeResponse.model_validate(item.recipe)
        return cls(id=item.id, source=item.source.value, saved_at=item.saved_at, recipe=recipe)


class SaveResult(BaseModel):
    saved: bool


class UnsaveResult(BaseModel):
    removed: bool


class SavedIdsResponse(BaseModel):
    ids: list[str] = Field(default_factory=list)
