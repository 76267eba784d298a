# recipe_box/app/schemas/search.py
from __future__ import annotations

from pydantic import BaseModel, Field

from recipe_box.app.domain.models import SearchResults
from recipe_box.app.schemas.external import ExternalRecipeResponse
from recipe_box.app.schemas.recipes import RecipeResponse


class SearchResponse(BaseModel):
    local: list[RecipeResponse] = Field(default_factory=list)
    external: list[ExternalRecipeResponse] = Field(default_factory=list)

    @classmethod
    def from_results(cls, results: SearchResults) -> "SearchResponse":
        return cls(
            local=[RecipeResponse.model_validate(r) for r in results.local],
            external=[ExternalRecipeResponse.model_validate(r) for r in results.external],
        )


class CategoriesResponse(BaseModel):
    categories: list[str] = Field(default_factory=list)
