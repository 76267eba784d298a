# recipe_box/app/routers/saved.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from recipe_box.app.deps import get_current_user, get_saved_recipes_service
from recipe_box.app.domain.models import ExternalRecipe, Identity
from recipe_box.app.schemas.external import ExternalRecipePayload
from recipe_box.app.schemas.saved import (
    SavedIdsResponse,
    SavedItemResponse,
    SaveResult,
    UnsaveResult,
)
from recipe_box.app.services.saved_recipes_service import SavedRecipesService

router = APIRouter(prefix="/saved", tags=["saved"])


@router.get("", response_model=list[SavedItemResponse])
async def list_saved(
    user: Identity = Depends(get_current_user),
    saved: SavedRecipesService = Depends(get_saved_recipes_service),
) -> list[SavedItemResponse]:
    return [SavedItemResponse.from_item(item) for item in await saved.list_saved(user.id)]


@router.get("/ids", response_model=SavedIdsResponse)
async def list_saved_ids(
    user: Identity = Depends(get_current_user),
    saved: SavedRecipesService = Depends(get_saved_recipes_service),
) -> SavedIdsResponse:
    return SavedIdsResponse(ids=sorted(await saved.saved_ids(user.id)))


@router.put("/local/{recipe_id}", response_model=SaveResult)
async def save_local(
    recipe_id: str,
    user: Identity = Depends(get_current_user),
    saved: SavedRecipesService = Depends(get_saved_recipes_service),
) -> SaveResult:
    return SaveResult(saved=await saved.save_local(user.id, recipe_id))


@router.delete("/local/{recipe_id}", response_model=UnsaveResult)
async def unsave_local(
    recipe_id: str,
    user: Identity = Depends(get_current_user),
    saved: SavedRecipesService = Depends(get_saved_recipes_service),
) -> UnsaveResult:
    return UnsaveResult(removed=await saved.unsave_local(user.id, recipe_id))


@router.post("/external", response_model=SaveResult)
async def save_external(
    payload: ExternalRecipePayload,
    user: Identity = Depends(get_current_user),
    saved: SavedRecipesService = Depends(get_saved_recipes_service),
) -> SaveResult:
    recipe = ExternalRecipe(**payload.model_dump())
    return SaveResult(saved=await saved.save_external(user.id, recipe))


@router.delete("/external/{external_recipe_id}", response_model=UnsaveResult)
async def unsave_external(
    external_recipe_id: str,
    user: Identity = Depends(get_current_user),
    saved: SavedRecipesService = Depends(get_saved_recipes_service),
) -> UnsaveResult:
    return UnsaveResult(removed=await saved.unsave_external(user.id, external_recipe_id))
