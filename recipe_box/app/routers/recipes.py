# recipe_box/app/routers/recipes.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from recipe_box.app.deps import (
    get_current_user,
    get_image_uploader,
    get_profile_service,
    get_recipe_service,
)
from recipe_box.app.domain.models import Identity
from recipe_box.app.routers.uploads import extension_from
from recipe_box.app.schemas.recipes import (
    ImageUploadResponse,
    RecipeCount,
    RecipeCreate,
    RecipeResponse,
    RecipeUpdate,
)
from recipe_box.app.services.image_upload_service import ImageKind, ImageUploadService
from recipe_box.app.services.profile_service import ProfileService, resolve_username
from recipe_box.app.services.recipe_service import DEFAULT_FEED_LIMIT, RecipeService

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    payload: RecipeCreate,
    user: Identity = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
    profiles: ProfileService = Depends(get_profile_service),
) -> RecipeResponse:
    # recipes.user_id references user_profiles, so the profile must exist first
    await profiles.ensure_profile(user, resolve_username(user))
    recipe = await recipes.create(user.id, payload.model_dump())
    return RecipeResponse.model_validate(recipe)


@router.get("", response_model=list[RecipeResponse])
async def list_recipes(
    q: Optional[str] = Query(default=None),
    limit: int = Query(default=DEFAULT_FEED_LIMIT, ge=1, le=100),
    user: Identity = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
) -> list[RecipeResponse]:
    if q is not None and q.strip():
        found = await recipes.search(q)
    else:
        found = await recipes.list_public(limit)
    return [RecipeResponse.model_validate(r) for r in found]


@router.get("/mine", response_model=list[RecipeResponse])
async def list_my_recipes(
    user: Identity = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
) -> list[RecipeResponse]:
    return [RecipeResponse.model_validate(r) for r in await recipes.list_by_owner(user.id)]


@router.get("/mine/count", response_model=RecipeCount)
async def count_my_recipes(
    user: Identity = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
) -> RecipeCount:
    return RecipeCount(count=await recipes.count_by_owner(user.id))


@router.put("/image", response_model=ImageUploadResponse)
async def upload_recipe_image(
    request: Request,
    user: Identity = Depends(get_current_user),
    uploader: ImageUploadService = Depends(get_image_uploader),
) -> ImageUploadResponse:
    data = await request.body()
    url = await uploader.upload_or_placeholder(ImageKind.RECIPE, user.id, data, extension_from(request))
    return ImageUploadResponse(url=url)


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: str,
    user: Identity = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    return RecipeResponse.model_validate(await recipes.get_by_id(recipe_id))


@router.patch("/{recipe_id}", response_model=RecipeResponse)
async def update_recipe(
    recipe_id: str,
    payload: RecipeUpdate,
    user: Identity = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    await recipes.update(recipe_id, user.id, payload.model_dump(exclude_unset=True))
    return RecipeResponse.model_validate(await recipes.get_by_id(recipe_id))


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: str,
    user: Identity = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
) -> Response:
    await recipes.delete(recipe_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
