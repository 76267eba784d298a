# recipe_box/app/routers/search.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from recipe_box.app.deps import get_current_user, get_search_service
from recipe_box.app.domain.models import Identity
from recipe_box.app.schemas.external import ExternalRecipeResponse
from recipe_box.app.schemas.search import CategoriesResponse, SearchResponse
from recipe_box.app.services.search_service import (
    DEFAULT_CATEGORY_COUNT,
    DEFAULT_FEATURED_COUNT,
    SearchService,
)

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query(default=""),
    user: Identity = Depends(get_current_user),
    searcher: SearchService = Depends(get_search_service),
) -> SearchResponse:
    return SearchResponse.from_results(await searcher.search(q))


@router.get("/categories", response_model=CategoriesResponse)
async def list_categories(
    limit: int = Query(default=DEFAULT_CATEGORY_COUNT, ge=1, le=50),
    user: Identity = Depends(get_current_user),
    searcher: SearchService = Depends(get_search_service),
) -> CategoriesResponse:
    return CategoriesResponse(categories=await searcher.categories(limit))


@router.get("/categories/{category}", response_model=list[ExternalRecipeResponse])
async def browse_category(
    category: str,
    user: Identity = Depends(get_current_user),
    searcher: SearchService = Depends(get_search_service),
) -> list[ExternalRecipeResponse]:
    return [ExternalRecipeResponse.model_validate(r) for r in await searcher.browse_category(category)]


@router.get("/featured", response_model=list[ExternalRecipeResponse])
async def featured(
    count: int = Query(default=DEFAULT_FEATURED_COUNT, ge=1, le=25),
    user: Identity = Depends(get_current_user),
    searcher: SearchService = Depends(get_search_service),
) -> list[ExternalRecipeResponse]:
    return [ExternalRecipeResponse.model_validate(r) for r in await searcher.featured(count)]
