"""
Search orchestration across local recipes and TheMealDB.
Each source is isolated: one failing never hides the other's results.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from recipe_box.app.domain.models import ExternalRecipe, SearchResults
from recipe_box.app.services.recipe_service import RecipeService
from recipe_box.services.mealdb_client import MealDbClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FEATURED_COUNT = 10
DEFAULT_CATEGORY_COUNT = 10


async def _isolated(branch: str, call: Awaitable[list[T]]) -> list[T]:
    try:
        return await call
    except Exception:
        logger.exception("search.branch_failed branch=%s", branch)
        return []


class SearchService:
    def __init__(self, recipes: RecipeService, mealdb: MealDbClient):
        self._recipes = recipes
        self._mealdb = mealdb

    async def search(self, query: str) -> SearchResults:
        term = (query or "").strip()
        if not term:
            return SearchResults()

        local, external = await asyncio.gather(
            _isolated("local", self._recipes.search(term)),
            _isolated("external", self._mealdb.search_by_name(term)),
        )
        logger.info("search.done query=%s local=%d external=%d", term, len(local), len(external))
        return SearchResults(local=local, external=external)

    async def browse_category(self, category: str) -> list[ExternalRecipe]:
        name = (category or "").strip()
        if not name:
            return []
        return await _isolated("category", self._mealdb.by_category(name))

    async def featured(self, count: int = DEFAULT_FEATURED_COUNT) -> list[ExternalRecipe]:
        return await _isolated("featured", self._mealdb.random(count))

    async def categories(self, limit: int = DEFAULT_CATEGORY_COUNT) -> list[str]:
        names = await _isolated("categories", self._mealdb.categories())
        return names[:limit]
