from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from recipe_box.app.domain.models import EXTERNAL_ID_PREFIX, ExternalRecipe
from .errors import UpstreamError, UpstreamTimeoutError
from .meal_normalizer import normalize_meal

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.themealdb.com/api/json/v1/1"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_THROTTLE_SECONDS = 0.1
DEFAULT_CATEGORY_LIMIT = 20


def _meals(data: dict[str, Any]) -> list[dict[str, Any]]:
    meals = data.get("meals")
    if not isinstance(meals, list):
        return []
    return [meal for meal in meals if isinstance(meal, dict)]


def native_meal_id(recipe_id: str) -> str:
    text = str(recipe_id).strip()
    return text[len(EXTERNAL_ID_PREFIX):] if text.startswith(EXTERNAL_ID_PREFIX) else text


class MealDbClient:
    """
    Async client for TheMealDB.

    Every payload goes through normalize_meal, so callers only ever see
    ExternalRecipe objects. Sequential multi-call operations sleep
    `throttle_seconds` between requests to stay polite with the free API.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        throttle_seconds: float = DEFAULT_THROTTLE_SECONDS,
        category_limit: int = DEFAULT_CATEGORY_LIMIT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.throttle_seconds = throttle_seconds
        self.category_limit = category_limit
        self._client = http_client or httpx.AsyncClient(timeout=timeout_seconds, follow_redirects=True)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "MealDbClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def search_by_name(self, query: str) -> list[ExternalRecipe]:
        term = (query or "").strip()
        if not term:
            return []
        data = await self._get_json("search.php", {"s": term})
        recipes = [normalize_meal(meal) for meal in _meals(data)]
        logger.info("mealdb.search query=%s found=%d", term, len(recipes))
        return recipes

    async def lookup(self, meal_id: str) -> Optional[ExternalRecipe]:
        data = await self._get_json("lookup.php", {"i": native_meal_id(meal_id)})
        meals = _meals(data)
        return normalize_meal(meals[0]) if meals else None

    async def random(self, count: int = 10) -> list[ExternalRecipe]:
        recipes: list[ExternalRecipe] = []
        for index in range(max(count, 0)):
            if index:
                await self._throttle()
            try:
                data = await self._get_json("random.php")
            except UpstreamError as error:
                logger.warning("mealdb.random_skip attempt=%d error=%s", index, error)
                continue
            meals = _meals(data)
            if meals:
                recipes.append(normalize_meal(meals[0]))
        logger.info("mealdb.random requested=%d got=%d", count, len(recipes))
        return recipes

    async def by_category(self, category: str, limit: Optional[int] = None) -> list[ExternalRecipe]:
        cap = self.category_limit if limit is None else limit
        data = await self._get_json("filter.php", {"c": category})
        meal_ids = [str(meal.get("idMeal")) for meal in _meals(data) if meal.get("idMeal")][:cap]

        recipes: list[ExternalRecipe] = []
        for index, meal_id in enumerate(meal_ids):
            if index:
                await self._throttle()
            try:
                recipe = await self.lookup(meal_id)
            except UpstreamError as error:
                logger.warning("mealdb.category_detail_skip category=%s id=%s error=%s", category, meal_id, error)
                continue
            if recipe is not None:
                recipes.append(recipe)

        logger.info("mealdb.category category=%s got=%d", category, len(recipes))
        return recipes

    async def categories(self) -> list[str]:
        data = await self._get_json("categories.php")
        entries = data.get("categories")
        if not isinstance(entries, list):
            return []
        names: list[str] = []
        for entry in entries:
            if isinstance(entry, dict) and isinstance(entry.get("strCategory"), str):
                name = entry["strCategory"].strip()
                if name:
                    names.append(name)
        return names

    async def _throttle(self) -> None:
        if self.throttle_seconds > 0:
            await asyncio.sleep(self.throttle_seconds)

    async def _get_json(self, path: str, params: Optional[dict[str, str]] = None) -> dict[str, Any]:
        url = f"{self.base_url}/{path}"
        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as error:
            raise UpstreamTimeoutError(url, self.timeout_seconds) from error
        except httpx.HTTPError as error:
            raise UpstreamError(url, str(error) or error.__class__.__name__) from error

        if response.status_code != 200:
            raise UpstreamError(url, response.reason_phrase or "unexpected status", response.status_code)

        try:
            data = response.json()
        except ValueError as error:
            raise UpstreamError(url, "invalid JSON body") from error

        if not isinstance(data, dict):
            raise UpstreamError(url, "unexpected JSON shape")
        return data
