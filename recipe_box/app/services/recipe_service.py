"""
Recipe service.
CRUD over user-authored recipes with ownership-checked mutations.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from starlette.concurrency import run_in_threadpool

from recipe_box.app.domain.errors import (
    RecipeNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from recipe_box.app.domain.models import Recipe
from recipe_box.app.infra.db.base import RecipeRepository
from recipe_box.app.infra.db.rows import now_utc, parse_string_list

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 20
EDITABLE_FIELDS = frozenset(
    {"title", "description", "image_url", "ingredients", "steps", "cooking_time", "is_public"}
)


def _clean_fields(fields: dict[str, Any], *, require_title: bool) -> dict[str, Any]:
    unknown = sorted(set(fields) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(unknown[0], "field cannot be set")

    cleaned: dict[str, Any] = {}
    if require_title or "title" in fields:
        title = str(fields.get("title") or "").strip()
        if not title:
            raise ValidationError("title", "title is required")
        cleaned["title"] = title

    for key in ("description", "image_url"):
        if key in fields:
            cleaned[key] = str(fields[key] or "")

    for key in ("ingredients", "steps"):
        if key in fields:
            cleaned[key] = parse_string_list(fields[key])

    if "cooking_time" in fields:
        value = fields["cooking_time"]
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError("cooking_time", "must be a non-negative number of minutes")
        cleaned["cooking_time"] = value

    if "is_public" in fields:
        if not isinstance(fields["is_public"], bool):
            raise ValidationError("is_public", "must be true or false")
        cleaned["is_public"] = fields["is_public"]

    return cleaned


class RecipeService:
    def __init__(
        self,
        repository: RecipeRepository,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._repo = repository
        self._clock = clock

    async def create(self, owner_id: str, fields: dict[str, Any]) -> Recipe:
        data = _clean_fields(fields, require_title=True)
        data.setdefault("description", "")
        data.setdefault("image_url", "")
        data.setdefault("ingredients", [])
        data.setdefault("steps", [])
        data.setdefault("cooking_time", 0)
        data.setdefault("is_public", True)

        now = self._clock().isoformat()
        data.update({"user_id": str(owner_id), "created_at": now, "updated_at": now})

        recipe = await run_in_threadpool(self._repo.insert, data)
        logger.info("recipe.created id=%s owner=%s", recipe.id, owner_id)
        return recipe

    async def get_by_id(self, recipe_id: str) -> Recipe:
        recipe = await run_in_threadpool(self._repo.get, str(recipe_id))
        if recipe is None:
            raise RecipeNotFoundError(str(recipe_id))
        return recipe

    async def update(self, recipe_id: str, actor_id: str, fields: dict[str, Any]) -> None:
        recipe = await self._get_owned(recipe_id, actor_id, "update")
        changes = _clean_fields(fields, require_title=False)
        changes["updated_at"] = self._clock().isoformat()

        await run_in_threadpool(self._repo.update, recipe.id, changes)
        logger.info("recipe.updated id=%s actor=%s fields=%s", recipe.id, actor_id, ",".join(sorted(changes)))

    async def delete(self, recipe_id: str, actor_id: str) -> None:
        recipe = await self._get_owned(recipe_id, actor_id, "delete")
        await run_in_threadpool(self._repo.delete, recipe.id)
        logger.info("recipe.deleted id=%s actor=%s", recipe.id, actor_id)

    async def list_by_owner(self, owner_id: str) -> list[Recipe]:
        return await run_in_threadpool(self._repo.list_by_owner, str(owner_id))

    async def list_public(self, limit: int = DEFAULT_FEED_LIMIT) -> list[Recipe]:
        return await run_in_threadpool(self._repo.list_public, limit)

    async def search(self, query: str) -> list[Recipe]:
        term = (query or "").strip()
        if not term:
            return []
        recipes = await run_in_threadpool(self._repo.search_public, term)
        logger.info("recipe.search query=%s found=%d", term, len(recipes))
        return recipes

    async def count_by_owner(self, owner_id: str) -> int:
        return await run_in_threadpool(self._repo.count_by_owner, str(owner_id))

    async def _get_owned(self, recipe_id: str, actor_id: str, action: str) -> Recipe:
        recipe = await self.get_by_id(recipe_id)
        if not recipe.is_owned_by(actor_id):
            logger.warning("recipe.%s_denied id=%s actor=%s owner=%s", action, recipe_id, actor_id, recipe.user_id)
            raise UnauthorizedError(str(actor_id), str(recipe_id), action)
        return recipe
