"""
Saved-recipe service.
Merges bookmarks of local recipes and snapshots of external recipes into a
single list ordered by when they were saved.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from starlette.concurrency import run_in_threadpool

from recipe_box.app.domain.errors import RecipeNotFoundError, ValidationError
from recipe_box.app.domain.models import (
    EXTERNAL_ID_PREFIX,
    ExternalRecipe,
    SavedExternalRecipe,
    SavedItem,
    SavedRecipeRef,
    SavedSource,
)
from recipe_box.app.infra.db.base import RecipeRepository, SavedRecipeRepository
from recipe_box.app.infra.db.rows import EPOCH, now_utc, snapshot_to_external_recipe

logger = logging.getLogger(__name__)


class SavedRecipesService:
    """
    Local saves and external saves live in separate tables whose ids never
    overlap (external ids carry the "api_" prefix), so merging needs no
    cross-source de-duplication.
    """

    def __init__(
        self,
        saved_repository: SavedRecipeRepository,
        recipe_repository: RecipeRepository,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._saved = saved_repository
        self._recipes = recipe_repository
        self._clock = clock

    async def list_saved(self, user_id: str) -> list[SavedItem]:
        uid = str(user_id)
        local_items, external_items = await asyncio.gather(
            self._local_items(uid),
            self._external_items(uid),
        )

        merged = [*external_items, *local_items]
        # list.sort is stable, so equal timestamps keep the order above
        merged.sort(key=lambda item: item.saved_at, reverse=True)
        logger.info(
            "saved.list user=%s local=%d external=%d",
            uid,
            len(local_items),
            len(external_items),
        )
        return merged

    async def _local_items(self, user_id: str) -> list[SavedItem]:
        refs = await run_in_threadpool(self._saved.list_local_refs, user_id)
        if not refs:
            return []

        recipes = await run_in_threadpool(self._recipes.get_many, [ref.recipe_id for ref in refs])
        by_id = {recipe.id: recipe for recipe in recipes}

        items: list[SavedItem] = []
        for ref in refs:
            recipe = by_id.get(ref.recipe_id)
            if recipe is None:
                logger.debug("saved.dead_ref user=%s recipe=%s", user_id, ref.recipe_id)
                continue
            saved_at = ref.created_at or EPOCH
            items.append(SavedItem(SavedSource.LOCAL, saved_at, replace(recipe, saved_at=saved_at)))
        return items

    async def _external_items(self, user_id: str) -> list[SavedItem]:
        rows = await run_in_threadpool(self._saved.list_external, user_id)

        items: list[SavedItem] = []
        for row in rows:
            recipe = snapshot_to_external_recipe(row.recipe_data, fallback_id=row.external_recipe_id)
            saved_at = recipe.saved_at or row.created_at or EPOCH
            recipe.saved_at = saved_at
            items.append(SavedItem(SavedSource.EXTERNAL, saved_at, recipe))
        return items

    async def save_local(self, user_id: str, recipe_id: str) -> bool:
        """Returns True when newly saved, False when it was already saved."""
        uid, rid = str(user_id), str(recipe_id)
        recipe = await run_in_threadpool(self._recipes.get, rid)
        if recipe is None:
            raise RecipeNotFoundError(rid)

        if await run_in_threadpool(self._saved.local_ref_exists, uid, rid):
            logger.info("saved.save_local_exists user=%s recipe=%s", uid, rid)
            return False

        inserted = await run_in_threadpool(
            self._saved.insert_local_ref,
            SavedRecipeRef(user_id=uid, recipe_id=rid, created_at=self._clock()),
        )
        logger.info("saved.save_local user=%s recipe=%s inserted=%s", uid, rid, inserted)
        return inserted

    async def save_external(self, user_id: str, recipe: ExternalRecipe) -> bool:
        """
        Store a frozen snapshot of an external recipe.
        The snapshot is never refreshed from TheMealDB afterwards.
        """
        uid = str(user_id)
        external_id = str(recipe.id or "")
        if not external_id.startswith(EXTERNAL_ID_PREFIX) or external_id == EXTERNAL_ID_PREFIX:
            raise ValidationError("external_recipe_id", f"must start with {EXTERNAL_ID_PREFIX!r}")

        if await run_in_threadpool(self._saved.external_exists, uid, external_id):
            logger.info("saved.save_external_exists user=%s recipe=%s", uid, external_id)
            return False

        now = self._clock()
        snapshot = replace(recipe, saved_at=now, is_external=True).to_snapshot()
        inserted = await run_in_threadpool(
            self._saved.insert_external,
            SavedExternalRecipe(
                user_id=uid,
                external_recipe_id=external_id,
                recipe_data=snapshot,
                created_at=now,
            ),
        )
        logger.info("saved.save_external user=%s recipe=%s inserted=%s", uid, external_id, inserted)
        return inserted

    async def unsave_local(self, user_id: str, recipe_id: str) -> bool:
        removed = await run_in_threadpool(self._saved.delete_local_ref, str(user_id), str(recipe_id))
        logger.info("saved.unsave_local user=%s recipe=%s removed=%s", user_id, recipe_id, removed)
        return removed

    async def unsave_external(self, user_id: str, external_recipe_id: str) -> bool:
        removed = await run_in_threadpool(self._saved.delete_external, str(user_id), str(external_recipe_id))
        logger.info("saved.unsave_external user=%s recipe=%s removed=%s", user_id, external_recipe_id, removed)
        return removed

    async def saved_ids(self, user_id: str) -> set[str]:
        uid = str(user_id)
        refs, externals = await asyncio.gather(
            run_in_threadpool(self._saved.list_local_refs, uid),
            run_in_threadpool(self._saved.list_external, uid),
        )
        return {ref.recipe_id for ref in refs} | {row.external_recipe_id for row in externals if row.external_recipe_id}
