from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from recipe_box.app.domain.errors import StoreError
from recipe_box.app.domain.models import (
    Profile,
    Recipe,
    SavedExternalRecipe,
    SavedRecipeRef,
)
from recipe_box.app.infra.db.base import (
    ProfileRepository,
    RecipeRepository,
    SavedRecipeRepository,
)
from recipe_box.app.infra.db.rows import (
    now_utc,
    row_to_profile,
    row_to_recipe,
    row_to_saved_external,
    row_to_saved_ref,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def create_supabase_client(url: str, key: str) -> Client:
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required")
    return create_client(url, key)


def _is_unique_violation(error: APIError) -> bool:
    return str(getattr(error, "code", "") or "") == UNIQUE_VIOLATION


def _execute(operation: str, builder: Any) -> Any:
    try:
        return builder.execute()
    except APIError as error:
        logger.error("store.%s_failed code=%s error=%s", operation, getattr(error, "code", None), error)
        raise StoreError(operation, getattr(error, "message", None) or str(error)) from error
    except httpx.HTTPError as error:
        logger.error("store.%s_network_error error=%s", operation, error)
        raise StoreError(operation, str(error)) from error


def _rows(result: Any) -> list[dict[str, Any]]:
    data = getattr(result, "data", None)
    if isinstance(data, list):
        return [row for row in data if isinstance(row, dict)]
    if isinstance(data, dict):
        return [data]
    return []


def ilike_pattern(query: str) -> str:
    """Substring pattern for ILIKE; the query's own `\\`, `%` and `_` match literally."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def quote_filter_value(value: str) -> str:
    # Double quotes keep `,` `(` `)` and `.` from being read as or=(...) syntax
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SupabaseProfileRepository(ProfileRepository):
    TABLE_NAME = "user_profiles"

    def __init__(self, client: Client):
        self._client = client

    def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        result = _execute(
            "get_profile",
            self._client.table(self.TABLE_NAME).select("*").eq("user_id", str(user_id)).limit(1),
        )
        rows = _rows(result)
        return row_to_profile(rows[0]) if rows else None

    def create_if_absent(self, profile: Profile) -> Profile:
        row = {
            "user_id": str(profile.user_id),
            "username": profile.username,
            "profile_image_url": profile.profile_image_url,
            "bio": profile.bio,
            "created_at": (profile.created_at or now_utc()).isoformat(),
        }
        _execute(
            "create_profile",
            self._client.table(self.TABLE_NAME).upsert(row, on_conflict="user_id", ignore_duplicates=True),
        )

        stored = self.get_by_user_id(profile.user_id)
        if stored is None:
            raise StoreError("create_profile", f"profile for {profile.user_id} missing after upsert")
        return stored

    def update(self, user_id: str, changes: dict[str, Any]) -> Optional[Profile]:
        result = _execute(
            "update_profile",
            self._client.table(self.TABLE_NAME).update(changes).eq("user_id", str(user_id)),
        )
        rows = _rows(result)
        if rows:
            return row_to_profile(rows[0])
        return self.get_by_user_id(user_id)


class SupabaseRecipeRepository(RecipeRepository):
    TABLE_NAME = "recipes"

    def __init__(self, client: Client):
        self._client = client

    def insert(self, data: dict[str, Any]) -> Recipe:
        result = _execute("insert_recipe", self._client.table(self.TABLE_NAME).insert(data))
        rows = _rows(result)
        if not rows:
            raise StoreError("insert_recipe", "insert returned no row")

        recipe = row_to_recipe(rows[0])
        logger.info("store.recipe_inserted id=%s owner=%s", recipe.id, recipe.user_id)
        return recipe

    def get(self, recipe_id: str) -> Optional[Recipe]:
        result = _execute(
            "get_recipe",
            self._client.table(self.TABLE_NAME).select("*").eq("id", str(recipe_id)).limit(1),
        )
        rows = _rows(result)
        return row_to_recipe(rows[0]) if rows else None

    def get_many(self, recipe_ids: Sequence[str]) -> list[Recipe]:
        ids = [str(recipe_id) for recipe_id in recipe_ids]
        if not ids:
            return []
        result = _execute(
            "get_recipes",
            self._client.table(self.TABLE_NAME).select("*").in_("id", ids),
        )
        return [row_to_recipe(row) for row in _rows(result)]

    def update(self, recipe_id: str, changes: dict[str, Any]) -> None:
        _execute(
            "update_recipe",
            self._client.table(self.TABLE_NAME).update(changes).eq("id", str(recipe_id)),
        )

    def delete(self, recipe_id: str) -> None:
        _execute(
            "delete_recipe",
            self._client.table(self.TABLE_NAME).delete().eq("id", str(recipe_id)),
        )

    def list_by_owner(self, owner_id: str) -> list[Recipe]:
        result = _execute(
            "list_owner_recipes",
            self._client.table(self.TABLE_NAME)
            .select("*")
            .eq("user_id", str(owner_id))
            .order("created_at", desc=True),
        )
        return [row_to_recipe(row) for row in _rows(result)]

    def list_public(self, limit: int = 20) -> list[Recipe]:
        result = _execute(
            "list_public_recipes",
            self._client.table(self.TABLE_NAME)
            .select("*")
            .eq("is_public", True)
            .order("created_at", desc=True)
            .limit(limit),
        )
        return [row_to_recipe(row) for row in _rows(result)]

    def search_public(self, query: str) -> list[Recipe]:
        pattern = quote_filter_value(ilike_pattern(query))
        result = _execute(
            "search_recipes",
            self._client.table(self.TABLE_NAME)
            .select("*")
            .or_(f"title.ilike.{pattern},description.ilike.{pattern}")
            .eq("is_public", True)
            .order("created_at", desc=True),
        )
        return [row_to_recipe(row) for row in _rows(result)]

    def count_by_owner(self, owner_id: str) -> int:
        result = _execute(
            "count_owner_recipes",
            self._client.table(self.TABLE_NAME)
            .select("id", count="exact")
            .eq("user_id", str(owner_id))
            .limit(1),
        )
        count = getattr(result, "count", None)
        return count if isinstance(count, int) else len(_rows(result))


class SupabaseSavedRecipeRepository(SavedRecipeRepository):
    LOCAL_TABLE = "saved_recipes"
    EXTERNAL_TABLE = "saved_external_recipes"

    def __init__(self, client: Client):
        self._client = client

    def list_local_refs(self, user_id: str) -> list[SavedRecipeRef]:
        result = _execute(
            "list_saved_refs",
            self._client.table(self.LOCAL_TABLE)
            .select("user_id, recipe_id, created_at")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True),
        )
        return [row_to_saved_ref(row) for row in _rows(result) if row.get("recipe_id")]

    def local_ref_exists(self, user_id: str, recipe_id: str) -> bool:
        result = _execute(
            "probe_saved_ref",
            self._client.table(self.LOCAL_TABLE)
            .select("id")
            .eq("user_id", str(user_id))
            .eq("recipe_id", str(recipe_id))
            .limit(1),
        )
        return bool(_rows(result))

    def insert_local_ref(self, ref: SavedRecipeRef) -> bool:
        row = {
            "user_id": str(ref.user_id),
            "recipe_id": str(ref.recipe_id),
            "created_at": (ref.created_at or now_utc()).isoformat(),
        }
        return self._insert_unique("insert_saved_ref", self.LOCAL_TABLE, row)

    def delete_local_ref(self, user_id: str, recipe_id: str) -> bool:
        result = _execute(
            "delete_saved_ref",
            self._client.table(self.LOCAL_TABLE)
            .delete()
            .eq("user_id", str(user_id))
            .eq("recipe_id", str(recipe_id)),
        )
        return bool(_rows(result))

    def list_external(self, user_id: str) -> list[SavedExternalRecipe]:
        result = _execute(
            "list_saved_external",
            self._client.table(self.EXTERNAL_TABLE)
            .select("user_id, external_recipe_id, recipe_data, created_at")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True),
        )
        return [row_to_saved_external(row) for row in _rows(result) if row.get("recipe_data") is not None]

    def external_exists(self, user_id: str, external_recipe_id: str) -> bool:
        result = _execute(
            "probe_saved_external",
            self._client.table(self.EXTERNAL_TABLE)
            .select("id")
            .eq("user_id", str(user_id))
            .eq("external_recipe_id", external_recipe_id)
            .limit(1),
        )
        return bool(_rows(result))

    def insert_external(self, saved: SavedExternalRecipe) -> bool:
        row = {
            "user_id": str(saved.user_id),
            "external_recipe_id": saved.external_recipe_id,
            "recipe_data": saved.recipe_data,
            "created_at": (saved.created_at or now_utc()).isoformat(),
        }
        return self._insert_unique("insert_saved_external", self.EXTERNAL_TABLE, row)

    def delete_external(self, user_id: str, external_recipe_id: str) -> bool:
        result = _execute(
            "delete_saved_external",
            self._client.table(self.EXTERNAL_TABLE)
            .delete()
            .eq("user_id", str(user_id))
            .eq("external_recipe_id", external_recipe_id),
        )
        return bool(_rows(result))

    def _insert_unique(self, operation: str, table: str, row: dict[str, Any]) -> bool:
        try:
            self._client.table(table).insert(row).execute()
        except APIError as error:
            if _is_unique_violation(error):
                logger.info("store.%s_duplicate user=%s", operation, row.get("user_id"))
                return False
            logger.error("store.%s_failed code=%s error=%s", operation, getattr(error, "code", None), error)
            raise StoreError(operation, getattr(error, "message", None) or str(error)) from error
        except httpx.HTTPError as error:
            logger.error("store.%s_network_error error=%s", operation, error)
            raise StoreError(operation, str(error)) from error
        return True
