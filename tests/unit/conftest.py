from __future__ import annotations

import os
import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence
from uuid import uuid4

import pytest

# Settings are read lazily, but the FastAPI module builds them at import time
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

from recipe_box.app.domain.models import (  # noqa: E402
    Profile,
    Recipe,
    SavedExternalRecipe,
    SavedRecipeRef,
)
from recipe_box.app.infra.db.base import (  # noqa: E402
    ProfileRepository,
    RecipeRepository,
    SavedRecipeRepository,
)
from recipe_box.app.infra.db.rows import parse_datetime  # noqa: E402

T0 = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


class ProfileRepositoryStub(ProfileRepository):
    """In-memory user_profiles table with a unique user_id constraint."""

    def __init__(self) -> None:
        self.rows: dict[str, Profile] = {}
        self.create_calls = 0
        self.update_calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Optional[Exception] = None
        self._lock = threading.Lock()

    def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        if self.fail_with is not None:
            raise self.fail_with
        return self.rows.get(user_id)

    def create_if_absent(self, profile: Profile) -> Profile:
        with self._lock:
            self.create_calls += 1
            self.rows.setdefault(profile.user_id, profile)
            return self.rows[profile.user_id]

    def update(self, user_id: str, changes: dict[str, Any]) -> Optional[Profile]:
        self.update_calls.append((user_id, dict(changes)))
        current = self.rows.get(user_id)
        if current is None:
            return None
        updated = replace(current, **changes)
        self.rows[user_id] = updated
        return updated


class RecipeRepositoryStub(RecipeRepository):
    def __init__(self) -> None:
        self.rows: dict[str, Recipe] = {}
        self.fail_search_with: Optional[Exception] = None

    def add(self, **fields: Any) -> Recipe:
        fields.setdefault("id", str(uuid4()))
        fields.setdefault("user_id", "owner-1")
        fields.setdefault("title", "Pancakes")
        fields.setdefault("created_at", T0)
        recipe = Recipe(**fields)
        self.rows[recipe.id] = recipe
        return recipe

    def insert(self, data: dict[str, Any]) -> Recipe:
        row = dict(data)
        row["created_at"] = parse_datetime(row.get("created_at"))
        row["updated_at"] = parse_datetime(row.get("updated_at"))
        return self.add(**row)

    def get(self, recipe_id: str) -> Optional[Recipe]:
        return self.rows.get(recipe_id)

    def get_many(self, recipe_ids: Sequence[str]) -> list[Recipe]:
        return [self.rows[rid] for rid in recipe_ids if rid in self.rows]

    def update(self, recipe_id: str, changes: dict[str, Any]) -> None:
        fields = dict(changes)
        if "updated_at" in fields:
            fields["updated_at"] = parse_datetime(fields["updated_at"])
        self.rows[recipe_id] = replace(self.rows[recipe_id], **fields)

    def delete(self, recipe_id: str) -> None:
        self.rows.pop(recipe_id, None)

    def _newest_first(self, recipes: list[Recipe]) -> list[Recipe]:
        return sorted(recipes, key=lambda r: r.created_at or T0, reverse=True)

    def list_by_owner(self, owner_id: str) -> list[Recipe]:
        return self._newest_first([r for r in self.rows.values() if r.user_id == owner_id])

    def list_public(self, limit: int = 20) -> list[Recipe]:
        return self._newest_first([r for r in self.rows.values() if r.is_public])[:limit]

    def search_public(self, query: str) -> list[Recipe]:
        if self.fail_search_with is not None:
            raise self.fail_search_with
        needle = query.lower()
        return self._newest_first(
            [
                r
                for r in self.rows.values()
                if r.is_public and (needle in r.title.lower() or needle in r.description.lower())
            ]
        )

    def count_by_owner(self, owner_id: str) -> int:
        return len(self.list_by_owner(owner_id))


class SavedRecipeRepositoryStub(SavedRecipeRepository):
    """In-memory saved tables; inserts honour the (user, recipe) unique constraint."""

    def __init__(self) -> None:
        self.local: list[SavedRecipeRef] = []
        self.external: list[SavedExternalRecipe] = []
        self._lock = threading.Lock()

    def list_local_refs(self, user_id: str) -> list[SavedRecipeRef]:
        refs = [ref for ref in self.local if ref.user_id == user_id]
        return sorted(refs, key=lambda ref: ref.created_at or T0, reverse=True)

    def local_ref_exists(self, user_id: str, recipe_id: str) -> bool:
        return any(ref.user_id == user_id and ref.recipe_id == recipe_id for ref in self.local)

    def insert_local_ref(self, ref: SavedRecipeRef) -> bool:
        with self._lock:
            if self.local_ref_exists(ref.user_id, ref.recipe_id):
                return False
            self.local.append(ref)
            return True

    def delete_local_ref(self, user_id: str, recipe_id: str) -> bool:
        before = len(self.local)
        self.local = [r for r in self.local if not (r.user_id == user_id and r.recipe_id == recipe_id)]
        return len(self.local) < before

    def list_external(self, user_id: str) -> list[SavedExternalRecipe]:
        rows = [row for row in self.external if row.user_id == user_id]
        return sorted(rows, key=lambda row: row.created_at or T0, reverse=True)

    def external_exists(self, user_id: str, external_recipe_id: str) -> bool:
        return any(
            row.user_id == user_id and row.external_recipe_id == external_recipe_id for row in self.external
        )

    def insert_external(self, saved: SavedExternalRecipe) -> bool:
        with self._lock:
            if self.external_exists(saved.user_id, saved.external_recipe_id):
                return False
            self.external.append(saved)
            return True

    def delete_external(self, user_id: str, external_recipe_id: str) -> bool:
        before = len(self.external)
        self.external = [
            r for r in self.external if not (r.user_id == user_id and r.external_recipe_id == external_recipe_id)
        ]
        return len(self.external) < before


class FixedClock:
    def __init__(self, start: datetime = T0, step: timedelta = timedelta(minutes=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def profile_repo() -> ProfileRepositoryStub:
    return ProfileRepositoryStub()


@pytest.fixture
def recipe_repo() -> RecipeRepositoryStub:
    return RecipeRepositoryStub()


@pytest.fixture
def saved_repo() -> SavedRecipeRepositoryStub:
    return SavedRecipeRepositoryStub()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()
