from __future__ import annotations

import asyncio

import pytest

from recipe_box.app.domain.errors import RecipeNotFoundError, UnauthorizedError, ValidationError
from recipe_box.app.services.recipe_service import RecipeService


class TestRecipeServiceCreate:
    def test_stamps_owner_and_timestamps(self, recipe_repo, clock) -> None:
        service = RecipeService(recipe_repo, clock=clock)

        recipe = asyncio.run(
            service.create("owner-1", {"title": "  Pancakes ", "ingredients": ["flour", "milk"], "cooking_time": 15})
        )

        assert recipe.user_id == "owner-1"
        assert recipe.title == "Pancakes"
        assert recipe.ingredients == ["flour", "milk"]
        assert recipe.cooking_time == 15
        assert recipe.is_public is True
        assert recipe.created_at is not None
        assert recipe.created_at == recipe.updated_at

    @pytest.mark.parametrize("fields", [{}, {"title": ""}, {"title": "   "}])
    def test_requires_title(self, recipe_repo, fields) -> None:
        service = RecipeService(recipe_repo)
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(service.create("owner-1", fields))
        assert exc_info.value.field == "title"
        assert recipe_repo.rows == {}

    def test_rejects_owner_override(self, recipe_repo) -> None:
        service = RecipeService(recipe_repo)
        with pytest.raises(ValidationError):
            asyncio.run(service.create("owner-1", {"title": "x", "user_id": "someone-else"}))

    @pytest.mark.parametrize("value", [-1, "20", True, 1.5])
    def test_rejects_bad_cooking_time(self, recipe_repo, value) -> None:
        service = RecipeService(recipe_repo)
        with pytest.raises(ValidationError):
            asyncio.run(service.create("owner-1", {"title": "x", "cooking_time": value}))


class TestRecipeServiceGet:
    def test_missing_raises(self, recipe_repo) -> None:
        with pytest.raises(RecipeNotFoundError):
            asyncio.run(RecipeService(recipe_repo).get_by_id("nope"))


class TestRecipeServiceOwnership:
    def test_owner_can_update(self, recipe_repo, clock) -> None:
        recipe = recipe_repo.add(user_id="owner-1", title="Old")
        service = RecipeService(recipe_repo, clock=clock)

        asyncio.run(service.update(recipe.id, "owner-1", {"title": "New", "is_public": False}))

        stored = recipe_repo.rows[recipe.id]
        assert stored.title == "New"
        assert stored.is_public is False
        assert stored.updated_at is not None

    def test_other_user_cannot_update(self, recipe_repo) -> None:
        recipe = recipe_repo.add(user_id="owner-1", title="Old")
        service = RecipeService(recipe_repo)

        with pytest.raises(UnauthorizedError):
            asyncio.run(service.update(recipe.id, "intruder", {"title": "Hacked"}))

        assert recipe_repo.rows[recipe.id].title == "Old"

    def test_other_user_cannot_delete(self, recipe_repo) -> None:
        recipe = recipe_repo.add(user_id="owner-1")
        service = RecipeService(recipe_repo)

        with pytest.raises(UnauthorizedError):
            asyncio.run(service.delete(recipe.id, "intruder"))

        assert recipe.id in recipe_repo.rows

    def test_owner_can_delete(self, recipe_repo) -> None:
        recipe = recipe_repo.add(user_id="owner-1")
        asyncio.run(RecipeService(recipe_repo).delete(recipe.id, "owner-1"))
        assert recipe.id not in recipe_repo.rows

    def test_update_missing_recipe(self, recipe_repo) -> None:
        with pytest.raises(RecipeNotFoundError):
            asyncio.run(RecipeService(recipe_repo).update("nope", "owner-1", {"title": "x"}))


class TestRecipeServiceQueries:
    def test_search_public_only(self, recipe_repo) -> None:
        recipe_repo.add(title="Chicken Curry")
        recipe_repo.add(title="Secret Chicken", is_public=False)
        recipe_repo.add(title="Salad", description="goes well with chicken")

        found = asyncio.run(RecipeService(recipe_repo).search("CHICKEN"))

        assert sorted(r.title for r in found) == ["Chicken Curry", "Salad"]

    def test_blank_search_skips_store(self, recipe_repo) -> None:
        recipe_repo.fail_search_with = RuntimeError("should not be called")
        assert asyncio.run(RecipeService(recipe_repo).search("  ")) == []

    def test_list_and_count_by_owner(self, recipe_repo) -> None:
        recipe_repo.add(user_id="owner-1")
        recipe_repo.add(user_id="owner-1")
        recipe_repo.add(user_id="owner-2")
        service = RecipeService(recipe_repo)

        assert len(asyncio.run(service.list_by_owner("owner-1"))) == 2
        assert asyncio.run(service.count_by_owner("owner-1")) == 2
