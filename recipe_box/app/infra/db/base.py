# recipe_box/app/infra/db/base.py
"""
Abstract base classes for the persistence layer.
Services only talk to these interfaces so the Supabase implementation can be
swapped for in-memory stubs in tests.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from recipe_box.app.domain.models import (
    Profile,
    Recipe,
    SavedExternalRecipe,
    SavedRecipeRef,
)


class ProfileRepository(ABC):
    """
    Abstract interface for the user_profiles table.

    Implementations:
    - SupabaseProfileRepository: Postgres table behind Supabase
    """

    @abstractmethod
    def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        """
        Fetch the profile for an identity.

        Args:
            user_id: Identity id issued by the auth provider

        Returns:
            The profile, or None if it does not exist yet
        """
        pass

    @abstractmethod
    def create_if_absent(self, profile: Profile) -> Profile:
        """
        Insert a profile unless one already exists for profile.user_id.
        Must be atomic with respect to the unique constraint on user_id.

        Args:
            profile: The profile to create

        Returns:
            The stored profile (the pre-existing one if another writer won)
        """
        pass

    @abstractmethod
    def update(self, user_id: str, changes: dict[str, Any]) -> Optional[Profile]:
        """
        Apply column changes to a profile.

        Args:
            user_id: Owner of the profile
            changes: Column values to overwrite

        Returns:
            The updated profile, or None if no profile matched
        """
        pass


class RecipeRepository(ABC):
    """
    Abstract interface for the recipes table.
    Ownership rules live in RecipeService, not here.
    """

    @abstractmethod
    def insert(self, data: dict[str, Any]) -> Recipe:
        """
        Insert a recipe row.

        Args:
            data: Column values, already validated and stamped

        Returns:
            The stored recipe with its generated id
        """
        pass

    @abstractmethod
    def get(self, recipe_id: str) -> Optional[Recipe]:
        pass

    @abstractmethod
    def get_many(self, recipe_ids: Sequence[str]) -> list[Recipe]:
        """
        Bulk fetch recipes in a single query. Missing ids are simply absent
        from the result; order is not guaranteed.
        """
        pass

    @abstractmethod
    def update(self, recipe_id: str, changes: dict[str, Any]) -> None:
        pass

    @abstractmethod
    def delete(self, recipe_id: str) -> None:
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> list[Recipe]:
        """Recipes of one owner, newest first."""
        pass

    @abstractmethod
    def list_public(self, limit: int = 20) -> list[Recipe]:
        """Public recipes, newest first."""
        pass

    @abstractmethod
    def search_public(self, query: str) -> list[Recipe]:
        """
        Public recipes whose title or description contains the query,
        case-insensitively, newest first.
        """
        pass

    @abstractmethod
    def count_by_owner(self, owner_id: str) -> int:
        pass


class SavedRecipeRepository(ABC):
    """
    Abstract interface for the saved_recipes and saved_external_recipes tables.
    """

    @abstractmethod
    def list_local_refs(self, user_id: str) -> list[SavedRecipeRef]:
        """Saved local refs of a user, newest first."""
        pass

    @abstractmethod
    def local_ref_exists(self, user_id: str, recipe_id: str) -> bool:
        pass

    @abstractmethod
    def insert_local_ref(self, ref: SavedRecipeRef) -> bool:
        """
        Insert a saved_recipes row.

        Returns:
            False if the unique (user_id, recipe_id) constraint rejected it
        """
        pass

    @abstractmethod
    def delete_local_ref(self, user_id: str, recipe_id: str) -> bool:
        """Returns True if a row was removed."""
        pass

    @abstractmethod
    def list_external(self, user_id: str) -> list[SavedExternalRecipe]:
        """Saved external recipes of a user, newest first."""
        pass

    @abstractmethod
    def external_exists(self, user_id: str, external_recipe_id: str) -> bool:
        pass

    @abstractmethod
    def insert_external(self, saved: SavedExternalRecipe) -> bool:
        """
        Insert a saved_external_recipes row.

        Returns:
            False if the unique (user_id, external_recipe_id) constraint rejected it
        """
        pass

    @abstractmethod
    def delete_external(self, user_id: str, external_recipe_id: str) -> bool:
        """Returns True if a row was removed."""
        pass
