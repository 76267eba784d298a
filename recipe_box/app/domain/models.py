# recipe_box/app/domain/models.py
"""
Domain models for profiles, recipes and saved-recipe bookmarks.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union


EXTERNAL_ID_PREFIX = "api_"


class SavedSource(str, Enum):
    """Where a saved item comes from."""
    LOCAL = "local"
    EXTERNAL = "external"


class UsernameSource(str, Enum):
    """Where a username candidate was taken from, highest priority first."""
    EXPLICIT = "explicit"
    METADATA_USERNAME = "metadata_username"
    DISPLAY_NAME = "display_name"
    FULL_NAME = "full_name"
    EMAIL = "email"
    FALLBACK = "fallback"


@dataclass
class Identity:
    """Authenticated principal issued by Supabase Auth. Read-only here."""
    id: str
    email: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    email_confirmed: bool = True


@dataclass(frozen=True)
class UsernameCandidate:
    value: str
    source: UsernameSource

    @property
    def is_explicit(self) -> bool:
        return self.source is UsernameSource.EXPLICIT


@dataclass
class Profile:
    user_id: str
    username: str
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Recipe:
    """A recipe authored by a user of this system."""
    id: str
    user_id: str
    title: str
    description: str = ""
    image_url: str = ""
    ingredients: list[str] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)
    cooking_time: int = 0
    is_public: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Only set when the recipe comes out of a user's saved list
    saved_at: Optional[datetime] = None

    def is_owned_by(self, user_id: str) -> bool:
        return str(self.user_id) == str(user_id)


@dataclass
class ExternalRecipe:
    """
    A recipe normalized from TheMealDB.
    Never owned by a local user; `id` is always namespaced with EXTERNAL_ID_PREFIX.
    """
    id: str
    title: str
    description: str
    image_url: str = ""
    ingredients: list[str] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)
    cooking_time: int = 30
    category: str = "General"
    area: str = "International"
    source: str = "TheMealDB"
    external_id: Optional[str] = None
    youtube_url: Optional[str] = None
    source_url: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    is_external: bool = True
    saved_at: Optional[datetime] = None

    def to_snapshot(self) -> dict[str, Any]:
        """JSON-ready copy stored in saved_external_recipes.recipe_data."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "ingredients": list(self.ingredients),
            "steps": list(self.steps),
            "cooking_time": self.cooking_time,
            "category": self.category,
            "area": self.area,
            "source": self.source,
            "external_id": self.external_id,
            "youtube_url": self.youtube_url,
            "source_url": self.source_url,
            "tags": list(self.tags),
            "is_external": True,
            "saved_at": self.saved_at.isoformat() if self.saved_at else None,
        }


@dataclass
class SavedRecipeRef:
    user_id: str
    recipe_id: str
    created_at: Optional[datetime] = None


@dataclass
class SavedExternalRecipe:
    user_id: str
    external_recipe_id: str
    recipe_data: dict[str, Any]
    created_at: Optional[datetime] = None


@dataclass
class SavedItem:
    """One entry of a user's merged saved list."""
    source: SavedSource
    saved_at: datetime
    recipe: Union[Recipe, ExternalRecipe]

    @property
    def id(self) -> str:
        return self.recipe.id


@dataclass
class SearchResults:
    local: list[Recipe] = field(default_factory=list)
    external: list[ExternalRecipe] = field(default_factory=list)


@dataclass
class AuthResult:
    """Outcome of a sign-up or sign-in call."""
    identity: Identity
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    @property
    def has_session(self) -> bool:
        return self.access_token is not None
