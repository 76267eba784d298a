# recipe_box/app/infra/db/rows.py
"""
Row parsing at the Supabase boundary.
Rows come back as loosely typed dicts; values are coerced to the domain types
and malformed values fall back to defaults instead of raising.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from recipe_box.app.domain.models import (
    EXTERNAL_ID_PREFIX,
    ExternalRecipe,
    Profile,
    Recipe,
    SavedExternalRecipe,
    SavedRecipeRef,
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: object) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def parse_string_list(value: object) -> list[str]:
    """
    Normalize a list-of-strings column.

    Accepts real lists, JSON array strings ('["a", "b"]'), loosely bracketed
    strings ('[a, b]') and plain strings. Anything else becomes an empty list.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    if not isinstance(value, str):
        return []

    text = value.strip()
    if not text:
        return []
    if text.startswith("[") and text.endswith("]"):
        try:
            decoded = json.loads(text)
        except ValueError:
            decoded = None
        if isinstance(decoded, list):
            return parse_string_list(decoded)
        inner = text[1:-1]
        parts = (part.strip().strip('"').strip("'").strip() for part in inner.split(","))
        return [part for part in parts if part]
    return [text]


def safe_int(value: object, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except ValueError:
            return default
    return default


def safe_bool(value: object, default: bool = True) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "t", "1", "yes"}:
            return True
        if lowered in {"false", "f", "0", "no"}:
            return False
    return default


def safe_str(value: object, default: str = "") -> str:
    if value is None:
        return default
    text = str(value)
    return text if text.strip() else default


def optional_str(value: object) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def row_to_profile(row: Mapping[str, Any]) -> Profile:
    return Profile(
        user_id=str(row["user_id"]),
        username=safe_str(row.get("username"), "User"),
        profile_image_url=optional_str(row.get("profile_image_url")),
        bio=optional_str(row.get("bio")),
        created_at=parse_datetime(row.get("created_at")),
    )


def row_to_recipe(row: Mapping[str, Any]) -> Recipe:
    return Recipe(
        id=str(row["id"]),
        user_id=safe_str(row.get("user_id")),
        title=safe_str(row.get("title")),
        description=safe_str(row.get("description")),
        image_url=safe_str(row.get("image_url")),
        ingredients=parse_string_list(row.get("ingredients")),
        steps=parse_string_list(row.get("steps")),
        cooking_time=safe_int(row.get("cooking_time")),
        is_public=safe_bool(row.get("is_public")),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
        saved_at=parse_datetime(row.get("saved_at")),
    )


def row_to_saved_ref(row: Mapping[str, Any]) -> SavedRecipeRef:
    return SavedRecipeRef(
        user_id=safe_str(row.get("user_id")),
        recipe_id=str(row["recipe_id"]),
        created_at=parse_datetime(row.get("created_at")),
    )


def row_to_saved_external(row: Mapping[str, Any]) -> SavedExternalRecipe:
    data = row.get("recipe_data")
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            data = None
    return SavedExternalRecipe(
        user_id=safe_str(row.get("user_id")),
        external_recipe_id=safe_str(row.get("external_recipe_id")),
        recipe_data=dict(data) if isinstance(data, Mapping) else {},
        created_at=parse_datetime(row.get("created_at")),
    )


def snapshot_to_external_recipe(
    snapshot: Mapping[str, Any],
    fallback_id: str = "",
) -> ExternalRecipe:
    """Rebuild an ExternalRecipe from a stored snapshot without refreshing it upstream."""
    recipe_id = safe_str(snapshot.get("id"), fallback_id)
    if not recipe_id.startswith(EXTERNAL_ID_PREFIX):
        recipe_id = f"{EXTERNAL_ID_PREFIX}{recipe_id}"
    return ExternalRecipe(
        id=recipe_id,
        title=safe_str(snapshot.get("title"), "Unknown Recipe"),
        description=safe_str(snapshot.get("description")),
        image_url=safe_str(snapshot.get("image_url")),
        ingredients=parse_string_list(snapshot.get("ingredients")),
        steps=parse_string_list(snapshot.get("steps")),
        cooking_time=safe_int(snapshot.get("cooking_time"), 30),
        category=safe_str(snapshot.get("category"), "General"),
        area=safe_str(snapshot.get("area"), "International"),
        source=safe_str(snapshot.get("source"), "TheMealDB"),
        external_id=optional_str(snapshot.get("external_id")),
        youtube_url=optional_str(snapshot.get("youtube_url")),
        source_url=optional_str(snapshot.get("source_url")),
        tags=parse_string_list(snapshot.get("tags")),
        is_external=True,
        saved_at=parse_datetime(snapshot.get("saved_at")),
    )
