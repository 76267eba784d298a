# recipe_box/app/infra/storage/supabase_provider.py
"""
Supabase Storage upload strategies.
Each strategy writes to the same bucket under a different naming scheme; the
bucket's row-level policies do not accept every layout in every project, so
the service tries them in order.
"""
from __future__ import annotations

import logging
from typing import Callable

from supabase import Client

from recipe_box.app.infra.storage.base import (
    UploadStrategy,
    content_type_for,
    normalize_extension,
    timestamp_ms,
)

logger = logging.getLogger(__name__)

PathScheme = Callable[[str, int, str], str]


def user_folder_path(user_id: str, ts: int, extension: str) -> str:
    return f"{user_id}/profile_{ts}.{extension}"


def profiles_folder_path(user_id: str, ts: int, extension: str) -> str:
    return f"profiles/{user_id}_{ts}.{extension}"


def flat_jpeg_path(user_id: str, ts: int, extension: str) -> str:
    return f"{user_id}-profile-{ts}.jpg"


def recipes_folder_path(user_id: str, ts: int, extension: str) -> str:
    return f"recipes/recipe_{user_id}_{ts}.jpg"


def fallback_recipes_folder_path(user_id: str, ts: int, extension: str) -> str:
    return f"fallback_recipes/recipe_{user_id}_{ts}.jpg"


PROFILE_PATH_SCHEMES: tuple[tuple[str, PathScheme], ...] = (
    ("user-folder", user_folder_path),
    ("profiles-folder", profiles_folder_path),
    ("flat-jpeg", flat_jpeg_path),
)

RECIPE_PATH_SCHEMES: tuple[tuple[str, PathScheme], ...] = (
    ("recipes-folder", recipes_folder_path),
    ("fallback-recipes-folder", fallback_recipes_folder_path),
)


class SupabaseStorageStrategy(UploadStrategy):
    def __init__(
        self,
        client: Client,
        bucket: str,
        path_scheme: PathScheme,
        name: str = "supabase",
    ):
        self._client = client
        self.bucket = bucket
        self._path_scheme = path_scheme
        self.name = name

    def upload(self, user_id: str, data: bytes, extension: str) -> str:
        ext = normalize_extension(extension)
        path = self._path_scheme(str(user_id), timestamp_ms(), ext)
        # Schemes that force a .jpg name also force the jpeg content type
        content_type = "image/jpeg" if path.endswith(".jpg") else content_type_for(ext)

        bucket = self._client.storage.from_(self.bucket)
        bucket.upload(
            path,
            data,
            {"content-type": content_type, "cache-control": "3600", "upsert": "true"},
        )
        url = bucket.get_public_url(path)
        logger.debug("storage.supabase_uploaded strategy=%s path=%s", self.name, path)
        return url


def build_supabase_strategies(
    client: Client,
    bucket: str,
    schemes: tuple[tuple[str, PathScheme], ...],
) -> list[UploadStrategy]:
    return [SupabaseStorageStrategy(client, bucket, scheme, name=name) for name, scheme in schemes]
