# recipe_box/app/infra/storage/base.py
"""
Abstract base class for image upload strategies.
ImageUploadService tries a list of these in order until one succeeds.
"""
from __future__ import annotations

import mimetypes
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from uuid import uuid4

DEFAULT_EXTENSION = "jpg"


def normalize_extension(extension: str | None) -> str:
    cleaned = re.sub(r"[^a-z0-9]", "", (extension or "").lower())
    return cleaned or DEFAULT_EXTENSION


def content_type_for(extension: str) -> str:
    guessed, _ = mimetypes.guess_type(f"file.{extension}")
    return guessed or "image/jpeg"


def timestamp_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class UploadStrategy(ABC):
    """
    Abstract interface for one way of storing an image.

    Implementations:
    - SupabaseStorageStrategy: Supabase Storage bucket, one per path scheme
    - R2UploadStrategy: Cloudflare R2 (S3-compatible), used as last resort
    """

    name: str = "strategy"

    @abstractmethod
    def upload(self, user_id: str, data: bytes, extension: str) -> str:
        """
        Store an image and return its public URL.

        Args:
            user_id: Owner of the image; paths are namespaced by it
            data: Raw image bytes
            extension: File extension without the dot (e.g., "png")

        Returns:
            A publicly resolvable URL

        Raises:
            Any exception on failure; the caller moves on to the next strategy
        """
        pass

    def generate_object_key(
        self,
        user_id: str,
        extension: str,
        prefix: str = "images",
    ) -> str:
        """
        Generate a standardized object key.

        Format: users/{user_id}/{prefix}/{YYYY}/{MM}/{uuid}.{ext}
        """
        now = datetime.now(timezone.utc)
        unique_id = uuid4().hex[:8]
        safe_user = re.sub(r"[^a-zA-Z0-9_-]", "_", str(user_id))
        return f"users/{safe_user}/{prefix}/{now:%Y}/{now:%m}/{unique_id}.{normalize_extension(extension)}"
