"""
Image upload service.
Tries an ordered list of upload strategies and stops at the first success.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

from starlette.concurrency import run_in_threadpool

from recipe_box.app.domain.errors import StorageUploadError, ValidationError
from recipe_box.app.infra.storage.base import UploadStrategy, timestamp_ms

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024


class ImageKind(str, Enum):
    PROFILE = "profile"
    RECIPE = "recipe"


def placeholder_image_url() -> str:
    return f"https://picsum.photos/seed/recipe{timestamp_ms()}/400/300"


class ImageUploadService:
    """
    Responsibilities:
    - Validate the image payload
    - Run the strategy chain for the requested image kind
    - Fall back to a placeholder URL when the caller asks for best effort
    """

    def __init__(
        self,
        profile_strategies: Sequence[UploadStrategy],
        recipe_strategies: Optional[Sequence[UploadStrategy]] = None,
    ):
        self._strategies: dict[ImageKind, list[UploadStrategy]] = {
            ImageKind.PROFILE: list(profile_strategies),
            ImageKind.RECIPE: list(recipe_strategies if recipe_strategies is not None else profile_strategies),
        }

    def strategies_for(self, kind: ImageKind) -> list[UploadStrategy]:
        return list(self._strategies[kind])

    async def upload(
        self,
        kind: ImageKind,
        user_id: str,
        data: bytes,
        extension: str = "jpg",
    ) -> str:
        """
        Upload an image with the first strategy that works.

        Raises:
            ValidationError: If the payload is empty or too large
            StorageUploadError: If every strategy failed
        """
        if not data:
            raise ValidationError("image", "image is empty")
        if len(data) > MAX_IMAGE_BYTES:
            raise ValidationError("image", f"image exceeds {MAX_IMAGE_BYTES} bytes")

        attempts: list[str] = []
        for strategy in self._strategies[kind]:
            try:
                url = await run_in_threadpool(strategy.upload, str(user_id), data, extension)
            except Exception as exc:
                logger.warning(
                    "upload.strategy_failed kind=%s strategy=%s user=%s error=%s",
                    kind.value,
                    strategy.name,
                    user_id,
                    exc,
                )
                attempts.append(f"{strategy.name}: {exc}")
                continue

            logger.info("upload.ok kind=%s strategy=%s user=%s", kind.value, strategy.name, user_id)
            return url

        raise StorageUploadError(attempts)

    async def upload_or_placeholder(
        self,
        kind: ImageKind,
        user_id: str,
        data: bytes,
        extension: str = "jpg",
    ) -> str:
        try:
            return await self.upload(kind, user_id, data, extension)
        except StorageUploadError as exc:
            logger.error("upload.fallback_placeholder kind=%s user=%s error=%s", kind.value, user_id, exc)
            return placeholder_image_url()
