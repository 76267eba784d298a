"""
Profile bootstrap and settings service.
Keeps exactly one user_profiles row per identity.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from starlette.concurrency import run_in_threadpool

from recipe_box.app.domain.errors import ProfileNotFoundError, ValidationError
from recipe_box.app.domain.models import (
    Identity,
    Profile,
    UsernameCandidate,
    UsernameSource,
)
from recipe_box.app.infra.db.base import ProfileRepository
from recipe_box.app.infra.db.rows import now_utc
from recipe_box.app.services.image_upload_service import ImageKind, ImageUploadService

logger = logging.getLogger(__name__)

# Auth sessions take a moment to propagate to PostgREST after sign-in
DEFAULT_BOOTSTRAP_DELAY_SECONDS = 2.0
FALLBACK_USERNAME = "User"
EDITABLE_PROFILE_FIELDS = frozenset({"username", "bio", "profile_image_url"})

# Names the bootstrapper invents when nothing better is known
_DERIVED_SOURCES = frozenset({UsernameSource.EMAIL, UsernameSource.FALLBACK})

_METADATA_KEYS = (
    ("username", UsernameSource.METADATA_USERNAME),
    ("display_name", UsernameSource.DISPLAY_NAME),
    ("full_name", UsernameSource.FULL_NAME),
)


def resolve_username(identity: Identity, explicit: Optional[str] = None) -> UsernameCandidate:
    """Pick the best display name hint available for an identity."""
    if explicit and explicit.strip():
        return UsernameCandidate(explicit.strip(), UsernameSource.EXPLICIT)

    metadata = identity.metadata if isinstance(identity.metadata, dict) else {}
    for key, source in _METADATA_KEYS:
        value = metadata.get(key)
        if value is not None and str(value).strip():
            return UsernameCandidate(str(value).strip(), source)

    if identity.email and "@" in identity.email:
        local_part = identity.email.split("@", 1)[0].strip()
        if local_part:
            return UsernameCandidate(local_part, UsernameSource.EMAIL)

    return UsernameCandidate(FALLBACK_USERNAME, UsernameSource.FALLBACK)


def _derived_usernames(identity: Identity) -> set[str]:
    bare = Identity(id=identity.id, email=identity.email)
    return {FALLBACK_USERNAME, resolve_username(bare).value}


def _replaces_stored(identity: Identity, stored: str, candidate: UsernameCandidate) -> bool:
    if stored == candidate.value:
        return False
    if candidate.is_explicit:
        return True
    if candidate.source in _DERIVED_SOURCES:
        return False
    return stored in _derived_usernames(identity)


class ProfileService:
    def __init__(
        self,
        repository: ProfileRepository,
        uploader: Optional[ImageUploadService] = None,
        bootstrap_delay_seconds: float = DEFAULT_BOOTSTRAP_DELAY_SECONDS,
        clock: Callable[[], Any] = now_utc,
    ):
        self._repo = repository
        self._uploader = uploader
        self.bootstrap_delay_seconds = bootstrap_delay_seconds
        self._clock = clock
        self._background: set[asyncio.Task[None]] = set()

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        return await run_in_threadpool(self._repo.get_by_user_id, str(user_id))

    async def ensure_profile(self, identity: Identity, candidate: UsernameCandidate) -> Profile:
        """
        Create the profile if it is missing, idempotently.

        An existing profile's username is replaced by an explicit registration
        name, or by a metadata name when the stored one is only the email local
        part or the fallback. Store errors propagate so the caller can retry or
        show a message.
        """
        user_id = str(identity.id)
        profile = await run_in_threadpool(self._repo.get_by_user_id, user_id)

        if profile is None:
            profile = await run_in_threadpool(
                self._repo.create_if_absent,
                Profile(user_id=user_id, username=candidate.value, created_at=self._clock()),
            )
            logger.info("profile.ensure_created user=%s username=%s", user_id, profile.username)

        if _replaces_stored(identity, profile.username, candidate):
            updated = await run_in_threadpool(self._repo.update, user_id, {"username": candidate.value})
            if updated is not None:
                profile = updated
            logger.info("profile.ensure_username_updated user=%s username=%s", user_id, candidate.value)

        return profile

    def schedule_ensure_profile(
        self,
        identity: Identity,
        candidate: UsernameCandidate,
        delay: Optional[float] = None,
    ) -> asyncio.Task[None]:
        """Best-effort background bootstrap. Failures are logged, never raised."""
        wait = self.bootstrap_delay_seconds if delay is None else delay
        task = asyncio.create_task(
            self._ensure_profile_quietly(identity, candidate, wait),
            name=f"profile-bootstrap-{identity.id}",
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _ensure_profile_quietly(
        self,
        identity: Identity,
        candidate: UsernameCandidate,
        delay: float,
    ) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        try:
            await self.ensure_profile(identity, candidate)
        except Exception:
            logger.exception("profile.background_bootstrap_failed user=%s", identity.id)

    async def update_profile(self, user_id: str, changes: dict[str, Any]) -> Profile:
        unknown = sorted(set(changes) - EDITABLE_PROFILE_FIELDS)
        if unknown:
            raise ValidationError(unknown[0], "field cannot be edited")
        if not changes:
            raise ValidationError("profile", "no changes given")

        cleaned = dict(changes)
        if "username" in cleaned:
            username = str(cleaned["username"] or "").strip()
            if not username:
                raise ValidationError("username", "username cannot be empty")
            cleaned["username"] = username

        profile = await run_in_threadpool(self._repo.update, str(user_id), cleaned)
        if profile is None:
            raise ProfileNotFoundError(str(user_id))
        logger.info("profile.updated user=%s fields=%s", user_id, ",".join(sorted(cleaned)))
        return profile

    async def update_profile_image(self, user_id: str, data: bytes, extension: str = "jpg") -> Profile:
        if self._uploader is None:
            raise RuntimeError("ProfileService has no image uploader configured")
        url = await self._uploader.upload_or_placeholder(ImageKind.PROFILE, str(user_id), data, extension)
        return await self.update_profile(user_id, {"profile_image_url": url})
