from __future__ import annotations

import asyncio
from typing import Optional

import pytest

from recipe_box.app.domain.errors import ProfileNotFoundError, StoreError, ValidationError
from recipe_box.app.domain.models import Identity, Profile, UsernameCandidate, UsernameSource
from recipe_box.app.services.image_upload_service import ImageKind
from recipe_box.app.services.profile_service import ProfileService, resolve_username


class UploaderStub:
    def __init__(self, url: str = "https://cdn.test/avatar.png") -> None:
        self.url = url
        self.calls: list[tuple[ImageKind, str, bytes, str]] = []

    async def upload_or_placeholder(self, kind: ImageKind, user_id: str, data: bytes, extension: str = "jpg") -> str:
        self.calls.append((kind, user_id, data, extension))
        return self.url


class TestResolveUsername:
    def test_explicit_wins(self) -> None:
        identity = Identity(id="u1", email="ana@example.com", metadata={"username": "meta"})
        candidate = resolve_username(identity, explicit=" Ana ")
        assert candidate == UsernameCandidate("Ana", UsernameSource.EXPLICIT)

    @pytest.mark.parametrize(
        "metadata, expected, source",
        [
            ({"username": "chef", "display_name": "Display"}, "chef", UsernameSource.METADATA_USERNAME),
            ({"display_name": "Display", "full_name": "Full"}, "Display", UsernameSource.DISPLAY_NAME),
            ({"full_name": "Full Name"}, "Full Name", UsernameSource.FULL_NAME),
            ({"username": "  "}, "ana", UsernameSource.EMAIL),
        ],
    )
    def test_metadata_priority(self, metadata, expected: str, source: UsernameSource) -> None:
        identity = Identity(id="u1", email="ana@example.com", metadata=metadata)
        candidate = resolve_username(identity)
        assert candidate.value == expected
        assert candidate.source is source

    def test_fallback(self) -> None:
        candidate = resolve_username(Identity(id="u1", email=None))
        assert candidate.value == "User"
        assert candidate.source is UsernameSource.FALLBACK


class TestEnsureProfile:
    def test_creates_missing_profile(self, profile_repo) -> None:
        service = ProfileService(profile_repo)
        identity = Identity(id="u1", email="ana@example.com")

        profile = asyncio.run(service.ensure_profile(identity, resolve_username(identity)))

        assert profile.username == "ana"
        assert list(profile_repo.rows) == ["u1"]

    def test_concurrent_calls_create_one_row(self, profile_repo) -> None:
        service = ProfileService(profile_repo)
        identity = Identity(id="u1", email="ana@example.com")
        candidate = resolve_username(identity)

        async def run_both() -> tuple[Profile, Profile]:
            return await asyncio.gather(
                service.ensure_profile(identity, candidate),
                service.ensure_profile(identity, candidate),
            )

        first, second = asyncio.run(run_both())

        assert len(profile_repo.rows) == 1
        assert first.user_id == second.user_id == "u1"

    def test_existing_profile_untouched_by_derived_name(self, profile_repo) -> None:
        profile_repo.rows["u1"] = Profile(user_id="u1", username="custom")
        service = ProfileService(profile_repo)
        identity = Identity(id="u1", email="ana@example.com")

        profile = asyncio.run(service.ensure_profile(identity, resolve_username(identity)))

        assert profile.username == "custom"
        assert profile_repo.update_calls == []

    def test_explicit_name_overrides_stored(self, profile_repo) -> None:
        profile_repo.rows["u1"] = Profile(user_id="u1", username="ana")
        service = ProfileService(profile_repo)
        identity = Identity(id="u1", email="ana@example.com")

        profile = asyncio.run(service.ensure_profile(identity, resolve_username(identity, "Chef Ana")))

        assert profile.username == "Chef Ana"
        assert profile_repo.update_calls == [("u1", {"username": "Chef Ana"})]

    @pytest.mark.parametrize("stored", ["ana", "User"])
    def test_metadata_name_upgrades_derived_username(self, profile_repo, stored: str) -> None:
        profile_repo.rows["u1"] = Profile(user_id="u1", username=stored)
        service = ProfileService(profile_repo)
        identity = Identity(id="u1", email="ana@example.com", metadata={"username": "chef_ana"})

        profile = asyncio.run(service.ensure_profile(identity, resolve_username(identity)))

        assert profile.username == "chef_ana"
        assert profile_repo.update_calls == [("u1", {"username": "chef_ana"})]

    def test_metadata_name_keeps_chosen_username(self, profile_repo) -> None:
        profile_repo.rows["u1"] = Profile(user_id="u1", username="Chef Ana")
        service = ProfileService(profile_repo)
        identity = Identity(id="u1", email="ana@example.com", metadata={"display_name": "Ana B"})

        profile = asyncio.run(service.ensure_profile(identity, resolve_username(identity)))

        assert profile.username == "Chef Ana"
        assert profile_repo.update_calls == []

    def test_store_errors_propagate(self, profile_repo) -> None:
        profile_repo.fail_with = StoreError("get_profile", "down")
        service = ProfileService(profile_repo)
        identity = Identity(id="u1")

        with pytest.raises(StoreError):
            asyncio.run(service.ensure_profile(identity, resolve_username(identity)))


class TestScheduleEnsureProfile:
    def test_background_creates_profile(self, profile_repo) -> None:
        service = ProfileService(profile_repo, bootstrap_delay_seconds=0)
        identity = Identity(id="u1", email="ana@example.com")

        async def run() -> None:
            await service.schedule_ensure_profile(identity, resolve_username(identity))

        asyncio.run(run())
        assert profile_repo.rows["u1"].username == "ana"

    def test_background_failure_is_swallowed(self, profile_repo, caplog) -> None:
        profile_repo.fail_with = StoreError("get_profile", "down")
        service = ProfileService(profile_repo, bootstrap_delay_seconds=0)
        identity = Identity(id="u1")

        async def run() -> Optional[BaseException]:
            task = service.schedule_ensure_profile(identity, resolve_username(identity))
            await task
            return task.exception()

        assert asyncio.run(run()) is None
        assert "profile.background_bootstrap_failed" in caplog.text


class TestUpdateProfile:
    def test_updates_allowed_fields(self, profile_repo) -> None:
        profile_repo.rows["u1"] = Profile(user_id="u1", username="ana")
        service = ProfileService(profile_repo)

        profile = asyncio.run(service.update_profile("u1", {"username": " Ana B ", "bio": "Cook"}))

        assert profile.username == "Ana B"
        assert profile.bio == "Cook"

    @pytest.mark.parametrize("changes", [{}, {"username": "  "}, {"user_id": "u2"}])
    def test_rejects_invalid_changes(self, profile_repo, changes) -> None:
        profile_repo.rows["u1"] = Profile(user_id="u1", username="ana")
        with pytest.raises(ValidationError):
            asyncio.run(ProfileService(profile_repo).update_profile("u1", changes))

    def test_missing_profile(self, profile_repo) -> None:
        with pytest.raises(ProfileNotFoundError):
            asyncio.run(ProfileService(profile_repo).update_profile("ghost", {"bio": "x"}))

    def test_update_profile_image(self, profile_repo) -> None:
        profile_repo.rows["u1"] = Profile(user_id="u1", username="ana")
        uploader = UploaderStub()
        service = ProfileService(profile_repo, uploader=uploader)  # type: ignore[arg-type]

        profile = asyncio.run(service.update_profile_image("u1", b"\x89PNG", "png"))

        assert profile.profile_image_url == "https://cdn.test/avatar.png"
        assert uploader.calls == [(ImageKind.PROFILE, "u1", b"\x89PNG", "png")]
