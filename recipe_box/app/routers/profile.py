# recipe_box/app/routers/profile.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from recipe_box.app.deps import get_current_user, get_profile_service
from recipe_box.app.domain.models import Identity
from recipe_box.app.routers.uploads import extension_from
from recipe_box.app.schemas.profile import ProfileResponse, ProfileUpdate
from recipe_box.app.services.profile_service import ProfileService, resolve_username

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user: Identity = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    # Reading the profile also repairs a missed bootstrap
    profile = await profiles.ensure_profile(user, resolve_username(user))
    return ProfileResponse.model_validate(profile)


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileUpdate,
    user: Identity = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    profile = await profiles.update_profile(user.id, payload.model_dump(exclude_unset=True))
    return ProfileResponse.model_validate(profile)


@router.put("/image", response_model=ProfileResponse)
async def upload_profile_image(
    request: Request,
    user: Identity = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    data = await request.body()
    profile = await profiles.update_profile_image(user.id, data, extension_from(request))
    return ProfileResponse.model_validate(profile)
