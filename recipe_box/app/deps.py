# recipe_box/app/deps.py (shared clients as lazy singletons, exposed as dependencies)

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from recipe_box.app.config import get_settings
from recipe_box.app.domain.errors import AuthError
from recipe_box.app.domain.models import Identity
from recipe_box.app.infra.db.supabase_repos import (
    SupabaseProfileRepository,
    SupabaseRecipeRepository,
    SupabaseSavedRecipeRepository,
    create_supabase_client,
)
from recipe_box.app.infra.storage.base import UploadStrategy
from recipe_box.app.infra.storage.r2_provider import R2UploadStrategy
from recipe_box.app.infra.storage.supabase_provider import (
    PROFILE_PATH_SCHEMES,
    RECIPE_PATH_SCHEMES,
    build_supabase_strategies,
)
from recipe_box.app.services.auth_service import AuthService
from recipe_box.app.services.image_upload_service import ImageUploadService
from recipe_box.app.services.profile_service import ProfileService
from recipe_box.app.services.recipe_service import RecipeService
from recipe_box.app.services.saved_recipes_service import SavedRecipesService
from recipe_box.app.services.search_service import SearchService
from recipe_box.services.mealdb_client import MealDbClient

_client: Client | None = None
_mealdb: MealDbClient | None = None
_uploader: ImageUploadService | None = None
_profiles: ProfileService | None = None


def get_supabase() -> Client:
    global _client
    if _client is None:
        settings = get_settings()
        _client = create_supabase_client(str(settings.SUPABASE_URL), settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


def get_mealdb() -> MealDbClient:
    global _mealdb
    if _mealdb is None:
        settings = get_settings()
        _mealdb = MealDbClient(
            base_url=settings.MEALDB_BASE_URL,
            timeout_seconds=settings.MEALDB_TIMEOUT_SECONDS,
            throttle_seconds=settings.MEALDB_THROTTLE_SECONDS,
            category_limit=settings.MEALDB_CATEGORY_LIMIT,
        )
    return _mealdb


async def close_mealdb() -> None:
    global _mealdb
    if _mealdb is not None:
        await _mealdb.aclose()
        _mealdb = None


def _r2_strategy(prefix: str) -> Optional[UploadStrategy]:
    settings = get_settings()
    if not settings.r2_configured:
        return None
    return R2UploadStrategy(
        account_id=settings.R2_ACCOUNT_ID or "",
        access_key_id=settings.R2_ACCESS_KEY_ID or "",
        secret_access_key=settings.R2_SECRET_ACCESS_KEY or "",
        bucket_name=settings.R2_BUCKET_NAME or "",
        public_url=settings.R2_PUBLIC_URL or "",
        prefix=prefix,
    )


def get_image_uploader() -> ImageUploadService:
    global _uploader
    if _uploader is None:
        client = get_supabase()
        bucket = get_settings().STORAGE_BUCKET
        profile_strategies = build_supabase_strategies(client, bucket, PROFILE_PATH_SCHEMES)
        recipe_strategies = build_supabase_strategies(client, bucket, RECIPE_PATH_SCHEMES)
        for strategies, prefix in ((profile_strategies, "profiles"), (recipe_strategies, "recipes")):
            r2 = _r2_strategy(prefix)
            if r2 is not None:
                strategies.append(r2)
        _uploader = ImageUploadService(profile_strategies, recipe_strategies)
    return _uploader


def get_profile_service() -> ProfileService:
    # Singleton: it owns the background bootstrap tasks
    global _profiles
    if _profiles is None:
        _profiles = ProfileService(
            SupabaseProfileRepository(get_supabase()),
            uploader=get_image_uploader(),
            bootstrap_delay_seconds=get_settings().PROFILE_BOOTSTRAP_DELAY_SECONDS,
        )
    return _profiles


def get_recipe_service(supa: Client = Depends(get_supabase)) -> RecipeService:
    return RecipeService(SupabaseRecipeRepository(supa))


def get_saved_recipes_service(supa: Client = Depends(get_supabase)) -> SavedRecipesService:
    return SavedRecipesService(SupabaseSavedRecipeRepository(supa), SupabaseRecipeRepository(supa))


def get_search_service(
    recipes: RecipeService = Depends(get_recipe_service),
    mealdb: MealDbClient = Depends(get_mealdb),
) -> SearchService:
    return SearchService(recipes, mealdb)


def get_auth_service(profiles: ProfileService = Depends(get_profile_service)) -> AuthService:
    # sign-in stores the session on the client, so it gets a client of its own
    settings = get_settings()
    client = create_supabase_client(str(settings.SUPABASE_URL), settings.SUPABASE_SERVICE_ROLE_KEY)
    return AuthService(client, profiles)


auth_scheme = HTTPBearer(auto_error=False)


def get_access_token(
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
) -> str:
    if cred is None or cred.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    return cred.credentials


async def get_current_user(
    token: str = Depends(get_access_token),
    supa: Client = Depends(get_supabase),
) -> Identity:
    """
    Receives Authorization: Bearer <access_token> from Supabase,
    validates it against GoTrue and returns the identity.
    """
    try:
        return await AuthService(supa).current_identity(token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.user_message) from exc
