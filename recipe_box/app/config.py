from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    SUPABASE_URL: AnyUrl
    SUPABASE_SERVICE_ROLE_KEY: str
    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"
    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:8081"],
    )

    STORAGE_BUCKET: str = "profile-images"

    MEALDB_BASE_URL: str = "https://www.themealdb.com/api/json/v1/1"
    MEALDB_TIMEOUT_SECONDS: float = 10.0
    MEALDB_THROTTLE_SECONDS: float = Field(default=0.1, ge=0)
    MEALDB_CATEGORY_LIMIT: int = Field(default=20, ge=1)

    PROFILE_BOOTSTRAP_DELAY_SECONDS: float = Field(default=2.0, ge=0)

    # Optional R2 bucket used as last-resort image store
    R2_ACCOUNT_ID: Optional[str] = None
    R2_ACCESS_KEY_ID: Optional[str] = None
    R2_SECRET_ACCESS_KEY: Optional[str] = None
    R2_BUCKET_NAME: Optional[str] = None
    R2_PUBLIC_URL: Optional[str] = None

    @property
    def r2_configured(self) -> bool:
        return all(
            [
                self.R2_ACCOUNT_ID,
                self.R2_ACCESS_KEY_ID,
                self.R2_SECRET_ACCESS_KEY,
                self.R2_BUCKET_NAME,
                self.R2_PUBLIC_URL,
            ]
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
