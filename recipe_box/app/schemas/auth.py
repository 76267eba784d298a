# recipe_box/app/schemas/auth.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from recipe_box.app.domain.models import AuthResult


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str
    username: str


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str


class CurrentUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    email_confirmed: bool = True
    metadata: dict[str, Any] = Field(default_factory=dict)


class AuthResponse(BaseModel):
    user: CurrentUser
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    email_confirmed: bool = True

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(
            user=CurrentUser.model_validate(result.identity),
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            email_confirmed=result.identity.email_confirmed,
        )
