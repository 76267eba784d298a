"""
Auth gateway over Supabase Auth (GoTrue).
Turns provider errors into AuthError subclasses with user-facing messages and
kicks off the best-effort profile bootstrap after a session is obtained.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Optional

from starlette.concurrency import run_in_threadpool
from supabase import Client

from recipe_box.app.domain.errors import (
    AuthError,
    EmailNotConfirmedError,
    InvalidCredentialsError,
    ValidationError,
    WeakPasswordError,
)
from recipe_box.app.domain.models import AuthResult, Identity
from recipe_box.app.services.profile_service import ProfileService, resolve_username

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
_SPECIAL_CHARS = re.compile(r"[!@#$%^&*(),.?\":{}|<>_\-]")


def password_weaknesses(password: str) -> list[str]:
    reasons: list[str] = []
    if len(password or "") < MIN_PASSWORD_LENGTH:
        reasons.append(f"at least {MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"[A-Z]", password or ""):
        reasons.append("an uppercase letter")
    if not re.search(r"[0-9]", password or ""):
        reasons.append("a number")
    if not _SPECIAL_CHARS.search(password or ""):
        reasons.append("a special character")
    return reasons


def classify_auth_error(exc: Exception) -> AuthError:
    if isinstance(exc, AuthError):
        return exc
    code = str(getattr(exc, "code", "") or "").lower()
    message = str(getattr(exc, "message", None) or exc)
    lowered = message.lower()

    if code == "email_not_confirmed" or "email not confirmed" in lowered:
        return EmailNotConfirmedError(message)
    if code == "invalid_credentials" or "invalid login credentials" in lowered:
        return InvalidCredentialsError(message)
    if code == "weak_password":
        return WeakPasswordError([message])
    return AuthError(message)


def identity_from_user(user: Any) -> Identity:
    metadata = getattr(user, "user_metadata", None) or {}
    return Identity(
        id=str(user.id),
        email=getattr(user, "email", None),
        metadata=dict(metadata) if isinstance(metadata, dict) else {},
        email_confirmed=getattr(user, "email_confirmed_at", None) is not None,
    )


def _result_from_response(response: Any) -> AuthResult:
    user = getattr(response, "user", None)
    if user is None:
        raise AuthError("Auth provider returned no user")
    session = getattr(response, "session", None)
    return AuthResult(
        identity=identity_from_user(user),
        access_token=getattr(session, "access_token", None) if session else None,
        refresh_token=getattr(session, "refresh_token", None) if session else None,
    )


class AuthService:
    def __init__(self, client: Client, profiles: Optional[ProfileService] = None):
        self._client = client
        self._profiles = profiles

    async def sign_up(self, email: str, password: str, username: str) -> AuthResult:
        if not (username or "").strip():
            raise ValidationError("username", "username is required")
        weaknesses = password_weaknesses(password)
        if weaknesses:
            raise WeakPasswordError(weaknesses)

        credentials = {
            "email": email,
            "password": password,
            "options": {"data": {"username": username.strip()}},
        }
        try:
            response = await run_in_threadpool(self._client.auth.sign_up, credentials)
        except Exception as exc:
            logger.warning("auth.sign_up_failed email=%s error=%s", email, exc)
            raise classify_auth_error(exc) from exc

        result = _result_from_response(response)
        logger.info(
            "auth.sign_up user=%s confirmed=%s session=%s",
            result.identity.id,
            result.identity.email_confirmed,
            result.has_session,
        )
        # Without a session the profile is created on first sign-in instead
        if result.has_session:
            self._bootstrap(result.identity, explicit_username=username)
        return result

    async def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            response = await run_in_threadpool(
                self._client.auth.sign_in_with_password,
                {"email": email, "password": password},
            )
        except Exception as exc:
            logger.warning("auth.sign_in_failed email=%s error=%s", email, exc)
            raise classify_auth_error(exc) from exc

        result = _result_from_response(response)
        logger.info("auth.sign_in user=%s", result.identity.id)
        self._bootstrap(result.identity)
        return result

    async def sign_out(self, access_token: str) -> None:
        try:
            await run_in_threadpool(self._client.auth.admin.sign_out, access_token)
        except Exception as exc:
            logger.warning("auth.sign_out_failed error=%s", exc)
            raise classify_auth_error(exc) from exc

    async def current_identity(self, access_token: str) -> Identity:
        try:
            response = await run_in_threadpool(self._client.auth.get_user, access_token)
        except Exception as exc:
            raise AuthError("Invalid/expired token", user_message="Your session has expired. Please sign in again.") from exc

        user = getattr(response, "user", None) if response else None
        if user is None:
            raise AuthError("Invalid token", user_message="Your session has expired. Please sign in again.")
        return identity_from_user(user)

    def _bootstrap(self, identity: Identity, explicit_username: Optional[str] = None) -> None:
        if self._profiles is None:
            return
        candidate = resolve_username(identity, explicit_username)
        self._profiles.schedule_ensure_profile(identity, candidate)
