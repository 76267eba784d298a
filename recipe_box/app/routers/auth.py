# recipe_box/app/routers/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from recipe_box.app.deps import get_access_token, get_auth_service, get_current_user
from recipe_box.app.domain.models import Identity
from recipe_box.app.schemas.auth import AuthResponse, CurrentUser, SignInRequest, SignUpRequest
from recipe_box.app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sign-up", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(
    payload: SignUpRequest,
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await auth.sign_up(payload.email, payload.password, payload.username)
    return AuthResponse.from_result(result)


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in(
    payload: SignInRequest,
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await auth.sign_in(payload.email, payload.password)
    return AuthResponse.from_result(result)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    token: str = Depends(get_access_token),
    auth: AuthService = Depends(get_auth_service),
) -> Response:
    await auth.sign_out(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=CurrentUser)
async def me(user: Identity = Depends(get_current_user)) -> CurrentUser:
    return CurrentUser.model_validate(user)
