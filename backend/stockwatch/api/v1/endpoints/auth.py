from __future__ import annotations

from fastapi import APIRouter, Depends, status

from stockwatch.api.deps import get_auth_service, get_bearer_token, get_current_user
from stockwatch.api.errors import raise_api_error
from stockwatch.api.v1.dto.auth import AccessTokenOut, SignInRequest, SignOutOut, SignUpRequest, UserOut
from stockwatch.api.v1.dto.mappers import to_access_token_out, to_user_out
from stockwatch.application.auth.service import AuthApplicationService
from stockwatch.domain.auth.constants import ERROR_EMAIL_ALREADY_REGISTERED
from stockwatch.domain.auth.schemas import SignUpData, User

router = APIRouter()


@router.post("/sign-up", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def sign_up(
    payload: SignUpRequest,
    service: AuthApplicationService = Depends(get_auth_service),
) -> UserOut:
    result = await service.sign_up(SignUpData(**payload.model_dump()))
    if not result.success or result.user is None:
        error = result.error or ""
        if error == ERROR_EMAIL_ALREADY_REGISTERED:
            raise_api_error(status_code=status.HTTP_409_CONFLICT, code="email_already_registered", message=error)
        raise_api_error(status_code=status.HTTP_400_BAD_REQUEST, code="sign_up_failed", message=error)
    return to_user_out(result.user)


@router.post("/sign-in", response_model=AccessTokenOut)
async def sign_in(
    payload: SignInRequest,
    service: AuthApplicationService = Depends(get_auth_service),
) -> AccessTokenOut:
    result = await service.sign_in(email=payload.email, password=payload.password)
    if not result.success or result.token is None:
        raise_api_error(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="sign_in_failed",
            message=result.error or "",
        )
    return to_access_token_out(result.token)


@router.post("/sign-out", response_model=SignOutOut)
async def sign_out(
    token: str = Depends(get_bearer_token),
    service: AuthApplicationService = Depends(get_auth_service),
) -> SignOutOut:
    result = await service.sign_out(token=token)
    if not result.success:
        raise_api_error(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="sign_out_failed",
            message=result.error or "",
        )
    return SignOutOut(success=True)


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)) -> UserOut:
    return to_user_out(current_user)
