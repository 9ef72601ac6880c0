from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Protocol

from stockwatch.core.config import settings
from stockwatch.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    normalize_email,
    verify_password,
)
from stockwatch.domain.auth.constants import (
    ERROR_EMAIL_ALREADY_REGISTERED,
    ERROR_INVALID_EMAIL_OR_PASSWORD,
    ERROR_INVALID_TOKEN,
    ERROR_INVALID_USER_ID,
    ERROR_SIGN_IN_FAILED,
    ERROR_SIGN_OUT_FAILED,
    ERROR_SIGN_UP_FAILED,
    ERROR_USER_INACTIVE,
    EVENT_USER_CREATED,
)
from stockwatch.domain.auth.schemas import AccessToken, AuthResult, SignUpData, User, UserCredentials
from stockwatch.infrastructure.db.uow import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)


class EventDispatcher(Protocol):
    async def send(self, name: str, data: dict[str, Any]) -> None: ...


class SessionRevocationStore(Protocol):
    async def revoke(self, *, token_id: str, ttl_seconds: int) -> None: ...

    async def is_revoked(self, *, token_id: str) -> bool: ...


class AuthApplicationService:
    def __init__(
        self,
        *,
        uow: SqlAlchemyUnitOfWork,
        events: EventDispatcher | None = None,
        revocations: SessionRevocationStore | None = None,
    ) -> None:
        self._uow = uow
        self._events = events
        self._revocations = revocations

    async def sign_up(self, data: SignUpData) -> AuthResult:
        try:
            user = await self.register(data)
        except ValueError as exc:
            error = ERROR_EMAIL_ALREADY_REGISTERED if str(exc) == ERROR_EMAIL_ALREADY_REGISTERED else ERROR_SIGN_UP_FAILED
            return AuthResult(success=False, error=error)
        except Exception:
            logger.exception("Sign up failed")
            return AuthResult(success=False, error=ERROR_SIGN_UP_FAILED)

        await self._dispatch_user_created(data)
        return AuthResult(success=True, user=user)

    async def sign_in(self, *, email: str, password: str) -> AuthResult:
        try:
            token = await self.login(email=email, password=password)
        except ValueError:
            return AuthResult(success=False, error=ERROR_SIGN_IN_FAILED)
        except Exception:
            logger.exception("Sign in failed")
            return AuthResult(success=False, error=ERROR_SIGN_IN_FAILED)
        return AuthResult(success=True, token=token)

    async def sign_out(self, *, token: str) -> AuthResult:
        try:
            claims = decode_access_token(token=token, secret_key=settings.app_secret_key)
            if self._revocations is None:
                raise RuntimeError("Session revocation store not configured")
            await self._revocations.revoke(token_id=claims.token_id, ttl_seconds=claims.seconds_remaining())
        except Exception:
            logger.warning("Sign out failed", exc_info=True)
            return AuthResult(success=False, error=ERROR_SIGN_OUT_FAILED)
        return AuthResult(success=True)

    async def register(self, data: SignUpData) -> User:
        normalized_email = normalize_email(data.email)
        async with self._uow as uow:
            repo = _require_auth_repo(uow)
            if await repo.get_user_by_email_normalized(email_normalized=normalized_email) is not None:
                raise ValueError(ERROR_EMAIL_ALREADY_REGISTERED)
            user = await repo.create_user(
                email=data.email.strip(),
                email_normalized=normalized_email,
                password_hash=hash_password(data.password),
                name=data.full_name.strip(),
                country=data.country,
                investment_goals=data.investment_goals,
                risk_tolerance=data.risk_tolerance,
                preferred_industry=data.preferred_industry,
            )
            await uow.commit()
            return user

    async def login(self, *, email: str, password: str) -> AccessToken:
        user = await self._authenticate(email=email, password=password)
        expires_in = settings.auth_access_token_expire_days * 24 * 60 * 60
        token = create_access_token(
            subject=str(user.id),
            secret_key=settings.app_secret_key,
            expires_delta=timedelta(seconds=expires_in),
        )
        return AccessToken(access_token=token, token_type="bearer", expires_in=expires_in)

    async def get_user(self, *, user_id: int) -> User | None:
        if user_id < 1:
            raise ValueError(ERROR_INVALID_USER_ID)
        async with self._uow as uow:
            return await _require_auth_repo(uow).get_user_by_id(user_id=user_id)

    async def get_current_user_from_token(self, *, token: str) -> User:
        claims = decode_access_token(token=token, secret_key=settings.app_secret_key)
        try:
            user_id = int(claims.subject)
        except (TypeError, ValueError) as exc:
            raise ValueError(ERROR_INVALID_TOKEN) from exc

        if self._revocations is not None and await self._revocations.is_revoked(token_id=claims.token_id):
            raise ValueError(ERROR_INVALID_TOKEN)

        user = await self.get_user(user_id=user_id)
        if user is None or not user.is_active:
            raise ValueError(ERROR_INVALID_TOKEN)
        return user

    async def _authenticate(self, *, email: str, password: str) -> User:
        normalized_email = normalize_email(email)
        async with self._uow as uow:
            repo = _require_auth_repo(uow)
            user = await repo.get_user_by_email_normalized(email_normalized=normalized_email)
            if user is None or not verify_password(password, user.password_hash):
                raise ValueError(ERROR_INVALID_EMAIL_OR_PASSWORD)
            if not user.is_active:
                raise ValueError(ERROR_USER_INACTIVE)

            updated_user = await repo.update_last_login(user_id=user.id)
            await uow.commit()
            if updated_user is not None:
                return updated_user
            return _credentials_to_user(user)

    async def _dispatch_user_created(self, data: SignUpData) -> None:
        if self._events is None:
            return
        payload = {
            "email": data.email.strip(),
            "name": data.full_name.strip(),
            "country": data.country,
            "investment_goals": data.investment_goals,
            "risk_tolerance": data.risk_tolerance,
            "preferred_industry": data.preferred_industry,
        }
        try:
            await self._events.send(EVENT_USER_CREATED, payload)
        except Exception:
            logger.exception("User created event dispatch failed", extra={"email": payload["email"]})


def _require_auth_repo(uow: SqlAlchemyUnitOfWork):
    if uow.auth_repo is None:
        raise RuntimeError("Auth repository not configured")
    return uow.auth_repo


def _credentials_to_user(user: UserCredentials) -> User:
    return User(**user.model_dump(exclude={"email_normalized", "password_hash"}))
