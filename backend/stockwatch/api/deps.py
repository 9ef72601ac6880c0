from __future__ import annotations

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from stockwatch.api.errors import SignInRequired
from stockwatch.application.auth.service import AuthApplicationService
from stockwatch.application.container import (
    build_auth_service,
    build_market_data_service,
    build_watchlist_service,
)
from stockwatch.application.market_data.service import MarketDataApplicationService
from stockwatch.application.watchlist.service import WatchlistApplicationService
from stockwatch.domain.auth.schemas import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_market_data_service() -> MarketDataApplicationService:
    return build_market_data_service()


def get_watchlist_service() -> WatchlistApplicationService:
    return build_watchlist_service()


def get_auth_service() -> AuthApplicationService:
    return build_auth_service()


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise SignInRequired()
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    service: AuthApplicationService = Depends(get_auth_service),
) -> User:
    try:
        return await service.get_current_user_from_token(token=token)
    except ValueError as exc:
        raise SignInRequired() from exc


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    service: AuthApplicationService = Depends(get_auth_service),
) -> User | None:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    try:
        return await service.get_current_user_from_token(token=credentials.credentials)
    except ValueError:
        return None
    except Exception:
        logger.warning("Optional user lookup failed", exc_info=True)
        return None
