from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse, RedirectResponse

from stockwatch.core.config import settings
from stockwatch.domain.errors import ConfigurationError, StockwatchError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: dict | None = None


class SignInRequired(Exception):
    """Raised when a route needs a signed-in user and the request has none."""

    def __init__(self, redirect_to: str | None = None) -> None:
        super().__init__("Sign in required")
        self.redirect_to = redirect_to or settings.auth_sign_in_path


def raise_api_error(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict | None = None,
) -> None:
    raise ApiError(status_code=status_code, code=code, message=message, details=details)


def _error_response(*, status_code: int, code: str, message: str, details: dict | None = None) -> JSONResponse:
    error_payload: dict = {
        "code": code,
        "message": message,
    }
    if details is not None:
        error_payload["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error_payload})


_STATUS_BY_ERROR: tuple[tuple[type[StockwatchError], int], ...] = (
    (ConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
)


def status_for_error(exc: StockwatchError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def install_api_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(ApiError)
    async def _handle_api_error(_, exc: ApiError) -> JSONResponse:  # type: ignore[override]
        return _error_response(
            status_code=exc.status_code,
            code=exc.code,
            message=exc.message,
            details=exc.details,
        )

    @application.exception_handler(StockwatchError)
    async def _handle_stockwatch_error(_, exc: StockwatchError) -> JSONResponse:  # type: ignore[override]
        status_code = status_for_error(exc)
        if status_code >= 500:
            logger.warning("Request failed", extra={"kind": exc.kind, "status_code": status_code}, exc_info=exc)
        return _error_response(status_code=status_code, code=exc.kind, message=exc.message)

    @application.exception_handler(SignInRequired)
    async def _handle_sign_in_required(_, exc: SignInRequired) -> RedirectResponse:  # type: ignore[override]
        return RedirectResponse(url=exc.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
