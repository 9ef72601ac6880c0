from __future__ import annotations


class StockwatchError(Exception):
    """Base error carrying a stable `kind` tag and a user-facing message.

    Errors are built once at the boundary where the external call is made.
    The original exception stays reachable through `__cause__` for logging.
    """

    kind = "internal"

    def __init__(self, message: str, *, kind: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        return self.message


class ConfigurationError(StockwatchError):
    """A required setting (connection string, API key) is missing."""

    kind = "configuration"


class UpstreamError(StockwatchError):
    """External API or database failure."""

    kind = "upstream"


class UpstreamHttpError(UpstreamError):
    def __init__(self, *, status_code: int, body: str, url: str | None = None) -> None:
        super().__init__(f"Upstream request failed with status {status_code}: {body}")
        self.status_code = status_code
        self.body = body
        self.url = url


class ValidationError(StockwatchError):
    kind = "validation"
