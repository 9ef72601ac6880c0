from pathlib import Path
import secrets

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, env_file_encoding="utf-8", extra="ignore")

    app_env: str = "dev"
    app_secret_key: str | None = None
    log_level: str = "INFO"

    auth_access_token_expire_days: int = 14
    auth_sign_in_path: str = "/sign-in"

    database_url: str | None = None

    finnhub_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FINNHUB_API_KEY", "NEXT_PUBLIC_FINNHUB_API_KEY"),
    )
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    finnhub_timeout_seconds: float = 10.0

    redis_url: str = "redis://localhost:6379/0"
    view_invalidation_channel: str = "stockwatch:views:invalidated"
    session_revocation_prefix: str = "stockwatch:sessions:revoked"
    response_cache_prefix: str = "stockwatch:finnhub:cache"

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    email_from: str | None = None

    news_summary_hour_utc: int = 12

    cors_allow_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    @model_validator(mode="after")
    def _validate_app_secret_key(self) -> "Settings":
        normalized = (self.app_secret_key or "").strip()
        insecure_placeholders = {
            "change-me",
            "changeme",
            "replace-me",
            "replace-with-strong-random-secret",
        }
        is_prod = self.app_env.lower() in {"prod", "production"}

        if not normalized:
            if is_prod:
                raise ValueError("APP_SECRET_KEY is required in production")
            normalized = secrets.token_urlsafe(48)

        if normalized.lower() in insecure_placeholders:
            if is_prod:
                raise ValueError("APP_SECRET_KEY must be replaced with a strong random secret in production")
            normalized = secrets.token_urlsafe(48)

        if len(normalized) < 32:
            raise ValueError("APP_SECRET_KEY must be at least 32 characters")

        self.app_secret_key = normalized
        return self

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.email_from)


settings = Settings()
