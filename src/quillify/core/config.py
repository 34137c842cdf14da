"""Quillify settings.

Every value can be set through a ``QUILLIFY_``-prefixed environment variable
or a ``.env`` file in the working directory. The settings object is built once
per process by :func:`get_settings`; tests clear its cache after changing the
environment.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "production", "testing"]
EmailProviderName = Literal["console", "smtp", "resend"]


class Settings(BaseSettings):
    """Process-wide configuration for the API, the CLI and the mailer."""

    model_config = SettingsConfigDict(
        env_prefix="QUILLIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Quillify"
    app_version: str = "0.1.0"
    environment: Environment = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    # Public address of the web client; emailed links point here.
    app_url: str = "http://localhost:3000"

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    database_url: str = "sqlite+aiosqlite:///./data/quillify.db"
    db_echo: bool = False
    # Pool options only apply to server databases such as PostgreSQL.
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600

    secret_key: str = Field(
        default="change-me-in-production-use-openssl-rand-hex-32",
        description="HMAC key for signing session tokens",
    )
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    session_expire_hours: int = 24
    remember_me_expire_days: int = 30
    cron_secret: str | None = Field(
        default=None,
        description="Bearer secret required by the token cleanup endpoint",
    )

    password_reset_token_expire_minutes: int = 30
    email_verification_token_expire_hours: int = 24

    email_provider: EmailProviderName = "console"
    mail_from_address: str = "noreply@quillify-app.com"
    mail_from_name: str = "Quillify"
    mail_reply_to: str | None = None
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_timeout: int = 10
    resend_api_key: str | None = None

    cors_origins: list[str] = Field(default=["http://localhost:3000"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value: str | list[str]) -> list[str]:
        """Accept ``QUILLIFY_CORS_ORIGINS=a,b`` as well as a JSON list."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("app_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def check_workers(self) -> "Settings":
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                f"QUILLIFY_WORKERS={self.workers} cannot be used with SQLite; "
                "run a single worker or point QUILLIFY_DATABASE_URL at PostgreSQL."
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()
