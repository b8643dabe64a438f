"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

RecoverySettings is the only sub-config the recovery core reads; it is built
once at startup and injected into RecoveryService, so nothing in services/
touches the environment directly.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "password-recovery"


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Only required when THROTTLE_BACKEND=redis
    redis_uri: Optional[str] = None


class ThrottleSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # "memory" is only safe for a single long-lived process
    throttle_backend: Literal["mongo", "redis", "memory"] = "mongo"


class FirebaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Empty path → Application Default Credentials
    firebase_credentials_path: str = ""
    firebase_project_id: str = ""


class RecoverySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    from_email: str = ""
    email_api_key: str = ""
    default_redirect_url: str = "https://your-app.example.com/login"

    self_serve_window_seconds: int = Field(default=300, gt=0)
    self_serve_max_attempts: int = Field(default=5, ge=1)

    @property
    def email_configured(self) -> bool:
        return bool(self.email_api_key)


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    app_name: str = "password-recovery"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    redis: Optional[RedisSettings] = None
    throttle: Optional[ThrottleSettings] = None
    firebase: Optional[FirebaseSettings] = None
    recovery: Optional[RecoverySettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.redis is None:
            self.redis = RedisSettings()
        if self.throttle is None:
            self.throttle = ThrottleSettings()
        if self.firebase is None:
            self.firebase = FirebaseSettings()
        if self.recovery is None:
            self.recovery = RecoverySettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        if self.throttle.throttle_backend == "redis" and not self.redis.redis_uri:
            raise ValueError("THROTTLE_BACKEND=redis requires REDIS_URI")

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
