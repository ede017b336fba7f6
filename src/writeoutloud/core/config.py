"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class AuthConfig(BaseSettings):
    """Authentication backend configuration."""

    model_config = {"env_prefix": "WRITEOUTLOUD_AUTH_"}

    provider: str = "local"
    base_url: str = "http://localhost:8080"
    timeout_seconds: float = 10.0
    fixtures_path: str = "config/auth_fixtures.yml"
    accounts_path: str | None = None


class ValidationConfig(BaseSettings):
    """Credential policy configuration."""

    model_config = {"env_prefix": "WRITEOUTLOUD_VALIDATION_"}

    min_password_length: int = 6


class SessionStoreConfig(BaseSettings):
    """Session persistence configuration."""

    model_config = {"env_prefix": "WRITEOUTLOUD_SESSION_"}

    provider: str = "json"
    path: str = "data/session.json"
    database_url: str = "sqlite:///data/session.db"


class ProgressConfig(BaseSettings):
    """Practice progress persistence configuration."""

    model_config = {"env_prefix": "WRITEOUTLOUD_PROGRESS_"}

    path: str = "data/progress.json"


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "WRITEOUTLOUD_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    auth: AuthConfig = Field(default_factory=AuthConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    session: SessionStoreConfig = Field(default_factory=SessionStoreConfig)
    progress: ProgressConfig = Field(default_factory=ProgressConfig)
