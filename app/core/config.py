"""Application configuration."""

import os
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Find .env file - check multiple possible locations
def find_env_file() -> Optional[Path]:
    """Find .env file in multiple possible locations."""
    current_dir = os.path.dirname(os.path.abspath(__file__))

    possible_paths = [
        os.path.join(current_dir, ".env"),
        os.path.join(os.path.dirname(current_dir), ".env"),
        os.path.join(os.path.dirname(os.path.dirname(current_dir)), ".env"),
    ]

    for path_str in possible_paths:
        if os.path.exists(path_str):
            path = Path(path_str)
            LOGGER.info(f"Found .env file at: {path}")
            return path

    LOGGER.debug("No .env file found in expected locations")
    return None


ENV_FILE = find_env_file()


class EngineSettings(BaseSettings):
    """Limits and tolerances applied by the workflow and reconciliation engine."""

    # Allowed |sum - total| in minor units at the submission gate
    tolerance_minor_units: int = Field(default=1, ge=0, validation_alias="ENGINE_TOLERANCE_MINOR_UNITS")
    max_installments: int = Field(default=12, ge=1, validation_alias="ENGINE_MAX_INSTALLMENTS")
    default_cadence_interval: int = Field(default=30, ge=1, validation_alias="ENGINE_CADENCE_INTERVAL")
    default_cadence_unit: Literal["days", "months"] = Field(
        default="days", validation_alias="ENGINE_CADENCE_UNIT"
    )
    due_soon_days: int = Field(default=5, ge=0, validation_alias="ENGINE_DUE_SOON_DAYS")
    timezone: str = Field(default="America/Sao_Paulo", validation_alias="ENGINE_TIMEZONE")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )


class DocumentStoreSettings(BaseSettings):
    """Connection settings for the external document store."""

    base_url: str = Field(default="http://localhost:3001", validation_alias="DOCUMENT_STORE_URL")
    api_token: str = Field(default="", validation_alias="DOCUMENT_STORE_TOKEN")
    timeout_seconds: float = Field(default=30.0, validation_alias="DOCUMENT_STORE_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )


class AuthSettings(BaseSettings):
    """Bearer token verification settings."""

    jwt_secret: str = Field(default="", validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    user_id_claim: str = Field(default="sub", validation_alias="JWT_USER_ID_CLAIM")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )

    def model_post_init(self, __context) -> None:
        if not self.jwt_secret:
            LOGGER.warning("JWT_SECRET is not set; every authenticated request will be refused")


class Settings(BaseSettings):
    """Unified application settings with nested models."""

    # Application Settings
    app_name: str = Field(default="Signflow", validation_alias="APP_NAME")
    app_version: str = "0.1.0"
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=True, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # API Settings
    api_v1_prefix: str = "/api/v1"
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")
    cors_origins: List[str] = Field(default=["http://localhost:3000"], validation_alias="CORS_ORIGINS")

    # Nested Settings - Initialize with env file explicitly
    engine: EngineSettings = Field(default_factory=lambda: EngineSettings())
    store: DocumentStoreSettings = Field(default_factory=lambda: DocumentStoreSettings())
    auth: AuthSettings = Field(default_factory=lambda: AuthSettings())

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def tolerance_minor_units(self) -> int:
        return self.engine.tolerance_minor_units

    @property
    def max_installments(self) -> int:
        return self.engine.max_installments


settings = Settings()
