"""
Configuration module for the HealthyMother clinic service.
Uses Pydantic BaseSettings for validation - app fails fast if required config is missing.
"""
import logging
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with validation.
    Required fields will cause the app to fail fast if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    clinic_svc_db_dir: str = Field(default="data", description="Database directory")
    clinic_svc_db_file: str = Field(default="clinic.db", description="Database filename")
    clinic_svc_db_busy_timeout: int = Field(default=5000, description="SQLite busy timeout in milliseconds")

    # API Configuration
    clinic_svc_host: str = Field(default="0.0.0.0", description="API host")
    clinic_svc_port: int = Field(default=8000, description="API port")
    clinic_svc_reload: bool = Field(default=False, description="Enable hot reload")

    # Query limits
    clinic_svc_default_query_limit: int = Field(default=100, ge=1, description="Default list limit")
    clinic_svc_max_query_limit: int = Field(default=500, ge=1, description="Maximum list limit")

    # Clinical windows
    clinic_svc_due_soon_days: int = Field(
        default=30,
        ge=1,
        description="Patients due within this many days count as 'due soon'",
    )

    # API Authentication Configuration
    clinic_svc_api_key: str = Field(
        ...,  # Required - no default means fail fast if missing
        description="API key for authenticating dashboard requests",
        min_length=32,
    )

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Reject a default list limit larger than the maximum."""
        if self.clinic_svc_default_query_limit > self.clinic_svc_max_query_limit:
            raise ValueError(
                "CLINIC_SVC_DEFAULT_QUERY_LIMIT must not exceed CLINIC_SVC_MAX_QUERY_LIMIT"
            )
        return self

    @property
    def database_path(self) -> str:
        """Get the full database path."""
        return str(Path(self.clinic_svc_db_dir) / self.clinic_svc_db_file)

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.clinic_svc_db_dir).mkdir(parents=True, exist_ok=True)


# Create global settings instance - fails fast if required config is missing
settings = Settings()

# Ensure directories exist on import
settings.ensure_directories()

DATABASE_DIR = settings.clinic_svc_db_dir
DATABASE_FILE = settings.clinic_svc_db_file
DATABASE_PATH = settings.database_path
DATABASE_BUSY_TIMEOUT = settings.clinic_svc_db_busy_timeout

API_HOST = settings.clinic_svc_host
API_PORT = settings.clinic_svc_port
API_RELOAD = settings.clinic_svc_reload

DEFAULT_QUERY_LIMIT = settings.clinic_svc_default_query_limit
MAX_QUERY_LIMIT = settings.clinic_svc_max_query_limit
DUE_SOON_DAYS = settings.clinic_svc_due_soon_days

API_KEY = settings.clinic_svc_api_key
