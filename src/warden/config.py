"""Package configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``WARDEN_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WARDEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = "development"  # development, staging, production

    # Database
    database_url: str = "sqlite+aiosqlite:///./warden.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_echo: bool = False

    # Roles and permissions declaration
    roles_file: Path = Path("roles.yaml")

    # Table names, read once when the models are defined
    roles_table: str = "roles"
    permissions_table: str = "permissions"
    role_permission_table: str = "role_permission"
    role_user_table: str = "role_user"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # Error responses
    api_docs_base_url: str = "https://api.example.com"

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Normalize synchronous driver URLs to their async counterparts.

        Args:
            v: The configured database URL

        Returns:
            A URL usable with SQLAlchemy's async engine
        """
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.database_url.startswith("sqlite")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
