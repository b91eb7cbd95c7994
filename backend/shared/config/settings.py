"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./menu_core.db"
    sql_echo: bool = False  # Log every SQL statement (noisy)

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = ""  # Empty = DEBUG when debug else INFO

    # Availability propagation
    # Upper bound on products visited by a single cascade walk. 0 = unlimited.
    propagation_max_nodes: int = 0

    def validate_production_settings(self) -> list[str]:
        """
        Validate that settings are sane for production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            if self.database_url.startswith("sqlite"):
                errors.append(
                    "DATABASE_URL must point to a server database in production"
                )

            if self.sql_echo:
                errors.append("SQL_ECHO must be False in production")

        if self.propagation_max_nodes < 0:
            errors.append("PROPAGATION_MAX_NODES must be 0 (unlimited) or positive")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

# Direct access to commonly used settings
DATABASE_URL = settings.database_url
