"""Configuration using pydantic-settings.

Values come from ``RAVE_*`` environment variables or a ``.env`` file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Robot server settings."""

    model_config = SettingsConfigDict(
        env_prefix="RAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Robot to serve, as "package.module:attribute"
    robot: str = ""

    # Optional endpoint for pushing operation bundles outside a request
    rpc_url: str = ""
    rpc_token: str = ""

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
