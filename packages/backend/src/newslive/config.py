"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with NEWSLIVE_ prefix.
No config files — just env vars (12-factor app style).
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via NEWSLIVE_* env vars."""

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    news_channel: str = "news_updates"

    # Auth
    session_ttl_seconds: int = 24 * 60 * 60
    bcrypt_rounds: int = 10

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Listing
    default_page_size: int = 100
    max_page_size: int = 500

    model_config = {"env_prefix": "NEWSLIVE_"}

    @model_validator(mode="after")
    def validate_bcrypt_rounds(self):
        """bcrypt only accepts cost factors between 4 and 31."""
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError("NEWSLIVE_BCRYPT_ROUNDS must be between 4 and 31")
        if self.environment != "development" and self.bcrypt_rounds < 10:
            raise ValueError(
                "NEWSLIVE_BCRYPT_ROUNDS below 10 is only allowed in development"
            )
        return self


# Singleton — import this everywhere
settings = Settings()
