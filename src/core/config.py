"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/linksaver.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Session tokens
    jwt_secret: str
    jwt_expires_days: int = 7

    # Password hashing cost factor
    bcrypt_rounds: int = 10

    # Remote summarization - disabled when no key is configured
    jina_api_key: str | None = None
    summary_api_url: str = "https://r.jina.ai/"
    summary_response_field: str = "summary"

    # Outbound request timeouts (seconds)
    fetch_timeout: float = 10.0
    summary_timeout: float = 10.0

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        validation_alias="CORS_ORIGINS",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Refuse to start without a signing secret."""
        if not v.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return v

    @field_validator("jina_api_key")
    @classmethod
    def blank_api_key_is_unset(cls, v: str | None) -> str | None:
        """Treat a blank JINA_API_KEY the same as a missing one."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
