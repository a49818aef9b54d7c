from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "CodeStack API"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Database
    database_url: str
    database_migrations_url: str | None = None
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Snippets
    max_snippets: int = 5  # Creation is refused once this many snippets exist
    default_per_page: int = 15
    max_per_page: int = 100

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Strip blanks so an empty CORS_ORIGINS env value means no origins."""
        return [origin.strip() for origin in v if origin.strip()]

    @field_validator("max_snippets")
    @classmethod
    def validate_max_snippets(cls, v: int) -> int:
        if v < 0:
            raise ValueError("MAX_SNIPPETS must not be negative")
        return v

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    # Redis (optional - app works without it)
    redis_url: str | None = None  # e.g., "redis://localhost:6379/0"
    redis_pool_size: int = 10

    # Rate limiting for snippet mutations (POST/PUT/DELETE), keyed by client IP
    rate_limit_mutations: str = "50/day"


@lru_cache
def get_settings() -> Settings:
    return Settings()
