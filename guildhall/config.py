"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://guildhall:guildhall@db:5432/guildhall"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Authentication: tokens are issued elsewhere, we only verify them
    jwt_public_key: str = ""
    jwt_algorithms: list[str] = ["RS256"]
    jwt_audience: str | None = None
    jwt_issuer: str | None = None

    @field_validator("jwt_public_key", mode="before")
    @classmethod
    def unescape_newlines(cls, v: str) -> str:
        """PEM keys passed through env vars usually arrive with literal \\n."""
        if isinstance(v, str):
            return v.replace("\\n", "\n")
        return v

    # Image storage
    app_url: str = "http://localhost:8000"
    image_dir: str = "public/images"
    max_upload_bytes: int = 10_000_000

    # API
    cors_origins: list[str] = [
        "http://127.0.0.1:5173", "http://localhost:5173",
    ]
    graphiql: bool = True

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def image_base_url(self) -> str:
        return f"{self.app_url.rstrip('/')}/images"


@lru_cache
def get_settings() -> Settings:
    return Settings()
