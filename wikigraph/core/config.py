"""
Settings for the content graph service.

Values come from the environment (or a `.env` file), case-insensitively.
The database is either given whole as DATABASE_URL or assembled from the
POSTGRES_* parts; plain driver URLs are upgraded to their async drivers so
the same value works for the application and for Alembic.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

# Sync driver -> async driver used by the engine
ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}

# Async driver -> sync driver used by migrations
SYNC_DRIVERS = {
    "postgresql+asyncpg": "postgresql",
    "sqlite+aiosqlite": "sqlite",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "staging", "production", "test"] = "development"

    # Database
    postgres_user: str = "wikigraph"
    postgres_password: str = "wikigraph_dev_password"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "wikigraph"
    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL; overrides the POSTGRES_* parts",
    )
    db_echo: bool = False

    # HTTP
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    api_reload: bool = False
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        alias="cors_origins",
    )

    # Link graph and revision engine
    conflict_retry_attempts: int = Field(
        default=3, ge=1, le=10, description="Write attempts on ConflictError (API layer)"
    )
    broken_links_limit: int = Field(default=50, ge=1, le=500)
    suggestions_limit: int = Field(default=10, ge=1, le=50)
    versions_page_size: int = Field(default=50, ge=1, le=500)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    @field_validator("database_url")
    @classmethod
    def use_async_driver(cls, v: str | None) -> str | None:
        """postgres://... -> postgresql+asyncpg://..., sqlite://... -> sqlite+aiosqlite://..."""
        if not v:
            return None
        url = make_url(v)
        driver = ASYNC_DRIVERS.get(url.drivername)
        if driver is None:
            return v
        return url.set(drivername=driver).render_as_string(hide_password=False)

    @property
    def db_url(self) -> str:
        """Async URL used by the application engine."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def db_url_sync(self) -> str:
        """Same database with a synchronous driver, for Alembic."""
        url = make_url(self.db_url)
        driver = SYNC_DRIVERS.get(url.drivername, url.drivername)
        return url.set(drivername=driver).render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.db_url).get_backend_name() == "sqlite"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()


settings = get_settings()
