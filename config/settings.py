from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal
import pydantic
from urllib.parse import quote_plus

class Settings(BaseSettings):
    """
    Manages all application settings and secrets.
    Reads from environment variables (and .env file).
    """

    # --- Core Application Configuration ---
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Credentials (JWT bearer tokens carrying scopes) ---
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    ALGORITHM: str = "HS256"

    # --- Task Queue Policy ---
    # How far into the future a task deadline may be set.
    MAX_TASK_DEADLINE_DAYS: int = 5

    # --- Storage ---
    # "sql" persists through SQLAlchemy, "memory" keeps tasks in-process.
    TASK_STORE_BACKEND: Literal["sql", "memory"] = "sql"

    POSTGRES_SERVER: str = "db"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "taskqueue"

    # Local development and tests run against a SQLite file instead.
    SQLITE_PATH: str | None = None

    @pydantic.computed_field
    @property
    def DATABASE_URL(self) -> str:
        """
        Construct the full async connection string.
        """
        if self.SQLITE_PATH:
            return f"sqlite+aiosqlite:///{self.SQLITE_PATH}"
        # Safely quote the password for the URL
        safe_password = quote_plus(self.POSTGRES_PASSWORD)
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{safe_password}"
            f"@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"
        )

    # --- Client ---
    ROOT_URL: str = "http://localhost:8000"

    # Pydantic-Settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        case_sensitive=False
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Returns a cached instance of the Settings object.
    Using @lru_cache ensures the .env file is read only once.
    """
    return Settings()

# Create a single, globally accessible settings instance
settings = get_settings()
