# src/config.py

from functools import lru_cache
from typing import Optional, List, Union

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Central application settings (Pydantic v2).

    - Aliases match the .env keys:
      APP_NAME, ENV, JWT_ALG, NOTIFICATION_SINK, DATABASE_URL
    - Database handles are NOT created here; see src.shared.database.
    """

    # ------------------------------------------------------------------------------------
    # App / API
    # ------------------------------------------------------------------------------------
    PROJECT_NAME: str = Field(default="clinic-scheduling-api", alias="APP_NAME")
    ENVIRONMENT: str = Field(default="dev", alias="ENV")  # dev|staging|prod
    API_V1_STR: str = Field(default="/api/v1")
    PROJECT_VERSION: str = Field(default="1.0.0")
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=True)

    # ------------------------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------------------------
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./clinic.db",
        description="Async SQLAlchemy URL (sqlite+aiosqlite or postgresql+asyncpg)",
    )
    TEST_DATABASE_URL: Optional[str] = Field(default=None)
    DATABASE_ECHO: bool = Field(default=False)
    DATABASE_CREATE_ALL: bool = Field(
        default=True,
        description="Create tables on startup (dev/sqlite). Use alembic in production.",
    )

    # ------------------------------------------------------------------------------------
    # JWT (verification of caller tokens only; issuance lives elsewhere)
    # ------------------------------------------------------------------------------------
    JWT_SECRET: str = Field(
        default="super-long-very-random-secret-change-me-now",
        description="HS256 secret or RS256 public key (never commit real secrets)",
    )
    JWT_ALGORITHM: str = Field(default="HS256", alias="JWT_ALG")  # HS256 | RS256

    # ------------------------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------------------------
    NOTIFICATION_SINK: str = Field(default="database")  # database | log

    # ------------------------------------------------------------------------------------
    # CORS / Web
    # ------------------------------------------------------------------------------------
    BACKEND_CORS_ORIGINS: Union[List[str], str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:8000",
        ]
    )

    # ------------------------------------------------------------------------------------
    # Feature Flags / Misc
    # ------------------------------------------------------------------------------------
    TESTING: bool = Field(default=False)

    # ------------------------------------------------------------------------------------
    # Helper properties
    # ------------------------------------------------------------------------------------
    @property
    def is_dev(self) -> bool:
        return self.ENVIRONMENT.lower() in {"dev", "development", "local"}

    @property
    def is_prod(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    def cors_origins(self) -> List[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, list):
            return self.BACKEND_CORS_ORIGINS
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            return [o.strip() for o in self.BACKEND_CORS_ORIGINS.split(",") if o.strip()]
        return []

    @property
    def effective_database_url(self) -> str:
        if self.TESTING and self.TEST_DATABASE_URL:
            return self.TEST_DATABASE_URL
        return self.DATABASE_URL

    # ------------------------------------------------------------------------------------
    # Pydantic v2 settings config
    # ------------------------------------------------------------------------------------
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "populate_by_name": True,   # enable aliases
        "extra": "ignore",          # don't crash on unrelated env keys
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
