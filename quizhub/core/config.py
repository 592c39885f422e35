"""
Application configuration, read from the environment (prefix ``QUIZHUB_``) and ``.env``.
"""
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Settings shared by the API server and the quiz client."""

    # ============= Application Settings =============
    APP_NAME: str = "Quizhub API"
    APP_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ============= Server Settings =============
    HOST: str = Field(default="localhost")
    PORT: int = Field(default=5000)
    RELOAD: bool = Field(default=False)
    CORS_ORIGINS: str = "*"

    # ============= Database Settings =============
    DATABASE_URL: str = Field(default="sqlite:///./quizhub.db")
    DATABASE_ECHO: bool = False

    # ============= Client Settings =============
    API_BASE_URL: str = Field(default="http://localhost:5000/api")
    API_TIMEOUT: Optional[float] = 10.0
    STORE_PATH: str = Field(default="./quizhub-store.json")

    # ============= Logging Settings =============
    LOG_LEVEL: str = "INFO"

    class Config:
        env_prefix = "QUIZHUB_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def cors_origins(self) -> List[str]:
        """CORS origins as a list; the setting is a comma separated string."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
