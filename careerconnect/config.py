"""
Configuration settings for the CareerConnect job board.
Values come from the environment or a local .env file.
"""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "CareerConnect Job Board API"
    APP_VERSION: str = "1.0.0"

    # Database (MongoDB)
    MONGO_URI: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "careerconnect"

    # Auth
    SECRET_KEY: str = "super_secret_random_key_CHANGE_THIS"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # CORS (comma-separated)
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    # Quiz reports
    REPORTS_DIR: str = "uploads/reports"
    REPORTS_URL_PREFIX: str = "/static/reports"

    # Jobs
    JOB_DEFAULT_DURATION_DAYS: int = 30

    # Messaging
    MESSAGE_PAGE_DEFAULT: int = 50
    MESSAGE_PAGE_MAX: int = 200

    # Uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
