from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./storefront.db"
    # "memory" or "sql"
    STORAGE_BACKEND: str = "sql"
    SEED_ON_STARTUP: bool = True
    RESET_DB: bool = False
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    SESSION_COOKIE_NAME: str = "session_id"
    ANONYMOUS_SESSION_ID: str = "anonymous"
    ADMIN_ROLE_CHECK: bool = False
    ADMIN_USERNAME: str = "admin"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def get_settings(**overrides) -> Settings:
    return Settings(**overrides)


settings = Settings()
