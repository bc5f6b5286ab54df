# shopledger/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal

class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False
    HOST: str = "127.0.0.1"
    PORT: int = 4000

    # Security
    SECRET_KEY: str
    ALGORITHM: Literal["HS256", "HS512"] = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Database
    DATABASE_URL: str = "sqlite:///./shopledger.db"

    # Frontend (Vite dev server and the packaged desktop shell)
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "file://"]

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # First-run data
    SEED_DEFAULT_DATA: bool = True
    DEFAULT_OWNER_PASSWORD: str = "owner123"



    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()
