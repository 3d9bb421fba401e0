# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    # Tokens live for 48 hours
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 2880
    DATABASE_URL: str = "sqlite:///./database_stocklab.db"

    # Upper bound for lock waits and statements, in seconds
    DB_TIMEOUT_SECONDS: float = 5.0
    BCRYPT_ROUNDS: int = 12

    FRONTEND_URL: Optional[str] = None

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "application.log"

    # Used by populate_db.py to bootstrap the first administrator
    ADMIN_EMAIL: str = "admin@stocklab.co.id"
    ADMIN_PASSWORD: str = "admin123"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
