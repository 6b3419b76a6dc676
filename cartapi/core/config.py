from typing import Dict
from pydantic_settings import BaseSettings

# Placeholder shipped in the repo, never a real signing key
DEFAULT_SECRET_KEY = "supersecretkey_change_me_in_production"


class Settings(BaseSettings):
    PROJECT_NAME: str = "Cart API"
    API_PREFIX: str = "/api/v1"
    DATABASE_URL: str = "sqlite:///./data/db.sqlite3"
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ALGORITHM: str = "HS256"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5120

    # Access keys handed out by the auth service, mapped to their user id
    ACCESS_KEYS: Dict[str, int] = {
        "abcdef123456": 1,
        "bcdefg123456": 12,
        "cdefgh123456": 20,
    }

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
