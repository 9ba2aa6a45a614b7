# app/core/config.py
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Classroom API"

    SECRET_KEY: str = "your-super-secret-jwt-key-change-in-prod"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    DATABASE_URL: str = "sqlite:///./classroom.db"

    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://127.0.0.1",
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    LOG_LEVEL: str = "INFO"

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # login/register throttling, per client and path
    RATE_LIMIT_REQUESTS: int = 20
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_KEYS: int = 10000

    # chatbot message throttling, per user
    CHAT_RATE_LIMIT_REQUESTS: int = 20
    CHAT_RATE_LIMIT_WINDOW_SECONDS: int = 60

    PASSWORD_MIN_LENGTH: int = 6
    CHATBOT_HISTORY_LIMIT: int = 10

    class Config:
        env_file = ".env"


settings = Settings()
