"""
Docstring for blog.config

Конфигурация приложения.
Всё берется из .env файла или переменных окружения.
"""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Pydantic Settings конфиг
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database (пользователи и локальное хранилище коллекций)
    DATABASE_URL: str = "sqlite:///./blog.db"

    # Redis (refresh-токены)
    REDIS_URL: str = "redis://localhost:6379/0"

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Server
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # RATE-LIMITS
    REGISTER_RATE_LIMIT: str = "5/minute" # Значения по-умолчанию, на случай
    LOGIN_RATE_LIMIT: str = "10/minute"   # если в .env не указаны иные значения

    # Storage adapter для постов и комментариев
    STORAGE_BACKEND: Literal["memory", "sql", "remote"] = "sql"
    REMOTE_STORAGE_URL: Optional[str] = None
    REMOTE_STORAGE_TOKEN: Optional[str] = None
    REMOTE_STORAGE_TIMEOUT: float = 5.0

    # Демо-данные при старте
    SEED_DEMO_DATA: bool = False

# Создаем глобальный объект settings
settings = Settings()
