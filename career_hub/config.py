"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Redis (empty string disables caching)
    REDIS_URL: str = "redis://redis:6379/0"

    # Application
    APP_NAME: str = "Career Reach Hub API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5000"]
    FRONTEND_URL: str = "http://localhost:3000"

    # Authentication
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Quiz Settings
    QUIZ_CACHE_TTL: int = 3600  # 1 hour

    # Certificates
    CERTIFICATE_PREFIX: str = "CRH"
    CERTIFICATE_SUFFIX_LENGTH: int = 9
    CERTIFICATE_ID_RETRIES: int = 5

    # Email (empty SMTP_HOST disables sending)
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: float = 10.0
    EMAIL_FROM: str = "Career Reach Hub <no-reply@careerreachhub.com>"

    # Notification queue
    NOTIFICATION_QUEUE_SIZE: int = 1000
    NOTIFICATION_MAX_RETRIES: int = 3
    NOTIFICATION_BACKOFF: float = 2.0  # seconds, doubled per retry

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
