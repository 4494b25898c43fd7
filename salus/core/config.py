# salus/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra='ignore')

    # Application Settings
    APP_NAME: str = "Salus API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # Database Settings
    DATABASE_URL: str = "sqlite:///./salus.db"

    # Token Settings
    JWT_ACCESS_TOKEN_SECRET_KEY: str = "change-me-access"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    JWT_REFRESH_TOKEN_SECRET_KEY: str = "change-me-refresh"
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 10
    JWT_ALGORITHM: str = "HS256"

    # Cookie session used by federated (OAuth) logins
    SESSION_SECRET: str = "change-me-session"
    SESSION_MAX_AGE_SECONDS: int = 24 * 60 * 60

    # CORS Settings
    ALLOWED_ORIGINS: str = "*"

    # Request body limit
    MAX_REQUEST_BODY_SIZE: int = 16 * 1024  # 16kb

    # OTP Settings
    OTP_LENGTH: int = 6
    OTP_TTL_SECONDS: int = 300
    OTP_SESSION_BACKEND: str = "sql"  # "sql" or "redis"
    OTP_RATE_LIMIT_MAX_REQUESTS: int = 5
    OTP_RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # Redis (OTP sessions and rate limiting when configured)
    REDIS_URL: Optional[str] = None

    # Twilio Settings
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""

    # Brevo Email API
    BREVO_API_KEY: str = ""
    EMAIL_FROM_ADDRESS: str = "noreply@salus.example"
    EMAIL_FROM_NAME: str = "Salus"
    NOTIFIER_TIMEOUT_SECONDS: int = 15

    # Optional admin seeded at startup
    ADMIN_NAME: str = "Salus Admin"
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_MOBILE_NUMBER: Optional[str] = None

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings: Settings = get_settings()
