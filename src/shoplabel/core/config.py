"""
Application settings.

All process-wide configuration is read once from the environment (and an
optional ``.env`` file in the project root) into a ``Settings`` object.
Components receive the object at construction instead of reading
``os.environ`` themselves.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# src/shoplabel/core/config.py -> project root
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent

DEFAULT_JWT_SECRET = "changeme"


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "ShopLabel API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000
    CORS_ORIGINS: str = "*"

    # Database
    DATABASE_URL: str = "sqlite:///./shoplabel.db"

    # Authentication
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    STRIPE_PRICE_ID: str = ""
    STRIPE_METERED_PRICE_ID: str = ""
    FRONTEND_URL: str = "http://localhost:3001"

    # TikTok Shop
    TIKTOK_CLIENT_KEY: str = ""
    TIKTOK_CLIENT_SECRET: str = ""
    TIKTOK_REDIRECT_URI: str = ""
    TIKTOK_AUTH_BASE_URL: str = "https://auth.tiktok-shops.com"
    TIKTOK_API_BASE_URL: str = "https://open-api.tiktokglobalshop.com"
    TIKTOK_OAUTH_SCOPE: str = "shop.fulfillment.readonly,shop.fulfillment.update"
    OAUTH_STATE_TTL_SECONDS: int = 600

    # Packlink
    PACKLINK_API_BASE_URL: str = "https://api.packlink.com"

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Logging & monitoring
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("JWT_EXPIRE_DAYS", "OAUTH_STATE_TTL_SECONDS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @property
    def billing_configured(self) -> bool:
        """Stripe is usable only when a secret key was present at startup."""
        return bool(self.STRIPE_SECRET_KEY)

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def summary(self) -> dict:
        """Sanitized view of the settings (no secrets)."""
        return {
            "environment": self.ENVIRONMENT,
            "database_url": self.DATABASE_URL.split("@")[-1],
            "jwt_default_secret": self.JWT_SECRET == DEFAULT_JWT_SECRET,
            "billing_configured": self.billing_configured,
            "has_webhook_secret": bool(self.STRIPE_WEBHOOK_SECRET),
            "has_tiktok_app": bool(self.TIKTOK_CLIENT_KEY and self.TIKTOK_CLIENT_SECRET),
            "packlink_api_base_url": self.PACKLINK_API_BASE_URL,
            "frontend_url": self.FRONTEND_URL,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
