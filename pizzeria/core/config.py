from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEV_SESSION_SECRET = "pizzeria-secret-dev-only"


class Settings(BaseSettings):
    APP_NAME: str = "Pizzeria Ordering API"
    VERSION: str = "0.1.0"
    APP_ENV: str = "development"

    # Sessions
    SESSION_SECRET: Optional[str] = None
    SESSION_MAX_AGE_SECONDS: int = 60 * 60

    # Admin console
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD_HASH: Optional[str] = None

    # Server
    PORT: int = 3000

    # Ordering
    TAX_RATE: float = 0.086
    ESTIMATED_MINUTES: int = 30

    # Persistence
    DATABASE_URL: str = "sqlite:///./data/app.db"
    LEGACY_ORDERS_PATH: str = "data/orders.json"
    MIRROR_ORDERS_TO_FILE: bool = False

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    @property
    def admin_configured(self) -> bool:
        return bool(self.ADMIN_PASSWORD_HASH)

    class Config:
        env_file = ".env"
        extra = "ignore"


def resolve_session_secret(settings: Settings) -> str:
    if settings.SESSION_SECRET:
        return settings.SESSION_SECRET
    if settings.is_production:
        raise ConfigurationError("SESSION_SECRET must be set in production.")
    logger.warning("SESSION_SECRET is not set. Using a weak fallback. DO NOT USE THIS IN PRODUCTION.")
    return DEV_SESSION_SECRET


@lru_cache()
def get_settings() -> Settings:
    return Settings()
