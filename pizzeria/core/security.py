from __future__ import annotations

import logging

from passlib.context import CryptContext

from .config import Settings
from .errors import ConfigurationError, UnauthorizedError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def ensure_admin_configured(settings: Settings) -> None:
    if not settings.admin_configured:
        raise ConfigurationError("Admin login is not configured on this server.")


def verify_admin_credentials(settings: Settings, username: str, password: str) -> bool:
    ensure_admin_configured(settings)
    if username != settings.ADMIN_USERNAME:
        return False
    try:
        return pwd_context.verify(password, settings.ADMIN_PASSWORD_HASH)
    except ValueError:
        logger.error("ADMIN_PASSWORD_HASH is not a recognised password hash")
        return False


def ensure_admin(is_admin: bool) -> None:
    """Gate for catalog and order-status mutations."""
    if not is_admin:
        raise UnauthorizedError("Unauthorized")
