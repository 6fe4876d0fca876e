from __future__ import annotations

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.config import Settings
from ..core.security import ensure_admin
from ..database import get_db
from ..services.cart import Cart, CartRegistry
from ..services.catalog import CatalogStore
from ..services.legacy import LegacyOrderFile

SESSION_ID_KEY = "sid"
ADMIN_FLAG_KEY = "is_admin"

DbSession = Annotated[Session, Depends(get_db)]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]


def get_catalog(request: Request) -> CatalogStore:
    return request.app.state.catalog


Catalog = Annotated[CatalogStore, Depends(get_catalog)]


def get_cart_registry(request: Request) -> CartRegistry:
    return request.app.state.carts


def get_session_cart(request: Request) -> Cart:
    """Cart bound to this session, created on first use."""
    session_id = request.session.get(SESSION_ID_KEY)
    if not session_id:
        session_id = uuid.uuid4().hex
        request.session[SESSION_ID_KEY] = session_id
    return get_cart_registry(request).get_or_create(session_id)


def peek_session_cart(request: Request) -> Optional[Cart]:
    return get_cart_registry(request).peek(request.session.get(SESSION_ID_KEY))


SessionCart = Annotated[Cart, Depends(get_session_cart)]
ExistingCart = Annotated[Optional[Cart], Depends(peek_session_cart)]


def require_admin(request: Request) -> None:
    ensure_admin(bool(request.session.get(ADMIN_FLAG_KEY)))


def get_order_mirror(settings: AppSettings) -> Optional[LegacyOrderFile]:
    if not settings.MIRROR_ORDERS_TO_FILE:
        return None
    return LegacyOrderFile(settings.LEGACY_ORDERS_PATH)


OrderMirror = Annotated[Optional[LegacyOrderFile], Depends(get_order_mirror)]
