from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import Settings
from ..database import init_db
from .catalog import CatalogStore
from .legacy import LegacyOrderFile, migrate_legacy_orders
from .presets import seed_presets

logger = logging.getLogger(__name__)


def bootstrap(db: Session, settings: Settings, catalog: Optional[CatalogStore] = None) -> CatalogStore:
    """Create tables, load the builder catalog, seed presets and import legacy orders."""
    init_db(db.get_bind())
    catalog = catalog or CatalogStore()
    catalog.load(db)
    seed_presets(db)
    migrate_legacy_orders(db, LegacyOrderFile(settings.LEGACY_ORDERS_PATH))
    if not settings.admin_configured:
        logger.warning("ADMIN_PASSWORD_HASH is not set; admin login is disabled.")
    return catalog
