from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from .api import register_routers
from .api.handlers import register_exception_handlers
from .core.config import Settings, get_settings, resolve_session_secret
from .core.logging import configure_logging
from .database import build_engine, build_session_factory
from .services.bootstrap import bootstrap
from .services.cart import CartRegistry
from .services.catalog import CatalogStore

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    with app.state.session_factory() as db:
        bootstrap(db, settings, app.state.catalog)
    logger.info("%s ready (env=%s)", settings.APP_NAME, settings.APP_ENV)
    yield
    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.APP_NAME,
        description="Menu, custom pizza pricing, session carts, checkout and order tracking.",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    engine = build_engine(settings.DATABASE_URL)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.catalog = CatalogStore()
    app.state.carts = CartRegistry(ttl_seconds=settings.SESSION_MAX_AGE_SECONDS)

    app.add_middleware(
        SessionMiddleware,
        secret_key=resolve_session_secret(settings),
        session_cookie="pizzeria_session",
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        same_site="lax",
        https_only=settings.is_production,
    )

    register_exception_handlers(app)
    register_routers(app)

    @app.get("/health", tags=["Health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.APP_NAME, "version": settings.VERSION}

    return app


app = create_app()
