from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from pizzeria import models  # noqa: F401  registers tables on Base.metadata
from pizzeria.core.config import Settings
from pizzeria.core.security import hash_password
from pizzeria.database import Base
from pizzeria.main import create_app
from pizzeria.services.catalog import CatalogStore

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "pepperoni-passphrase"


@pytest.fixture()
def db_session() -> Session:
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def catalog(db_session: Session) -> CatalogStore:
    store = CatalogStore()
    store.load(db_session)
    return store


@pytest.fixture(scope="session")
def admin_password_hash() -> str:
    return hash_password(ADMIN_PASSWORD)


@pytest.fixture()
def settings(tmp_path, admin_password_hash: str) -> Settings:
    return Settings(
        APP_ENV="test",
        SESSION_SECRET="test-session-secret",
        ADMIN_USERNAME=ADMIN_USERNAME,
        ADMIN_PASSWORD_HASH=admin_password_hash,
        DATABASE_URL=f"sqlite:///{tmp_path / 'app.db'}",
        LEGACY_ORDERS_PATH=str(tmp_path / "orders.json"),
    )


@pytest.fixture()
def admin_credentials() -> dict:
    return {"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}


@pytest.fixture()
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def admin_client(app, admin_credentials: dict):
    with TestClient(app) as test_client:
        response = test_client.post("/api/admin/login", json=admin_credentials)
        assert response.status_code == 200
        yield test_client
