"""
Shared fixtures.

Forces an in-memory sqlite database before any campbook module is
imported, and rebuilds the schema around every test.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from campbook.domain import models  # noqa: E402,F401
from campbook.infra.config import Settings  # noqa: E402
from campbook.infra.db import Base, SessionLocal, engine  # noqa: E402
from campbook.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def dev_settings() -> Settings:
    return Settings(ENV="dev", DATABASE_URL="sqlite://")


@pytest.fixture
def prod_settings() -> Settings:
    return Settings(ENV="prod", DATABASE_URL="sqlite://")


@pytest.fixture
def dev_client(dev_settings):
    with TestClient(create_app(dev_settings)) as client:
        yield client


@pytest.fixture
def prod_client(prod_settings):
    # 生产模式 cookie 带 Secure，需要 https
    with TestClient(create_app(prod_settings), base_url="https://testserver") as client:
        yield client


@pytest.fixture
def csrf_headers():
    """Fetch a token the way the SPA does and return the header to send."""

    def _fetch(client: TestClient) -> dict:
        resp = client.get("/api/csrf/restore")
        assert resp.status_code == 200
        return {"XSRF-Token": resp.json()["XSRF-Token"]}

    return _fetch


@pytest.fixture
def user(db) -> models.User:
    u = models.User(
        email="camper@example.com",
        username="camper",
        hashed_password="$2b$12$" + "a" * 53,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return u
