"""
Pytest configuration for noteserver tests
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="noteserver-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_DB_DIR}/test.db")
os.environ.setdefault("SESSION_SECRET", "test-secret")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("DISABLE_SSL", "true")
os.environ.setdefault("STATIC_DIRS", "")

import pytest
from fastapi.testclient import TestClient

from noteserver.core.config import Settings
from noteserver.core.database import Base, SessionLocal, engine
from noteserver.main import create_app
from noteserver.modules.users.service import UsersService


@pytest.fixture(autouse=True)
def _clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_settings():
    return Settings()


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user(db):
    return UsersService(db).register_user("alice", "wonderland")


@pytest.fixture
def logged_in(client, user):
    response = client.post(
        "/login",
        data={"username": "alice", "password": "wonderland"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    return client
