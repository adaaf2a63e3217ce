"""
Settings tests
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from noteserver.core.config import Settings
from noteserver.core.database import make_engine
from noteserver.main import create_app
from noteserver.modules.users.repository import UsersRepository


def test_defaults(monkeypatch):
    for name in ("DISABLE_SSL", "STATIC_DIRS", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    cfg = Settings()
    assert cfg.PORT == 8000
    assert not cfg.is_prod
    assert not cfg.DISABLE_SSL
    assert cfg.static_dirs == ["dist", "public"]
    assert cfg.LANDING_PATH == "/notes"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("environment", "Production")
    monkeypatch.setenv("DISABLE_SSL", "1")
    monkeypatch.setenv("PORT", "5000")
    monkeypatch.setenv("STATIC_DIRS", " build , assets ,")
    cfg = Settings()
    assert cfg.is_prod
    assert cfg.DISABLE_SSL
    assert cfg.PORT == 5000
    assert cfg.static_dirs == ["build", "assets"]


def test_app_uses_its_own_database_url(test_settings, db, tmp_path):
    url = f"sqlite:///{tmp_path}/other.db"
    app = create_app(test_settings.model_copy(update={"DATABASE_URL": url}))
    with TestClient(app) as client:
        response = client.post("/signup", data={"username": "bob", "password": "builder"}, follow_redirects=False)
    assert response.status_code == 302

    other = make_engine(url)
    try:
        with Session(other) as session:
            assert UsersRepository(session).get_by_username("bob") is not None
    finally:
        other.dispose()
        app.state.db_engine.dispose()
    assert UsersRepository(db).get_by_username("bob") is None
