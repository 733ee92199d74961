"""
Shared fixtures: a fresh SQLite database per test and a wired test client.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from chat.core import database
from chat.core.config import Settings, get_settings
from chat.main import app

TEST_USERNAME = "alice"
TEST_PASSWORD = "hunter2"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway database."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test_chat.db'}",
        log_level="DEBUG",
        log_format="text",
        password_hash_iterations=1_000,
    )


@pytest.fixture
def engine(settings, monkeypatch):
    """Create, seed and install a fresh database engine."""
    engine = create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},
    )
    database.enable_sqlite_foreign_keys(engine)
    database.init_db(engine)

    factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    monkeypatch.setattr(database, "_engine", engine)
    monkeypatch.setattr(database, "_SessionLocal", factory)

    yield engine

    engine.dispose()


@pytest.fixture
def db(engine):
    """A session on the test database."""
    with database.get_db_context() as session:
        yield session


@pytest.fixture
def client(engine, settings):
    """Create a test client."""
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client) -> dict:
    """Sign up and log in; the client keeps the session cookie."""
    credentials = {"username": TEST_USERNAME, "password": TEST_PASSWORD}
    assert client.post("/users", json=credentials).status_code == 201

    response = client.post("/login", json=credentials)
    assert response.status_code == 200
    return {"authorization": response.json()["token"]}
