"""
Shared pytest fixtures for backend tests.
Each test gets its own SQLite file with the schema created directly (no alembic).
"""
import pytest
import sqlite3
import sys
import os

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import database
from config import Settings
from database import Database, TaskStore, UserStore
from fakes import FakeCompletionClient

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256"


@pytest.fixture
def test_db(monkeypatch, tmp_path):
    """
    Create an isolated test database for each test.
    Uses a temp file (not :memory:) because each store call opens a new connection.
    """
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr(database.Database, "init_db", lambda self: None)

    # Create tables directly (skip alembic for tests)
    conn = sqlite3.connect(db_path)
    conn.executescript("""
        CREATE TABLE tasks (
            id TEXT PRIMARY KEY,
            owner_id TEXT,
            document TEXT NOT NULL DEFAULT '{}',
            created_at TEXT NOT NULL
        );
        CREATE INDEX ix_tasks_owner_id ON tasks (owner_id);

        CREATE TABLE users (
            id TEXT PRIMARY KEY,
            name TEXT,
            email TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            created_at TEXT NOT NULL
        );
        CREATE UNIQUE INDEX ux_users_email ON users (email);
    """)
    conn.commit()
    conn.close()

    yield db_path


@pytest.fixture
def task_store(test_db):
    return TaskStore(Database(test_db))


@pytest.fixture
def user_store(test_db):
    return UserStore(Database(test_db))


@pytest.fixture
def settings(test_db):
    return Settings(
        database_path=test_db,
        auth_enabled=True,
        jwt_secret=TEST_SECRET,
        anthropic_api_key="",
    )


@pytest.fixture
def fake_completion():
    return FakeCompletionClient()


def _make_client(settings, fake_completion):
    from fastapi.testclient import TestClient
    import main

    return TestClient(main.create_app(settings, completion_client=fake_completion))


@pytest.fixture
def app_client(settings, fake_completion):
    """Test client for an app with auth enabled."""
    with _make_client(settings, fake_completion) as client:
        yield client


@pytest.fixture
def open_client(settings, fake_completion):
    """Test client for an app with auth disabled (tasks are not owner-scoped)."""
    open_settings = settings.model_copy(update={"auth_enabled": False, "jwt_secret": ""})
    with _make_client(open_settings, fake_completion) as client:
        yield client


@pytest.fixture
def login_as(app_client):
    """Register and log in a user; returns headers carrying their bearer token."""
    def _login_as(email: str, password: str = "hunter22", name: str = "Test User") -> dict:
        response = app_client.post("/auth/register", json={
            "name": name, "email": email, "password": password
        })
        assert response.status_code == 200
        response = app_client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login_as
