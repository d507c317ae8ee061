"""
Taskboard Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict

import pytest

from taskboard.core.derived import utcnow
from taskboard.db.session import Database
from taskboard.engine.config import SecurityConfig, TaskboardConfig
from taskboard.stores.tasks import TaskStore
from taskboard.stores.users import UserStore

# Minimum bcrypt cost keeps the suite fast
TEST_ROUNDS = 4


# ---------------------------------------------------------------------------
# Environment setup — fresh config and an in-memory database per test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Reset the cached config and drop TASKBOARD_* overrides between tests."""
    import taskboard.engine.config as cfg_mod

    for var in cfg_mod.ENV_OVERRIDES:
        monkeypatch.delenv(var, raising=False)
    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture
def test_config() -> TaskboardConfig:
    return TaskboardConfig(
        environment="test",
        security=SecurityConfig(bcrypt_rounds=TEST_ROUNDS),
    )


@pytest.fixture
def database():
    """In-memory SQLite with all tables, opened and closed per test."""
    db = Database("sqlite://").open(create_tables=True)
    yield db
    db.close()


@pytest.fixture
def user_store(database) -> UserStore:
    return UserStore(database, bcrypt_rounds=TEST_ROUNDS)


@pytest.fixture
def task_store(database, user_store) -> TaskStore:
    return TaskStore(database, user_store)


@pytest.fixture
def client(database, test_config):
    """FastAPI TestClient bound to the per-test database."""
    from fastapi.testclient import TestClient

    from taskboard.api.app import create_app

    app = create_app(database, test_config)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------

def user_payload(n: int = 1, **overrides: Any) -> Dict[str, Any]:
    data = {
        "name": f"User {n}",
        "email": f"user{n}@example.com",
        "password": "secret123",
    }
    data.update(overrides)
    return data


def task_payload(assigned_to: str, **overrides: Any) -> Dict[str, Any]:
    data = {
        "title": "Write report",
        "description": "Quarterly numbers",
        "dueDate": utcnow() + timedelta(days=3),
        "assignedTo": assigned_to,
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_user(user_store):
    """Create a user through the store and return its view."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        return user_store.create_user(user_payload(counter["n"], **overrides)).unwrap()

    return _make


@pytest.fixture
def make_task(task_store):
    """Create a task through the store and return its view."""

    def _make(assigned_to: str, **overrides):
        return task_store.create_task(task_payload(assigned_to, **overrides)).unwrap()

    return _make
