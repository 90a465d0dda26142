"""
Test configuration and fixtures for the planner test suite.
"""
import os
import tempfile
from datetime import date
from types import SimpleNamespace

# settings are read at import time, so they must be in place first
_TMP_DIR = tempfile.mkdtemp(prefix="planner-tests-")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'bootstrap.db')}"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from planner.database import Base, enable_sqlite_foreign_keys, get_db, get_session_factory  # noqa: E402
from planner.main import app  # noqa: E402

PASSWORD = "Str0ng!Pass"


@pytest.fixture
def session_factory(tmp_path):
    """Fresh SQLite database per test, wired into the app's dependencies."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    yield TestingSessionLocal
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    return TestClient(app)


def register_and_login(client, email, full_name=None):
    response = client.post(
        "/auth/register",
        json={
            "email": email,
            "password": PASSWORD,
            "confirm_password": PASSWORD,
            "full_name": full_name,
        },
    )
    assert response.status_code == 201, response.text
    response = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}, token


@pytest.fixture
def auth(client):
    """Headers and raw token of a registered user."""
    headers, token = register_and_login(client, "owner@example.com", "Olive Owner")
    return SimpleNamespace(headers=headers, token=token)


@pytest.fixture
def other_auth(client):
    headers, token = register_and_login(client, "intruder@example.com")
    return SimpleNamespace(headers=headers, token=token)


@pytest.fixture
def project(client, auth):
    response = client.post(
        "/projects/",
        json={
            "name": "Launch",
            "description": "Website relaunch",
            "start_date": "2024-01-01",
            "end_date": "2024-01-31",
        },
        headers=auth.headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def make_task(client, auth, project):
    """Create a task in the fixture project through the API."""

    def _make(title, start="2024-01-10", end="2024-01-12", **fields):
        payload = {"title": title, "start_date": start, "end_date": end, **fields}
        response = client.post(
            f"/projects/{project['id']}/tasks", json=payload, headers=auth.headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make


def task_row(id, parent_id=None, order_index=0, start=date(2024, 1, 1), end=date(2024, 1, 3), **extra):
    """Plain stand-in for a stored task row."""
    fields = dict(
        id=id,
        parent_id=parent_id,
        order_index=order_index,
        title=f"Task {id}",
        description=None,
        start_date=start,
        end_date=end,
        progress=0,
        status="todo",
        assignee_id=None,
        assignee=None,
    )
    fields.update(extra)
    return SimpleNamespace(**fields)


def dependency_row(predecessor_id, successor_id, type="finish_to_start", id=None):
    return SimpleNamespace(id=id, predecessor_id=predecessor_id, successor_id=successor_id, type=type)


def build_chain(make_task, depth):
    """A root with ``depth`` tasks nested one below the other; returns (root, leaf)."""
    root = make_task("Level 0")
    parent = root
    for level in range(1, depth + 1):
        parent = make_task(f"Level {level}", parent_id=parent["id"])
    return root, parent


def tree_depth(forest):
    depth = 0
    stack = [(node, 1) for node in forest]
    while stack:
        node, level = stack.pop()
        depth = max(depth, level)
        stack.extend((child, level + 1) for child in node["subtasks"])
    return depth
