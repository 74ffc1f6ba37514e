# FILE: tests/conftest.py
"""
Pytest configuration for the studio test suite.

Configures:
- pytest-asyncio for async test support
- an in-memory SQLite database shared across connections (StaticPool)
- a TestClient with get_db overridden; startup hooks are not run
- UPLOAD_DIR / GENERATED_PROJECTS_DIR pointed at tmp_path
"""
import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def db_engine():
    from studio.db import Base
    from studio.storage import models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage_dirs(tmp_path, monkeypatch):
    uploads = tmp_path / "uploads"
    generated = tmp_path / "generated-projects"
    monkeypatch.setenv("UPLOAD_DIR", str(uploads))
    monkeypatch.setenv("GENERATED_PROJECTS_DIR", str(generated))
    return {"uploads": uploads, "generated": generated}


@pytest.fixture(autouse=True)
def _reset_sessions():
    from studio.auth import clear_sessions

    clear_sessions()
    yield
    clear_sessions()


@pytest.fixture
def app(session_factory, storage_dirs):
    import main
    from studio.db import get_db

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = _override_get_db
    yield main.app
    main.app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def session_headers(client):
    """Headers carrying a fresh demo session."""
    resp = client.post("/api/auth/demo-login")
    assert resp.status_code == 200
    return {"X-Session-Id": resp.json()["sessionId"]}
