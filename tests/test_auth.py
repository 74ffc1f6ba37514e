# FILE: tests/test_auth.py
"""
Tests for studio/auth
Demo login, session map and the X-Session-Id dependencies.
"""

import asyncio

import pytest
from fastapi import HTTPException


def run_async(coro):
    """Helper to run async functions in sync tests."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class TestSessions:
    def test_create_and_lookup(self):
        from studio.auth import sessions

        sid = sessions.create_session({"id": "u1", "username": "demo-user"})
        assert sid.startswith("session_")
        assert sessions.get_session_user(sid)["id"] == "u1"
        assert sessions.session_count() == 1

    def test_unknown_and_empty(self):
        from studio.auth import sessions

        assert sessions.get_session_user(None) is None
        assert sessions.get_session_user("session_0_nope") is None

    def test_end_session(self):
        from studio.auth import sessions

        sid = sessions.create_session({"id": "u1"})
        assert sessions.end_session(sid) is True
        assert sessions.end_session(sid) is False
        assert sessions.get_session_user(sid) is None

    def test_ids_unique(self):
        from studio.auth import sessions

        ids = {sessions.create_session({"id": "u"}) for _ in range(20)}
        assert len(ids) == 20


class TestDependencies:
    def test_require_auth_rejects_missing(self):
        from studio.auth import require_auth

        with pytest.raises(HTTPException) as exc:
            run_async(require_auth(None))
        assert exc.value.status_code == 401

    def test_require_auth_accepts_session(self):
        from studio.auth import create_session, require_auth

        sid = create_session({"id": "u1"})
        result = run_async(require_auth(sid))
        assert result.authenticated
        assert result.user_id == "u1"

    def test_optional_auth_anonymous_uses_demo_id(self):
        from studio.auth import DEMO_USERNAME, optional_auth

        result = run_async(optional_auth(None))
        assert result.authenticated is False
        assert result.user_id == DEMO_USERNAME

    def test_optional_auth_invalid_session(self):
        from studio.auth import optional_auth

        result = run_async(optional_auth("session_bogus"))
        assert result.authenticated is False
        assert result.error == "Invalid session"


class TestAuthRoutes:
    def test_demo_login(self, client):
        resp = client.post("/api/auth/demo-login")
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["username"] == "demo-user"
        assert "password" not in body["user"]
        assert body["sessionId"].startswith("session_")

    def test_demo_login_reuses_user(self, client):
        first = client.post("/api/auth/demo-login").json()
        second = client.post("/api/auth/demo-login").json()
        assert first["user"]["id"] == second["user"]["id"]
        assert first["sessionId"] != second["sessionId"]

    def test_me(self, client, session_headers):
        resp = client.get("/api/auth/me", headers=session_headers)
        assert resp.status_code == 200
        assert resp.json()["user"]["username"] == "demo-user"

    def test_me_requires_session(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_logout_invalidates(self, client, session_headers):
        assert client.post("/api/auth/logout", headers=session_headers).status_code == 200
        assert client.get("/api/auth/me", headers=session_headers).status_code == 401
