# FILE: tests/test_chat_router.py
"""
Tests for studio/chat
Conversation and message endpoints plus JSON / Markdown export.
"""


def _create_conversation(client, title="Test chat", headers=None):
    resp = client.post("/api/conversations", json={"title": title}, headers=headers or {})
    assert resp.status_code == 200
    return resp.json()


class TestConversations:
    def test_anonymous_conversations_belong_to_demo_user(self, client):
        conv = _create_conversation(client)
        assert conv["userId"] == "demo-user"
        assert [c["id"] for c in client.get("/api/conversations").json()] == [conv["id"]]

    def test_session_user_owns_conversation(self, client, session_headers):
        conv = _create_conversation(client, headers=session_headers)
        assert conv["userId"] != "demo-user"
        assert client.get("/api/conversations").json() == []
        assert len(client.get("/api/conversations", headers=session_headers).json()) == 1

    def test_blank_title_rejected(self, client):
        assert client.post("/api/conversations", json={"title": "   "}).status_code == 400

    def test_missing_title_is_validation_error(self, client):
        resp = client.post("/api/conversations", json={})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid request data"

    def test_delete(self, client):
        conv = _create_conversation(client)
        assert client.delete(f"/api/conversations/{conv['id']}").json() == {"success": True}
        assert client.delete(f"/api/conversations/{conv['id']}").status_code == 404


class TestMessages:
    def test_create_and_list(self, client):
        conv = _create_conversation(client)
        for role, content in (("user", "Hello"), ("assistant", "Hi there")):
            resp = client.post(
                "/api/messages",
                json={"conversationId": conv["id"], "role": role, "content": content},
            )
            assert resp.status_code == 200

        messages = client.get(f"/api/conversations/{conv['id']}/messages").json()
        assert [m["content"] for m in messages] == ["Hello", "Hi there"]
        assert messages[0]["role"] == "user"

    def test_metadata_preserved(self, client):
        conv = _create_conversation(client)
        resp = client.post(
            "/api/messages",
            json={
                "conversationId": conv["id"],
                "role": "assistant",
                "content": "x",
                "metadata": {"model": "llama2-7b-chat"},
            },
        )
        assert resp.json()["metadata"] == {"model": "llama2-7b-chat"}

    def test_unknown_conversation(self, client):
        resp = client.post(
            "/api/messages",
            json={"conversationId": "missing", "role": "user", "content": "x"},
        )
        assert resp.status_code == 404

    def test_invalid_role(self, client):
        conv = _create_conversation(client)
        resp = client.post(
            "/api/messages",
            json={"conversationId": conv["id"], "role": "robot", "content": "x"},
        )
        assert resp.status_code == 400


class TestExport:
    def _seeded(self, client):
        conv = _create_conversation(client, "Design review")
        client.post("/api/messages", json={"conversationId": conv["id"], "role": "user", "content": "Question?"})
        client.post("/api/messages", json={"conversationId": conv["id"], "role": "assistant", "content": "Answer."})
        return conv

    def test_json_export(self, client):
        conv = self._seeded(client)
        resp = client.post("/api/export/conversation", json={"conversationId": conv["id"], "format": "json"})
        assert resp.status_code == 200
        assert f'conversation-{conv["id"]}.json' in resp.headers["content-disposition"]
        body = resp.json()
        assert body["conversation"]["title"] == "Design review"
        assert len(body["messages"]) == 2
        assert "exportedAt" in body

    def test_markdown_export(self, client):
        conv = self._seeded(client)
        resp = client.post(
            "/api/export/conversation", json={"conversationId": conv["id"], "format": "markdown"}
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/markdown")
        text = resp.text
        assert text.startswith("# Design review")
        assert "## User" in text
        assert "## Assistant" in text
        assert text.count("---") == 2

    def test_bad_format(self, client):
        conv = self._seeded(client)
        resp = client.post("/api/export/conversation", json={"conversationId": conv["id"], "format": "pdf"})
        assert resp.status_code == 400

    def test_unknown_conversation(self, client):
        resp = client.post("/api/export/conversation", json={"conversationId": "missing"})
        assert resp.status_code == 404
