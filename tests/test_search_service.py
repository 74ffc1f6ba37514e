# FILE: tests/test_search_service.py
"""
Tests for studio/search
Engine adapters, fan-out merging, the SSRF guard on page fetches, and routes.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from studio.search import engines
from studio.search.engines import SearchResult
from studio.search.service import (
    ContentFetchError,
    SearchResponse,
    SearchService,
    UnsafeUrlError,
    deduplicate_results,
    html_to_text,
    is_blocked_host,
    missing_key_engines,
)


def _engine(name, api_key=None):
    return SimpleNamespace(name=name, api_key=api_key)


GOOGLE_PAYLOAD = {
    "items": [
        {"title": "Python", "link": "https://python.org", "snippet": "Official site"},
        {"title": "Docs", "link": "https://docs.python.org", "snippet": "Documentation"},
    ]
}
BING_PAYLOAD = {
    "webPages": {
        "value": [
            {"name": "Python.org", "url": "https://PYTHON.org", "snippet": "dup"},
            {"name": "Wiki", "url": "https://en.wikipedia.org/wiki/Python", "snippet": "Wiki"},
        ]
    }
}
DDG_PAYLOAD = {
    "Heading": "Python",
    "Abstract": "Python is a programming language.",
    "AbstractURL": "https://en.wikipedia.org/wiki/Python_(programming_language)",
    "RelatedTopics": [
        {"Text": "CPython - reference implementation", "FirstURL": "https://duckduckgo.com/CPython"},
        {"Name": "group without text"},
        {"Text": "PyPy - fast implementation", "FirstURL": "https://duckduckgo.com/PyPy"},
    ],
}


def _router_transport(seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        host = request.url.host
        if host == "www.googleapis.com":
            return httpx.Response(200, json=GOOGLE_PAYLOAD)
        if host == "api.bing.microsoft.com":
            return httpx.Response(200, json=BING_PAYLOAD)
        if host == "api.duckduckgo.com":
            return httpx.Response(200, json=DDG_PAYLOAD)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def search_keys(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    monkeypatch.setenv("GOOGLE_SEARCH_ENGINE_ID", "cx-id")
    monkeypatch.setenv("BING_API_KEY", "b-key")


@pytest.fixture
def no_search_keys(monkeypatch):
    for var in ("GOOGLE_API_KEY", "GOOGLE_SEARCH_ENGINE_ID", "BING_API_KEY"):
        monkeypatch.delenv(var, raising=False)


class TestEngines:
    @pytest.mark.asyncio
    async def test_google_params(self, search_keys):
        seen = []
        async with httpx.AsyncClient(transport=_router_transport(seen)) as client:
            results = await engines.search_google(client, "python", 25)
        assert [r.url for r in results] == ["https://python.org", "https://docs.python.org"]
        assert results[0].source == "Google"
        params = seen[0].url.params
        assert params["num"] == "10"
        assert params["cx"] == "cx-id"
        assert params["key"] == "g-key"

    @pytest.mark.asyncio
    async def test_engine_key_preferred(self, search_keys):
        seen = []
        async with httpx.AsyncClient(transport=_router_transport(seen)) as client:
            await engines.search_bing(client, "python", 100, api_key="row-key")
        assert seen[0].headers["Ocp-Apim-Subscription-Key"] == "row-key"
        assert seen[0].url.params["count"] == "50"

    @pytest.mark.asyncio
    async def test_missing_key_returns_empty(self, no_search_keys):
        async with httpx.AsyncClient(transport=_router_transport()) as client:
            assert await engines.search_google(client, "q", 5) == []
            assert await engines.search_bing(client, "q", 5) == []

    @pytest.mark.asyncio
    async def test_duckduckgo_abstract_then_topics(self):
        async with httpx.AsyncClient(transport=_router_transport()) as client:
            results = await engines.search_duckduckgo(client, "python", 10)
        assert results[0].title == "Python"
        assert results[0].snippet.startswith("Python is")
        assert [r.title for r in results[1:]] == ["CPython", "PyPy"]

    @pytest.mark.asyncio
    async def test_http_error_returns_empty(self, search_keys):
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        async with httpx.AsyncClient(transport=transport) as client:
            assert await engines.search_google(client, "q", 5) == []
            assert await engines.search_duckduckgo(client, "q", 5) == []

    @pytest.mark.asyncio
    async def test_network_error_returns_empty(self, search_keys):
        def boom(request):
            raise httpx.ConnectError("refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(boom)) as client:
            assert await engines.search_bing(client, "q", 5) == []


class TestHelpers:
    def test_deduplicate_case_insensitive_first_wins(self):
        results = [
            SearchResult(title="a", url="https://X.com", source="Google"),
            SearchResult(title="b", url="https://x.com", source="Bing"),
            SearchResult(title="c", url="https://y.com", source="Bing"),
        ]
        assert [r.title for r in deduplicate_results(results)] == ["a", "c"]

    def test_html_to_text(self):
        html = "<html><script>var x=1;</script><style>p{}</style><p>Hello&nbsp;<b>world</b></p>\n\n</html>"
        assert html_to_text(html) == "Hello world"

    @pytest.mark.parametrize(
        "host",
        ["localhost", "127.0.0.1", "10.1.2.3", "192.168.0.5", "172.16.3.4", "169.254.169.254", "::1", "0.0.0.0", ""],
    )
    def test_blocked_hosts(self, host):
        assert is_blocked_host(host) is True

    @pytest.mark.parametrize("host", ["example.com", "8.8.8.8", "python.org"])
    def test_allowed_hosts(self, host):
        assert is_blocked_host(host) is False

    def test_missing_key_engines(self, no_search_keys):
        found = missing_key_engines([_engine("Google"), _engine("Bing", "k"), _engine("DuckDuckGo")])
        assert found == ["Google"]


class TestSearchService:
    @pytest.mark.asyncio
    async def test_merge_order_sources_and_dedupe(self, search_keys):
        svc = SearchService(transport=_router_transport())
        result = await svc.search([_engine("Google"), _engine("Bing")], "python", 10)

        assert result.sources == ["Google", "Bing"]
        assert [r.url for r in result.results] == [
            "https://python.org",
            "https://docs.python.org",
            "https://en.wikipedia.org/wiki/Python",
        ]
        assert result.totalResults == 3

    @pytest.mark.asyncio
    async def test_truncates_to_max(self, search_keys):
        svc = SearchService(transport=_router_transport())
        result = await svc.search([_engine("Google"), _engine("Bing")], "python", 2)
        assert len(result.results) == 2
        assert result.totalResults == 3

    @pytest.mark.asyncio
    async def test_failing_engine_isolated(self, search_keys, monkeypatch):
        async def broken(client, query, max_results, api_key=None):
            raise RuntimeError("boom")

        monkeypatch.setitem(engines.ENGINES, "bing", broken)
        svc = SearchService(transport=_router_transport())
        result = await svc.search([_engine("Bing"), _engine("Google")], "python", 10)
        assert result.sources == ["Google"]
        assert len(result.results) == 2

    @pytest.mark.asyncio
    async def test_unknown_engine_yields_nothing(self):
        svc = SearchService(transport=_router_transport())
        result = await svc.search([_engine("AltaVista")], "python")
        assert result.results == []
        assert result.sources == []


class TestFetchWebContent:
    @pytest.mark.asyncio
    async def test_rejects_scheme(self):
        with pytest.raises(ContentFetchError, match="protocol"):
            await SearchService().fetch_web_content("ftp://example.com/file")

    @pytest.mark.asyncio
    async def test_rejects_private_network(self):
        with pytest.raises(ContentFetchError, match="private"):
            await SearchService().fetch_web_content("http://127.0.0.1:8000/admin")

    @pytest.mark.asyncio
    async def test_extracts_text(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                200,
                html="<html><head><style>x{}</style></head><body><h1>Title</h1><p>Body text</p></body></html>",
            )
        )
        text = await SearchService(transport=transport).fetch_web_content("https://example.com/")
        assert text == "Title Body text"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        with pytest.raises(ContentFetchError) as exc:
            await SearchService(transport=transport).fetch_web_content("https://example.com/missing")
        assert not isinstance(exc.value, UnsafeUrlError)

    @pytest.mark.asyncio
    async def test_redirect_to_private_host_rejected(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            if request.url.host == "example.com":
                return httpx.Response(302, headers={"Location": "http://127.0.0.1/secret"})
            return httpx.Response(200, html="<p>internal secret</p>")

        with pytest.raises(UnsafeUrlError, match="private"):
            await SearchService(transport=httpx.MockTransport(handler)).fetch_web_content("https://example.com/")
        assert seen == ["https://example.com/"]

    @pytest.mark.asyncio
    async def test_redirect_to_other_scheme_rejected(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(301, headers={"Location": "file:///etc/passwd"})
        )
        with pytest.raises(UnsafeUrlError, match="protocol"):
            await SearchService(transport=transport).fetch_web_content("https://example.com/")

    @pytest.mark.asyncio
    async def test_public_redirect_followed(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "/new"})
            return httpx.Response(200, html="<p>Moved here</p>")

        text = await SearchService(transport=httpx.MockTransport(handler)).fetch_web_content(
            "https://example.com/old"
        )
        assert text == "Moved here"

    @pytest.mark.asyncio
    async def test_redirect_loop_gives_up(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(302, headers={"Location": "https://example.com/again"})
        )
        with pytest.raises(ContentFetchError, match="too many redirects"):
            await SearchService(transport=transport).fetch_web_content("https://example.com/")


class TestSearchRoutes:
    @pytest.fixture
    def fake_search(self, app):
        from studio.search.router import get_search_service

        svc = MagicMock()
        svc.search = AsyncMock(return_value=SearchResponse(query="q"))
        svc.fetch_web_content = AsyncMock(return_value="page text")
        app.dependency_overrides[get_search_service] = lambda: svc
        return svc

    @pytest.fixture
    def seeded(self, session_factory):
        from studio.storage import service

        db = session_factory()
        try:
            service.seed_defaults(db)
        finally:
            db.close()

    def test_query_required(self, client, fake_search):
        assert client.post("/api/search", json={}).status_code == 400
        assert client.post("/api/search", json={"query": "  "}).status_code == 400

    def test_no_results_mentions_missing_keys(self, client, fake_search, seeded, no_search_keys):
        resp = client.post("/api/search", json={"query": "python"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["results"] == []
        message = body["message"]
        assert message.startswith("No results found. ")
        assert message.endswith(" require API key configuration.")
        assert "Google" in message and "Bing" in message

        engines_passed = fake_search.search.call_args.args[0]
        assert {e.name for e in engines_passed} == {"Google", "Bing"}

    def test_results_have_no_message(self, client, fake_search, seeded):
        fake_search.search.return_value = SearchResponse(
            query="python",
            results=[SearchResult(title="t", url="https://x.com", source="Google")],
            totalResults=1,
            sources=["Google"],
        )
        body = client.post("/api/search", json={"query": "python", "maxResults": 5}).json()
        assert "message" not in body
        assert body["sources"] == ["Google"]
        assert fake_search.search.call_args.args[2] == 5

    def test_fetch_content(self, client, fake_search):
        assert client.post("/api/search/fetch-content", json={"url": "https://x.com"}).json() == {
            "content": "page text"
        }
        assert client.post("/api/search/fetch-content", json={}).status_code == 400

    def test_fetch_content_rejected(self, client, fake_search):
        fake_search.fetch_web_content.side_effect = UnsafeUrlError("Access to private/internal networks is not allowed.")
        resp = client.post("/api/search/fetch-content", json={"url": "http://localhost"})
        assert resp.status_code == 400

    def test_fetch_content_upstream_failure(self, client, fake_search):
        fake_search.fetch_web_content.side_effect = ContentFetchError(
            "Failed to fetch content from https://x.com: HTTP 503"
        )
        resp = client.post("/api/search/fetch-content", json={"url": "https://x.com"})
        assert resp.status_code == 500
        assert resp.json()["detail"].endswith("HTTP 503")

    def test_engines_hide_keys(self, client, seeded):
        engines_list = client.get("/api/search-engines", params={"userId": "u1"}).json()
        assert [e["name"] for e in engines_list] == ["Bing", "DuckDuckGo", "Google"]
        assert all("apiKey" not in e for e in engines_list)
        assert all(e["hasApiKey"] is False for e in engines_list)

        google = next(e for e in engines_list if e["name"] == "Google")
        updated = client.put(f"/api/search-engines/{google['id']}", json={"apiKey": "secret"}).json()
        assert updated["hasApiKey"] is True
        assert "apiKey" not in updated

    def test_engines_without_user_are_global(self, client, seeded):
        resp = client.get("/api/search-engines")
        assert resp.status_code == 200
        assert [e["name"] for e in resp.json()] == ["Bing", "DuckDuckGo", "Google"]
        assert all(e["userId"] is None for e in resp.json())

    def test_update_unknown_engine(self, client):
        assert client.put("/api/search-engines/missing", json={"enabled": False}).status_code == 404
