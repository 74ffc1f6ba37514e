# FILE: studio/search/service.py
"""
Search orchestration for the studio.

- Fans a query out to every enabled engine concurrently; each engine's
  failure is isolated and never cancels the others.
- Merges results in engine order and drops duplicate URLs.
- Fetches a single page as plain text for "read this result" requests,
  refusing non-http(s) schemes and private/loopback hosts on every
  redirect hop.
"""

from __future__ import annotations

import asyncio
import html as _html
import ipaddress
import logging
import os
import re
from typing import Optional, Sequence
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel

from studio.search.engines import ENGINES, KEYED_ENGINES, SearchResult
from studio.storage import models

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_S = float(os.getenv("SEARCH_TIMEOUT_S") or "10")
_FETCH_MAX_BYTES = int(os.getenv("FETCH_MAX_BYTES") or "2000000")
_MAX_REDIRECTS = 5
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResult] = []
    totalResults: int = 0
    sources: list[str] = []
    message: Optional[str] = None


class ContentFetchError(RuntimeError):
    """Raised when a page cannot be fetched."""


class UnsafeUrlError(ContentFetchError):
    """The URL, or a redirect target, has a disallowed scheme or host."""


def deduplicate_results(results: Sequence[SearchResult]) -> list[SearchResult]:
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for r in results:
        key = r.url.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(r)
    return unique


def html_to_text(s: str) -> str:
    s = re.sub(r"<script[\s\S]*?</script>", " ", s, flags=re.I)
    s = re.sub(r"<style[\s\S]*?</style>", " ", s, flags=re.I)
    s = re.sub(r"<noscript[\s\S]*?</noscript>", " ", s, flags=re.I)
    s = re.sub(r"<[^>]+>", " ", s)
    s = _html.unescape(s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def is_blocked_host(hostname: str) -> bool:
    """Loopback, private, link-local and unspecified addresses are off limits."""
    host = (hostname or "").strip("[]").lower()
    if not host or host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return False
    return ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_unspecified or ip.is_reserved


def check_fetch_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise UnsafeUrlError("Invalid URL protocol. Only HTTP and HTTPS are allowed.")
    if is_blocked_host(parsed.hostname or ""):
        raise UnsafeUrlError("Access to private/internal networks is not allowed.")


async def _read_capped(resp: httpx.Response) -> str:
    chunks: list[bytes] = []
    total = 0
    async for chunk in resp.aiter_bytes():
        chunks.append(chunk)
        total += len(chunk)
        if total >= _FETCH_MAX_BYTES:
            break
    return b"".join(chunks)[:_FETCH_MAX_BYTES].decode(resp.encoding or "utf-8", errors="replace")


def missing_key_engines(engines: Sequence[models.SearchEngine]) -> list[str]:
    missing = []
    for engine in engines:
        resolve = KEYED_ENGINES.get(engine.name.lower())
        if resolve and not resolve(engine.api_key):
            missing.append(engine.name)
    return missing


class SearchService:
    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout if timeout is not None else _DEFAULT_TIMEOUT_S
        self._transport = transport

    def _client(self, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport, **kwargs)

    async def _search_engine(
        self, client: httpx.AsyncClient, engine: models.SearchEngine, query: str, max_results: int
    ) -> list[SearchResult]:
        adapter = ENGINES.get(engine.name.lower())
        if adapter is None:
            logger.warning("[search] Unknown search engine: %s", engine.name)
            return []
        return await adapter(client, query, max_results, engine.api_key)

    async def search(
        self, engines: Sequence[models.SearchEngine], query: str, max_results: int = 10
    ) -> SearchResponse:
        async with self._client() as client:
            outcomes = await asyncio.gather(
                *[self._search_engine(client, e, query, max_results) for e in engines],
                return_exceptions=True,
            )

        all_results: list[SearchResult] = []
        sources: list[str] = []
        for engine, outcome in zip(engines, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("[search] %s failed: %s", engine.name, outcome)
                continue
            if outcome:
                all_results.extend(outcome)
                sources.append(engine.name)

        unique = deduplicate_results(all_results)
        return SearchResponse(
            query=query,
            results=unique[:max_results],
            totalResults=len(unique),
            sources=sources,
        )

    async def fetch_web_content(self, url: str) -> str:
        """Fetch a page as plain text. Redirects are followed by hand so every hop is checked."""
        check_fetch_url(url)

        current = url
        try:
            async with self._client() as client:
                for _ in range(_MAX_REDIRECTS + 1):
                    async with client.stream("GET", current, headers={"User-Agent": _USER_AGENT}) as resp:
                        if resp.is_redirect:
                            current = str(resp.url.join(resp.headers["location"]))
                            check_fetch_url(current)
                            logger.info("[search] Following redirect to %s", current)
                            continue
                        if resp.status_code >= 400:
                            raise ContentFetchError(f"Failed to fetch content from {url}: HTTP {resp.status_code}")
                        return html_to_text(await _read_capped(resp))
        except httpx.HTTPError as e:
            logger.error("[search] Error fetching %s: %s", url, e)
            raise ContentFetchError(f"Failed to fetch content from {url}: {e}") from e

        raise ContentFetchError(f"Failed to fetch content from {url}: too many redirects")
