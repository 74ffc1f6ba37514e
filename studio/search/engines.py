# FILE: studio/search/engines.py
"""
Search engine adapters.

Each adapter turns one provider's JSON API into a list of SearchResult and
never raises: a missing key, HTTP error or malformed payload is logged and
yields an empty list so that one engine cannot break a fan-out.

Environment:
- GOOGLE_API_KEY / GOOGLE_SEARCH_ENGINE_ID: Google Custom Search
- BING_API_KEY: Bing Web Search v7
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
BING_SEARCH_URL = "https://api.bing.microsoft.com/v7.0/search"
DUCKDUCKGO_URL = "https://api.duckduckgo.com/"


class SearchResult(BaseModel):
    title: str
    url: str
    snippet: str = ""
    source: str


def google_key(engine_key: Optional[str]) -> Optional[str]:
    return engine_key or os.getenv("GOOGLE_API_KEY")


def bing_key(engine_key: Optional[str]) -> Optional[str]:
    return engine_key or os.getenv("BING_API_KEY")


async def search_google(
    client: httpx.AsyncClient, query: str, max_results: int, api_key: Optional[str] = None
) -> list[SearchResult]:
    key = google_key(api_key)
    cx = os.getenv("GOOGLE_SEARCH_ENGINE_ID")
    if not key or not cx:
        logger.warning("[search] Google Search API key or Search Engine ID not configured")
        return []

    try:
        resp = await client.get(
            GOOGLE_SEARCH_URL,
            params={"key": key, "cx": cx, "q": query, "num": min(max_results, 10)},
        )
        if resp.status_code != 200:
            logger.error("[search] Google Search API error: %s", resp.status_code)
            return []
        data: dict[str, Any] = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("[search] Google search error: %s", e)
        return []

    return [
        SearchResult(
            title=str(item.get("title") or ""),
            url=str(item.get("link") or ""),
            snippet=str(item.get("snippet") or ""),
            source="Google",
        )
        for item in (data.get("items") or [])
        if item.get("link")
    ]


async def search_bing(
    client: httpx.AsyncClient, query: str, max_results: int, api_key: Optional[str] = None
) -> list[SearchResult]:
    key = bing_key(api_key)
    if not key:
        logger.warning("[search] Bing Search API key not configured")
        return []

    try:
        resp = await client.get(
            BING_SEARCH_URL,
            params={"q": query, "count": min(max_results, 50)},
            headers={"Ocp-Apim-Subscription-Key": key},
        )
        if resp.status_code != 200:
            logger.error("[search] Bing Search API error: %s", resp.status_code)
            return []
        data: dict[str, Any] = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("[search] Bing search error: %s", e)
        return []

    pages = (data.get("webPages") or {}).get("value") or []
    return [
        SearchResult(
            title=str(item.get("name") or ""),
            url=str(item.get("url") or ""),
            snippet=str(item.get("snippet") or ""),
            source="Bing",
        )
        for item in pages
        if item.get("url")
    ]


async def search_duckduckgo(
    client: httpx.AsyncClient, query: str, max_results: int, api_key: Optional[str] = None
) -> list[SearchResult]:
    """DuckDuckGo Instant Answer API: the abstract first, then related topics."""
    try:
        resp = await client.get(
            DUCKDUCKGO_URL,
            params={"q": query, "format": "json", "no_redirect": 1, "no_html": 1},
        )
        if resp.status_code != 200:
            logger.error("[search] DuckDuckGo API error: %s", resp.status_code)
            return []
        data: dict[str, Any] = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("[search] DuckDuckGo search error: %s", e)
        return []

    results: list[SearchResult] = []
    if data.get("Abstract"):
        results.append(
            SearchResult(
                title=str(data.get("Heading") or query),
                url=str(data.get("AbstractURL") or "#"),
                snippet=str(data["Abstract"]),
                source="DuckDuckGo",
            )
        )

    for topic in (data.get("RelatedTopics") or [])[: max(0, max_results - 1)]:
        text = topic.get("Text") if isinstance(topic, dict) else None
        first_url = topic.get("FirstURL") if isinstance(topic, dict) else None
        if text and first_url:
            results.append(
                SearchResult(
                    title=text.split(" - ")[0],
                    url=first_url,
                    snippet=text,
                    source="DuckDuckGo",
                )
            )

    return results[:max_results]


ENGINES = {
    "google": search_google,
    "bing": search_bing,
    "duckduckgo": search_duckduckgo,
}

# Engines that return nothing without a key
KEYED_ENGINES = {
    "google": google_key,
    "bing": bing_key,
}
