"""Web search across configured engines and page text fetching."""

from studio.search.service import ContentFetchError, SearchService, UnsafeUrlError

__all__ = ["ContentFetchError", "SearchService", "UnsafeUrlError"]
