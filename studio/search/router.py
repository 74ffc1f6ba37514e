# FILE: studio/search/router.py
"""
FastAPI router for web search and search engine settings.

Endpoints:
- POST /api/search
- POST /api/search/fetch-content
- GET  /api/search-engines
- PUT  /api/search-engines/{id}
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field
from sqlalchemy.orm import Session

from studio.db import get_db
from studio.search.service import (
    ContentFetchError,
    SearchResponse,
    SearchService,
    UnsafeUrlError,
    missing_key_engines,
)
from studio.storage import models, schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["search"])


class SearchRequest(schemas.CamelModel):
    query: Optional[str] = None
    user_id: Optional[str] = None
    max_results: int = Field(10, ge=1, le=50)


class FetchContentRequest(schemas.CamelModel):
    url: Optional[str] = None


class FetchContentResponse(schemas.CamelModel):
    content: str


def get_search_service() -> SearchService:
    return SearchService()


def to_safe_engine(engine: models.SearchEngine) -> schemas.SafeSearchEngineOut:
    return schemas.SafeSearchEngineOut(
        id=engine.id,
        user_id=engine.user_id,
        name=engine.name,
        enabled=engine.enabled,
        has_api_key=bool(engine.api_key),
        created_at=engine.created_at,
    )


@router.post("/search", response_model=SearchResponse, response_model_exclude_none=True)
async def search(
    req: SearchRequest,
    db: Session = Depends(get_db),
    searcher: SearchService = Depends(get_search_service),
):
    if not req.query or not req.query.strip():
        raise HTTPException(status_code=400, detail="query is required")

    engines = service.list_enabled_search_engines(db, req.user_id)
    result = await searcher.search(engines, req.query, req.max_results)

    if not result.results:
        missing = missing_key_engines(engines)
        if missing:
            verb = "requires" if len(missing) == 1 else "require"
            result.message = f"No results found. {', '.join(missing)} {verb} API key configuration."

    logger.info("[search] '%s' -> %d results from %s", req.query, len(result.results), result.sources)
    return result


@router.post("/search/fetch-content", response_model=FetchContentResponse)
async def fetch_content(req: FetchContentRequest, searcher: SearchService = Depends(get_search_service)):
    if not req.url:
        raise HTTPException(status_code=400, detail="url is required")
    try:
        content = await searcher.fetch_web_content(req.url)
    except UnsafeUrlError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ContentFetchError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return FetchContentResponse(content=content)


# ============== ENGINES ==============

@router.get("/search-engines", response_model=List[schemas.SafeSearchEngineOut])
def list_engines(user_id: Optional[str] = Query(None, alias="userId"), db: Session = Depends(get_db)):
    """Without userId only the global engines are listed."""
    return [to_safe_engine(e) for e in service.list_search_engines(db, user_id)]


@router.put("/search-engines/{engine_id}", response_model=schemas.SafeSearchEngineOut)
def update_engine(engine_id: str, data: schemas.SearchEngineUpdate, db: Session = Depends(get_db)):
    engine = service.update_search_engine(db, engine_id, data.model_dump(exclude_unset=True))
    if not engine:
        raise HTTPException(status_code=404, detail="Search engine not found")
    return to_safe_engine(engine)
