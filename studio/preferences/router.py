# FILE: studio/preferences/router.py
"""
Endpoints:
- GET|PUT /api/user-preferences
- POST    /api/data/export
- POST    /api/data/clear-cache
- POST    /api/data/reset-settings
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from studio.db import get_db
from studio.search.router import to_safe_engine
from studio.storage import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["preferences"])


class PreferencesUpdateRequest(schemas.UserPreferencesUpdate):
    user_id: Optional[str] = None


class UserDataRequest(schemas.CamelModel):
    user_id: Optional[str] = None


def _dump(model: schemas.CamelModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


@router.get("/user-preferences", response_model=schemas.UserPreferencesOut)
def get_preferences(user_id: Optional[str] = Query(None, alias="userId"), db: Session = Depends(get_db)):
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    return service.get_user_preferences(db, user_id)


@router.put("/user-preferences", response_model=schemas.UserPreferencesOut)
def update_preferences(data: PreferencesUpdateRequest, db: Session = Depends(get_db)):
    if not data.user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    updates = data.model_dump(exclude_unset=True, exclude={"user_id"})
    return service.update_user_preferences(db, data.user_id, updates)


# ============== DATA MANAGEMENT ==============

@router.post("/data/export")
def export_user_data(data: UserDataRequest, db: Session = Depends(get_db)):
    if not data.user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    user_id = data.user_id

    return {
        "conversations": [_dump(schemas.ConversationOut.model_validate(c)) for c in service.list_conversations(db, user_id)],
        "projects": [_dump(schemas.ProjectOut.model_validate(p)) for p in service.list_projects(db, user_id)],
        "files": [_dump(schemas.FileOut.model_validate(f)) for f in service.list_files(db, user_id)],
        "llmConfigurations": [
            _dump(schemas.LLMConfigurationOut.model_validate(c)) for c in service.list_llm_configurations(db, user_id)
        ],
        "searchEngines": [_dump(to_safe_engine(e)) for e in service.list_search_engines(db, user_id)],
        "preferences": _dump(schemas.UserPreferencesOut.model_validate(service.get_user_preferences(db, user_id))),
        "exportDate": datetime.utcnow().isoformat() + "Z",
    }


@router.post("/data/clear-cache")
def clear_cache():
    # No server-side cache exists yet
    return {"success": True, "message": "Cache cleared successfully"}


@router.post("/data/reset-settings", response_model=schemas.UserPreferencesOut)
def reset_settings(data: UserDataRequest, db: Session = Depends(get_db)):
    if not data.user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    logger.info("[preferences] Resetting settings for %s", data.user_id)
    return service.reset_user_preferences(db, data.user_id)
