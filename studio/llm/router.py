# FILE: studio/llm/router.py
"""
FastAPI router for chat completions and saved LLM configurations.

Endpoints:
- POST /api/llm/chat
- POST /api/llm/test-connection
- GET  /api/llm/models
- GET|POST /api/llm-configurations
- PUT|DELETE /api/llm-configurations/{id}
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from studio.db import get_db
from studio.llm.schemas import (
    ChatRequest,
    ConnectionTestRequest,
    ConnectionTestResponse,
    LLMResponse,
    ModelListResponse,
)
from studio.llm.service import LLMService, LLMServiceError
from studio.storage import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["llm"])


def get_llm_service() -> LLMService:
    return LLMService()


@router.post("/llm/chat", response_model=LLMResponse)
async def chat(
    req: ChatRequest,
    db: Session = Depends(get_db),
    llm: LLMService = Depends(get_llm_service),
):
    config = service.get_llm_configuration(db, req.config_id)
    if not config:
        raise HTTPException(status_code=404, detail="LLM configuration not found")
    try:
        return await llm.send_message(config, req)
    except LLMServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/llm/test-connection", response_model=ConnectionTestResponse)
async def test_connection(req: ConnectionTestRequest, llm: LLMService = Depends(get_llm_service)):
    if not req.endpoint or not req.model:
        raise HTTPException(status_code=400, detail="endpoint and model are required")
    connected = await llm.test_connection(req.endpoint, req.model)
    return ConnectionTestResponse(connected=connected)


@router.get("/llm/models", response_model=ModelListResponse)
async def list_models(endpoint: Optional[str] = None, llm: LLMService = Depends(get_llm_service)):
    if not endpoint:
        raise HTTPException(status_code=400, detail="endpoint is required")
    try:
        models = await llm.get_available_models(endpoint)
    except LLMServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ModelListResponse(models=models)


# ============== CONFIGURATIONS ==============

@router.get("/llm-configurations", response_model=List[schemas.LLMConfigurationOut])
def list_configurations(user_id: Optional[str] = Query(None, alias="userId"), db: Session = Depends(get_db)):
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    return service.list_llm_configurations(db, user_id)


@router.post("/llm-configurations", response_model=schemas.LLMConfigurationOut)
def create_configuration(data: schemas.LLMConfigurationCreate, db: Session = Depends(get_db)):
    return service.create_llm_configuration(db, data)


@router.put("/llm-configurations/{config_id}", response_model=schemas.LLMConfigurationOut)
def update_configuration(
    config_id: str, data: schemas.LLMConfigurationUpdate, db: Session = Depends(get_db)
):
    config = service.update_llm_configuration(db, config_id, data.model_dump(exclude_unset=True))
    if not config:
        raise HTTPException(status_code=404, detail="LLM configuration not found")
    return config


@router.delete("/llm-configurations/{config_id}")
def delete_configuration(config_id: str, db: Session = Depends(get_db)):
    if not service.delete_llm_configuration(db, config_id):
        raise HTTPException(status_code=404, detail="LLM configuration not found")
    return {"success": True}
