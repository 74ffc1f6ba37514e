# FILE: studio/llm/schemas.py
"""
Request/response schemas for OpenAI-compatible chat completion calls.
"""
from typing import List, Literal, Optional

from pydantic import Field

from studio.storage.schemas import CamelModel


class ChatMessage(CamelModel):
    role: Literal["system", "user", "assistant"]
    content: str


class LLMRequest(CamelModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    # Percentage scale (0-100), same as stored configurations
    temperature: Optional[int] = Field(None, ge=0, le=100)
    max_tokens: Optional[int] = Field(None, ge=1)


class LLMUsage(CamelModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LLMResponse(CamelModel):
    content: str = ""
    usage: Optional[LLMUsage] = None


class ChatRequest(LLMRequest):
    config_id: str


class ConnectionTestRequest(CamelModel):
    endpoint: Optional[str] = None
    model: Optional[str] = None


class ConnectionTestResponse(CamelModel):
    connected: bool


class ModelListResponse(CamelModel):
    models: List[str]
