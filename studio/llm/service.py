# FILE: studio/llm/service.py
"""
LLM client for OpenAI-compatible endpoints (Ollama, LM Studio, vLLM, OpenAI).

Every call builds a fresh AsyncOpenAI client pointed at `<endpoint>/v1`;
the endpoint comes from the stored configuration row.

Environment:
- LLM_API_KEY: bearer key sent to the endpoint (local servers ignore it)
- LLM_TIMEOUT_S: request timeout in seconds (default 60)
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, List, Optional

from openai import AsyncOpenAI, OpenAIError

from studio.llm.schemas import LLMRequest, LLMResponse, LLMUsage
from studio.storage import models

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_S = float(os.getenv("LLM_TIMEOUT_S") or "60")
_DEFAULT_TEMPERATURE = 70
_DEFAULT_MAX_TOKENS = 2048


class LLMServiceError(RuntimeError):
    """Raised when the endpoint cannot be reached or rejects the request."""


def api_base_url(endpoint: str) -> str:
    base = (endpoint or "").strip().rstrip("/")
    if base.endswith("/v1"):
        return base
    return f"{base}/v1"


def resolve_temperature(request: LLMRequest, config: models.LLMConfiguration) -> float:
    """Request value wins over the configuration; both are percentages."""
    if request.temperature is not None:
        pct = request.temperature
    elif config.temperature is not None:
        pct = config.temperature
    else:
        pct = _DEFAULT_TEMPERATURE
    return pct / 100


def resolve_max_tokens(request: LLMRequest, config: models.LLMConfiguration) -> int:
    return request.max_tokens or config.max_tokens or _DEFAULT_MAX_TOKENS


class LLMService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.api_key = api_key or os.getenv("LLM_API_KEY") or "not-needed"
        self.timeout = timeout if timeout is not None else _DEFAULT_TIMEOUT_S
        self._client_factory = client_factory or AsyncOpenAI

    def _make_client(self, endpoint: str):
        return self._client_factory(
            base_url=api_base_url(endpoint),
            api_key=self.api_key,
            timeout=self.timeout,
            max_retries=0,
        )

    async def send_message(self, config: models.LLMConfiguration, request: LLMRequest) -> LLMResponse:
        client = self._make_client(config.endpoint)
        try:
            completion = await client.chat.completions.create(
                model=config.model,
                messages=[m.model_dump() for m in request.messages],
                temperature=resolve_temperature(request, config),
                max_tokens=resolve_max_tokens(request, config),
                stream=False,
            )
        except OpenAIError as e:
            logger.error("[llm] Chat completion failed at %s: %s", config.endpoint, e)
            raise LLMServiceError(f"Failed to communicate with LLM: {e}") from e
        finally:
            await client.close()

        content = ""
        if completion.choices:
            content = completion.choices[0].message.content or ""

        usage = None
        if completion.usage is not None:
            usage = LLMUsage(
                prompt_tokens=completion.usage.prompt_tokens or 0,
                completion_tokens=completion.usage.completion_tokens or 0,
                total_tokens=completion.usage.total_tokens or 0,
            )

        return LLMResponse(content=content, usage=usage)

    async def _list_model_ids(self, endpoint: str) -> List[str]:
        client = self._make_client(endpoint)
        try:
            page = await client.models.list()
        finally:
            await client.close()
        return [m.id for m in (page.data or [])]

    async def test_connection(self, endpoint: str, model: str) -> bool:
        """True when the endpoint answers and serves `model`."""
        try:
            model_ids = await self._list_model_ids(endpoint)
        except OpenAIError as e:
            logger.warning("[llm] Connection test to %s failed: %s", endpoint, e)
            return False
        return model in model_ids

    async def get_available_models(self, endpoint: str) -> List[str]:
        try:
            return await self._list_model_ids(endpoint)
        except OpenAIError as e:
            logger.error("[llm] Listing models at %s failed: %s", endpoint, e)
            raise LLMServiceError(f"Failed to fetch available models: {e}") from e
