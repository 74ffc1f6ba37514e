"""
LLM integration: OpenAI-compatible chat completions over saved configurations.
"""

from .service import LLMService, LLMServiceError, api_base_url

__all__ = ["LLMService", "LLMServiceError", "api_base_url"]
