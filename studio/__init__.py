"""
AI Assistant Studio backend.

FastAPI service that fronts an OpenAI-compatible LLM endpoint and adds web
search, file analysis, GitHub browsing and template-based project generation.
"""

__version__ = "1.0.0"
