# FILE: main.py
"""
AI Assistant Studio Backend - FastAPI Application
Version: 1.0.0

Features:
- Demo sign-in with in-memory sessions (X-Session-Id header)
- Conversations and messages with JSON / Markdown export
- Chat completions against local or remote OpenAI-compatible servers
- Multi-engine web search (Google, Bing, DuckDuckGo) and page fetching
- File upload with deterministic code / document analysis
- GitHub browsing, repository analysis and export
- Project templates, project generation and zip download
- Projects with versioned plans, user preferences, data export
"""
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from dotenv import load_dotenv

# Load .env FIRST before any other imports that might need env vars
load_dotenv()

from studio import __version__
from studio.db import init_db, session_scope
from studio.auth import auth_router
from studio.chat.router import router as chat_router
from studio.llm.router import router as llm_router
from studio.search.router import router as search_router
from studio.files.router import router as files_router
from studio.github.router import router as github_router
from studio.templates.router import router as templates_router
from studio.templates.service import initialize_default_templates
from studio.generator.router import router as generator_router
from studio.projects.router import router as projects_router
from studio.preferences.router import router as preferences_router
from studio.webhooks.router import router as webhooks_router
from studio.storage.service import seed_defaults

logging.basicConfig(
    level=(os.getenv("STUDIO_LOG_LEVEL") or "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("studio")

app = FastAPI(
    title="AI Assistant Studio",
    version=__version__,
    description="AI development companion with local LLM integration",
)

# ====== CORS ======

_cors_origins = [
    o.strip() for o in (os.getenv("STUDIO_CORS_ORIGINS") or "").split(",") if o.strip()
] or [
    "http://localhost:5173",
    "http://localhost:5000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:5000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ====== ERRORS ======

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("[error] %s %s failed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ====== STARTUP ======

@app.on_event("startup")
def on_startup():
    os.makedirs(os.getenv("UPLOAD_DIR") or "./uploads", exist_ok=True)
    os.makedirs(os.getenv("GENERATED_PROJECTS_DIR") or "./generated-projects", exist_ok=True)

    init_db()

    with session_scope() as db:
        seed_defaults(db)
        added = initialize_default_templates(db)
    if added:
        logger.info("[startup] Initialized %d project templates", added)

    logger.info("[startup] Checking environment variables...")
    for var, purpose in (
        ("GOOGLE_API_KEY", "Google search"),
        ("GOOGLE_SEARCH_ENGINE_ID", "Google search"),
        ("BING_API_KEY", "Bing search"),
        ("GITHUB_TOKEN", "GitHub integration and export"),
        ("LLM_API_KEY", "authenticated LLM endpoints"),
    ):
        if os.getenv(var):
            logger.info("[startup] %s: [OK] set (enables %s)", var, purpose)
        else:
            logger.info("[startup] %s: [X] NOT SET - %s disabled", var, purpose)


# ====== ROUTERS ======

app.include_router(auth_router)
app.include_router(chat_router)
app.include_router(llm_router)
app.include_router(search_router)
app.include_router(files_router)
app.include_router(github_router)
app.include_router(templates_router)
app.include_router(generator_router)
app.include_router(projects_router)
app.include_router(preferences_router)
app.include_router(webhooks_router)


# ====== PUBLIC ENDPOINTS ======

@app.get("/ping")
def ping():
    """Health check (public)."""
    return {"status": "ok", "version": __version__}
