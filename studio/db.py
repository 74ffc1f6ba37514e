# FILE: studio/db.py
"""
SQLAlchemy wiring for the studio store.

STUDIO_DATABASE_URL selects the database (default: SQLite file under ./data).
Routers get a session per request through get_db(); startup code and
scripts use session_scope().
"""
import os
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

DATABASE_URL = os.getenv("STUDIO_DATABASE_URL", "sqlite:///./data/studio.db")


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # Sessions cross threads under FastAPI's threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


def _ensure_sqlite_dir(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


engine = create_engine(DATABASE_URL, echo=False, **_engine_kwargs(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    """Session for non-request code; rolled back if the block raises."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create the SQLite directory if needed, then every table."""
    from studio.storage import models  # noqa: F401

    _ensure_sqlite_dir(DATABASE_URL)
    Base.metadata.create_all(bind=engine)
