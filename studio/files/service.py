# FILE: studio/files/service.py
"""
Upload storage: bytes on disk under UPLOAD_DIR, metadata in the files table.

Stored names are `<ms>-<random>-<basename>`; directory components of the
client-supplied name are dropped so an upload can never land outside
UPLOAD_DIR.
"""

import logging
import os
import secrets
import time
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from studio.files.analyzer import analyze_file
from studio.storage import models, schemas, service

logger = logging.getLogger(__name__)


def safe_basename(original_name: str) -> str:
    name = (original_name or "").replace("\\", "/").split("/")[-1].strip()
    if name in ("", ".", ".."):
        return "uploaded_file"
    return name


class FileService:
    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = Path(upload_dir or os.getenv("UPLOAD_DIR") or "./uploads")

    def _ensure_upload_dir(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def stored_name(self, original_name: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.token_hex(5)}-{safe_basename(original_name)}"

    def save_file(
        self,
        db: Session,
        user_id: str,
        original_name: str,
        content: bytes,
        mime_type: str,
    ) -> models.File:
        self._ensure_upload_dir()
        filename = self.stored_name(original_name)
        file_path = self.upload_dir / filename
        file_path.write_bytes(content)

        analysis = analyze_file(content, original_name, mime_type)
        logger.info("[files] Saved %s (%d bytes, type=%s)", filename, len(content), analysis["type"])

        return service.create_file(
            db,
            schemas.FileCreate(
                user_id=user_id,
                filename=filename,
                original_name=original_name,
                mime_type=mime_type,
                size=len(content),
                path=str(file_path),
                analysis=analysis,
            ),
        )

    def get_file_content(self, file: models.File) -> bytes:
        return Path(file.path).read_bytes()

    def delete_file(self, db: Session, file_id: str) -> bool:
        file = service.get_file(db, file_id)
        if not file:
            return False
        try:
            Path(file.path).unlink()
        except FileNotFoundError:
            logger.warning("[files] %s already missing from disk", file.path)
        return service.delete_file(db, file_id)
