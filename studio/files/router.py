# FILE: studio/files/router.py
"""
FastAPI router for uploads.

Endpoints:
- GET    /api/files?userId=
- POST   /api/files/upload   (multipart: file, userId)
- GET    /api/files/{id}/content
- DELETE /api/files/{id}
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File as FastAPIFile, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from studio.db import get_db
from studio.files.service import FileService
from studio.storage import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["files"])


def get_file_service() -> FileService:
    return FileService()


@router.get("/files", response_model=List[schemas.FileOut])
def list_files(user_id: Optional[str] = Query(None, alias="userId"), db: Session = Depends(get_db)):
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    return service.list_files(db, user_id)


@router.post("/files/upload", response_model=schemas.FileOut)
async def upload_file(
    file: Optional[UploadFile] = FastAPIFile(None),
    user_id: Optional[str] = Form(None, alias="userId"),
    db: Session = Depends(get_db),
    files: FileService = Depends(get_file_service),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")

    content = await file.read()
    return files.save_file(
        db,
        user_id=user_id,
        original_name=file.filename or "uploaded_file",
        content=content,
        mime_type=file.content_type or "application/octet-stream",
    )


@router.get("/files/{file_id}/content")
def get_file_content(
    file_id: str,
    db: Session = Depends(get_db),
    files: FileService = Depends(get_file_service),
):
    record = service.get_file(db, file_id)
    if not record:
        raise HTTPException(status_code=404, detail="File not found")
    try:
        content = files.get_file_content(record)
    except FileNotFoundError:
        logger.error("[files] %s is missing from disk", record.path)
        raise HTTPException(status_code=404, detail="File content not found")

    return Response(
        content=content,
        media_type=record.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{record.original_name}"'},
    )


@router.delete("/files/{file_id}")
def delete_file(
    file_id: str,
    db: Session = Depends(get_db),
    files: FileService = Depends(get_file_service),
):
    if not files.delete_file(db, file_id):
        raise HTTPException(status_code=404, detail="File not found")
    return {"success": True}
