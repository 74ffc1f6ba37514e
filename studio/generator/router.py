# FILE: studio/generator/router.py
"""
Endpoints:
- POST /api/project-templates/{id}/generate   (session required)
- GET  /api/download/project/{id}             (session required, owner only)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from pydantic import Field
from sqlalchemy.orm import Session

from studio.auth import AuthResult, require_auth
from studio.db import get_db
from studio.generator.service import (
    InvalidProjectIdError,
    ProjectGeneratorService,
    TemplateNotFoundError,
    UnsafePathError,
    is_project_id,
    slugify_project_name,
)
from studio.storage import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generator"])


class GenerateProjectRequest(schemas.CamelModel):
    project_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class GenerateProjectResponse(schemas.CamelModel):
    project: schemas.ProjectOut
    download_url: str
    message: str


def get_generator() -> ProjectGeneratorService:
    return ProjectGeneratorService()


@router.post("/project-templates/{template_id}/generate", response_model=GenerateProjectResponse)
def generate_project(
    template_id: str,
    data: GenerateProjectRequest,
    auth: AuthResult = Depends(require_auth),
    db: Session = Depends(get_db),
    generator: ProjectGeneratorService = Depends(get_generator),
):
    project_name = data.project_name.strip()
    if not project_name:
        raise HTTPException(status_code=400, detail="projectName is required")

    try:
        result = generator.generate_project_from_template(
            db,
            template_id,
            project_name,
            (data.description or "").strip(),
            auth.user_id,
        )
    except TemplateNotFoundError:
        raise HTTPException(status_code=404, detail="Template not found")
    except UnsafePathError as e:
        logger.warning("[generator] Rejected template %s: %s", template_id, e)
        raise HTTPException(status_code=400, detail="Invalid file path in template")

    return GenerateProjectResponse(
        project=result.project,
        download_url=result.download_url,
        message="Project generated successfully! Files have been created and packaged for download.",
    )


@router.get("/download/project/{project_id}")
def download_project(
    project_id: str,
    auth: AuthResult = Depends(require_auth),
    db: Session = Depends(get_db),
    generator: ProjectGeneratorService = Depends(get_generator),
):
    if not is_project_id(project_id):
        raise HTTPException(status_code=400, detail="Invalid project ID format")

    project = service.get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    if project.user_id != auth.user_id:
        raise HTTPException(status_code=403, detail="Access denied: you don't own this project")

    try:
        zip_path = generator.get_project_download(project_id)
    except InvalidProjectIdError:
        raise HTTPException(status_code=400, detail="Invalid project ID format")
    if not zip_path:
        raise HTTPException(status_code=404, detail="Project download not found")

    return FileResponse(
        zip_path,
        media_type="application/zip",
        filename=f"{slugify_project_name(project.name)}.zip",
    )
