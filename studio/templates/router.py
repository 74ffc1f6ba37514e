# FILE: studio/templates/router.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from studio.db import get_db
from studio.storage import schemas, service

router = APIRouter(prefix="/api/project-templates", tags=["templates"])


@router.get("", response_model=List[schemas.ProjectTemplateOut])
def list_templates(category: Optional[str] = None, db: Session = Depends(get_db)):
    return service.list_project_templates(db, category)


@router.get("/{template_id}", response_model=schemas.ProjectTemplateOut)
def get_template(template_id: str, db: Session = Depends(get_db)):
    template = service.get_project_template(db, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Project template not found")
    return template


@router.post("", response_model=schemas.ProjectTemplateOut, status_code=201)
def create_template(data: schemas.ProjectTemplateCreate, db: Session = Depends(get_db)):
    return service.create_project_template(db, data)
