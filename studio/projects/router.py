# FILE: studio/projects/router.py
"""
Endpoints:
- GET|POST /api/projects, PUT|DELETE /api/projects/{id}
- GET|POST /api/projects/{id}/plan-versions
- GET      /api/projects/{id}/plan-versions/latest
- GET|PUT|DELETE /api/plan-versions/{id}
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from studio.db import get_db
from studio.generator.service import ProjectGeneratorService
from studio.storage import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["projects"])


def get_generator() -> ProjectGeneratorService:
    return ProjectGeneratorService()


# ============== PROJECTS ==============

@router.get("/projects", response_model=List[schemas.ProjectOut])
def list_projects(user_id: Optional[str] = Query(None, alias="userId"), db: Session = Depends(get_db)):
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    return service.list_projects(db, user_id)


@router.post("/projects", response_model=schemas.ProjectOut)
def create_project(data: schemas.ProjectCreate, db: Session = Depends(get_db)):
    return service.create_project(db, data)


@router.put("/projects/{project_id}", response_model=schemas.ProjectOut)
def update_project(project_id: str, data: schemas.ProjectUpdate, db: Session = Depends(get_db)):
    project = service.update_project(db, project_id, data.model_dump(exclude_unset=True))
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.delete("/projects/{project_id}")
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    generator: ProjectGeneratorService = Depends(get_generator),
):
    if not service.delete_project(db, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    generator.cleanup_project(project_id)
    return {"success": True}


# ============== PLAN VERSIONS ==============

@router.get("/projects/{project_id}/plan-versions", response_model=List[schemas.ProjectPlanVersionOut])
def list_plan_versions(project_id: str, db: Session = Depends(get_db)):
    return service.list_plan_versions(db, project_id)


@router.get("/projects/{project_id}/plan-versions/latest", response_model=schemas.ProjectPlanVersionOut)
def get_latest_plan_version(project_id: str, db: Session = Depends(get_db)):
    plan = service.get_latest_plan_version(db, project_id)
    if not plan:
        raise HTTPException(status_code=404, detail="No plan versions found")
    return plan


@router.post("/projects/{project_id}/plan-versions", response_model=schemas.ProjectPlanVersionOut)
def create_plan_version(
    project_id: str, data: schemas.ProjectPlanVersionCreate, db: Session = Depends(get_db)
):
    if not service.get_project(db, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return service.create_plan_version(db, project_id, data)


@router.get("/plan-versions/{version_id}", response_model=schemas.ProjectPlanVersionOut)
def get_plan_version(version_id: str, db: Session = Depends(get_db)):
    plan = service.get_plan_version(db, version_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan version not found")
    return plan


@router.put("/plan-versions/{version_id}", response_model=schemas.ProjectPlanVersionOut)
def update_plan_version(
    version_id: str, data: schemas.ProjectPlanVersionUpdate, db: Session = Depends(get_db)
):
    plan = service.update_plan_version(db, version_id, data)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan version not found")
    return plan


@router.delete("/plan-versions/{version_id}")
def delete_plan_version(version_id: str, db: Session = Depends(get_db)):
    if not service.delete_plan_version(db, version_id):
        raise HTTPException(status_code=404, detail="Plan version not found")
    return {"success": True}
