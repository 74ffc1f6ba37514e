# FILE: studio/github/router.py
"""
Endpoints:
- GET  /api/github/repositories
- GET  /api/github/repositories/{owner}/{repo}/contents?path=
- GET  /api/github/repositories/{owner}/{repo}/file?path=
- GET  /api/github/repositories/{owner}/{repo}/analyze
- POST /api/github/repositories
- POST /api/export/github
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from studio.db import get_db
from studio.generator.service import ProjectGeneratorService
from studio.github.client import GitHubError
from studio.github.export import GitHubExportService
from studio.github.service import CodeAnalysis, GitHubFile, GitHubRepository, GitHubService
from studio.storage import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["github"])


class CreateRepositoryRequest(schemas.CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    private: bool = False


class GitHubExportRequest(schemas.CamelModel):
    repo_name: str = "ai-assistant-studio"
    description: str = "AI development companion with local LLM integration"
    is_private: bool = False
    project_id: Optional[str] = None


class FileContentResponse(schemas.CamelModel):
    path: str
    content: str


def get_github_service() -> GitHubService:
    return GitHubService()


def get_export_service() -> GitHubExportService:
    return GitHubExportService()


def get_generator() -> ProjectGeneratorService:
    return ProjectGeneratorService()


def analysis_error_message(error: GitHubError) -> str:
    message = str(error)
    if "GitHub not connected" in message:
        return "GitHub authentication not configured. Set GITHUB_TOKEN to enable GitHub integration."
    if error.status_code == 403 or "rate limit" in message.lower():
        return "GitHub API rate limit exceeded or access denied. Please try again later."
    if error.status_code == 404:
        return "Repository not found or not accessible. Please check the repository URL and permissions."
    return message


@router.get("/github/repositories", response_model=List[GitHubRepository])
async def list_repositories(github: GitHubService = Depends(get_github_service)):
    try:
        return await github.list_repositories()
    except GitHubError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/github/repositories/{owner}/{repo}/contents", response_model=List[GitHubFile])
async def get_contents(
    owner: str, repo: str, path: str = "", github: GitHubService = Depends(get_github_service)
):
    try:
        return await github.get_repository_contents(owner, repo, path)
    except GitHubError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/github/repositories/{owner}/{repo}/file", response_model=FileContentResponse)
async def get_file(
    owner: str, repo: str, path: str = "", github: GitHubService = Depends(get_github_service)
):
    if not path:
        raise HTTPException(status_code=400, detail="path is required")
    try:
        content = await github.get_file_content(owner, repo, path)
    except GitHubError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return FileContentResponse(path=path, content=content)


@router.get("/github/repositories/{owner}/{repo}/analyze", response_model=CodeAnalysis)
async def analyze_repository(owner: str, repo: str, github: GitHubService = Depends(get_github_service)):
    try:
        return await github.analyze_repository(owner, repo)
    except GitHubError as e:
        logger.error("[github] Analysis of %s/%s failed: %s", owner, repo, e)
        raise HTTPException(status_code=500, detail=analysis_error_message(e))


@router.post("/github/repositories", response_model=GitHubRepository)
async def create_repository(req: CreateRepositoryRequest, github: GitHubService = Depends(get_github_service)):
    if not req.name:
        raise HTTPException(status_code=400, detail="Repository name is required")
    try:
        return await github.create_repository(req.name, req.description, req.private)
    except GitHubError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/export/github")
async def export_to_github(
    req: GitHubExportRequest,
    db: Session = Depends(get_db),
    exporter: GitHubExportService = Depends(get_export_service),
    generator: ProjectGeneratorService = Depends(get_generator),
):
    if req.project_id:
        if not service.get_project(db, req.project_id):
            raise HTTPException(status_code=404, detail="Project not found")
        root = generator.project_path(req.project_id)
        if not root.is_dir():
            raise HTTPException(status_code=404, detail="Generated project files not found")
    else:
        root = os.getenv("EXPORT_ROOT") or os.getcwd()

    logger.info("[github-export] Starting export of %s to %s", root, req.repo_name)
    result = await exporter.export_directory(root, req.repo_name, req.description, req.is_private)
    if not result.success:
        return JSONResponse(status_code=500, content=result.model_dump(exclude_none=True))
    return result.model_dump(exclude_none=True)
