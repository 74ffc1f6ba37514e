# FILE: studio/generator/service.py
"""
Project generation from stored templates.

generate_project_from_template():
- validates every template path before anything is written
- creates the Project row owned by the caller
- writes the files under GENERATED_PROJECTS_DIR/<projectId>/ with
  {{projectName}} / {{PROJECT_NAME}} substituted
- adds a generated README.md and zips the tree to <projectId>.zip

Environment:
- GENERATED_PROJECTS_DIR (default ./generated-projects)
"""

import json
import logging
import os
import re
import shutil
import uuid
import zipfile
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from studio.storage import models, schemas, service

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.I)


class UnsafePathError(ValueError):
    """Template file path is absolute, uses '..', or leaves the project directory."""


class TemplateNotFoundError(LookupError):
    pass


class InvalidProjectIdError(ValueError):
    pass


class GeneratedProject(BaseModel):
    project: schemas.ProjectOut
    files_path: str
    zip_path: str
    download_url: str


def is_project_id(value: str) -> bool:
    return bool(_UUID_RE.fullmatch(value or ""))


def slugify_project_name(name: str) -> str:
    return re.sub(r"\s+", "-", name.lower())


def sanitize_file_path(file_path: str, project_path: Path) -> Path:
    normalized = file_path.replace("\\", "/")
    pure = PurePosixPath(normalized)
    if pure.is_absolute() or re.match(r"^[A-Za-z]:", normalized):
        raise UnsafePathError(f"Absolute paths are not allowed: {file_path}")
    if ".." in pure.parts:
        raise UnsafePathError(f"Path traversal detected: {file_path}")

    root = project_path.resolve()
    target = (root / pure).resolve()
    if target == root:
        raise UnsafePathError(f"Path does not name a file: {file_path!r}")
    if root not in target.parents:
        raise UnsafePathError(f"Path escapes project directory: {file_path}")
    return target


def substitute_placeholders(content: str, project_name: str) -> str:
    return content.replace("{{projectName}}", project_name).replace("{{PROJECT_NAME}}", project_name)


def rename_package_json(content: str, project_name: str) -> str:
    try:
        package = json.loads(content)
    except ValueError as e:
        logger.warning("[generator] Failed to parse package.json template: %s", e)
        return content
    if not isinstance(package, dict):
        return content
    package["name"] = slugify_project_name(project_name)
    return json.dumps(package, indent=2)


def format_tech_stack(tech_stack: Optional[Dict[str, Any]]) -> str:
    if not tech_stack:
        return "No tech stack specified."
    sections = []
    for key, label in (("frontend", "Frontend"), ("backend", "Backend"), ("database", "Database"), ("tools", "Tools")):
        items = tech_stack.get(key) or []
        if items:
            sections.append(f"**{label}:** {', '.join(items)}")
    return "\n".join(sections)


def generate_readme(template: models.ProjectTemplate, project_name: str) -> str:
    files: List[Dict[str, Any]] = template.files or []
    tree = "\n".join(f"- `{f.get('path')}` ({f.get('type', 'file')})" for f in files)
    estimated = f"**Estimated Setup Time:** {template.estimated_time}" if template.estimated_time else ""
    if template.dependencies:
        dependencies = "```json\n" + json.dumps(template.dependencies, indent=2) + "\n```"
    else:
        dependencies = "No dependencies specified."

    return f"""# {project_name}

{template.description}

## Generated from Template: {template.name}

**Difficulty:** {template.difficulty}
{estimated}

## Tech Stack

{format_tech_stack(template.tech_stack)}

## Setup Instructions

{template.instructions or 'No specific setup instructions provided.'}

## Dependencies

{dependencies}

## Project Structure

This project was generated with the following file structure:

{tree}

---

Generated on {datetime.utcnow().isoformat()}Z using AI Assistant Studio
"""


def create_zip_archive(project_path: Path, zip_path: Path) -> None:
    with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for path in sorted(project_path.rglob("*")):
            if path.is_file():
                zf.write(path, path.relative_to(project_path).as_posix())


class ProjectGeneratorService:
    def __init__(self, base_output_path: Optional[str] = None):
        self.base_output_path = Path(
            base_output_path or os.getenv("GENERATED_PROJECTS_DIR") or "./generated-projects"
        ).resolve()

    def project_path(self, project_id: str) -> Path:
        return self.base_output_path / project_id

    def zip_path(self, project_id: str) -> Path:
        return self.base_output_path / f"{project_id}.zip"

    def _write_project_files(
        self, project_path: Path, template: models.ProjectTemplate, project_name: str
    ) -> None:
        project_path.mkdir(parents=True, exist_ok=True)
        for file in template.files or []:
            target = sanitize_file_path(file["path"], project_path)
            target.parent.mkdir(parents=True, exist_ok=True)

            content = substitute_placeholders(file.get("content") or "", project_name)
            if file["path"] == "package.json":
                content = rename_package_json(content, project_name)
            target.write_text(content, encoding="utf-8")

        (project_path / "README.md").write_text(generate_readme(template, project_name), encoding="utf-8")
        logger.info("[generator] Generated project files for %s at %s", project_name, project_path)

    def generate_project_from_template(
        self,
        db: Session,
        template_id: str,
        project_name: str,
        description: str,
        user_id: str,
    ) -> GeneratedProject:
        template = service.get_project_template(db, template_id)
        if not template:
            raise TemplateNotFoundError("Template not found")

        # Reject the whole template before a project row exists
        check_root = self.base_output_path / "_check"
        for file in template.files or []:
            sanitize_file_path(file.get("path") or "", check_root)

        project = service.create_project(
            db,
            schemas.ProjectCreate(
                user_id=user_id,
                name=project_name or template.name,
                description=description or template.description,
                status="active",
                metadata={
                    "templateId": template.id,
                    "techStack": template.tech_stack,
                    "generatedAt": datetime.utcnow().isoformat() + "Z",
                    "templateName": template.name,
                },
            ),
        )

        project_path = self.project_path(project.id)
        zip_path = self.zip_path(project.id)
        try:
            self._write_project_files(project_path, template, project_name)
            create_zip_archive(project_path, zip_path)
        except Exception:
            logger.exception("[generator] Generation failed for project %s, rolling back", project.id)
            service.delete_project(db, project.id)
            self.cleanup_project(project.id)
            raise

        return GeneratedProject(
            project=schemas.ProjectOut.model_validate(project),
            files_path=str(project_path),
            zip_path=str(zip_path),
            download_url=f"/api/download/project/{project.id}",
        )

    def get_project_download(self, project_id: str) -> Optional[Path]:
        if not is_project_id(project_id):
            raise InvalidProjectIdError(f"Invalid project ID format: {project_id}")
        zip_path = self.zip_path(project_id)
        return zip_path if zip_path.is_file() else None

    def cleanup_project(self, project_id: str) -> None:
        if not is_project_id(project_id):
            return
        shutil.rmtree(self.project_path(project_id), ignore_errors=True)
        try:
            self.zip_path(project_id).unlink()
        except FileNotFoundError:
            pass
        logger.info("[generator] Removed generated files for project %s", project_id)
