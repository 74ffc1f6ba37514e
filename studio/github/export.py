# FILE: studio/github/export.py
"""
Export a local directory tree to a new GitHub repository.

Flow (Git Data API):
1. create the repository (HTTP 422 -> already exists)
2. initialise `main` with a README so the ref exists
3. one blob per file, one tree on top of the README commit
4. commit the tree and move heads/main to it
"""

from __future__ import annotations

import asyncio
import base64
import fnmatch
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from studio.github.client import GitHubClient, GitHubError

logger = logging.getLogger(__name__)

SKIP_PATTERNS = [
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    "coverage",
    ".nyc_output",
    "generated-projects",
    "uploads",
    "__pycache__",
    ".pytest_cache",
    ".venv",
    "tmp",
]
SKIP_FILES = [".DS_Store", "Thumbs.db", "*.log", "*.lock", ".env"]

INIT_README = "# AI Assistant Studio\n\nComprehensive AI development companion with local LLM integration.\n"


class ExportFile(BaseModel):
    path: str
    content: str


class ExportResult(BaseModel):
    success: bool
    repositoryUrl: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


def should_skip(relative_path: str) -> bool:
    parts = relative_path.replace("\\", "/").split("/")
    if any(part in SKIP_PATTERNS for part in parts):
        return True
    name = parts[-1]
    return any(fnmatch.fnmatch(name, pattern) for pattern in SKIP_FILES)


def collect_files(root: str | os.PathLike[str]) -> list[ExportFile]:
    """Every UTF-8 text file under root, minus skipped paths. Binary files are dropped."""
    base = Path(root)
    files: list[ExportFile] = []
    for path in sorted(base.rglob("*")):
        rel = path.relative_to(base).as_posix()
        if should_skip(rel) or not path.is_file():
            continue
        try:
            files.append(ExportFile(path=rel, content=path.read_text(encoding="utf-8")))
        except (UnicodeDecodeError, OSError) as e:
            logger.info("[github-export] Skipping file %s: %s", rel, e)
    return files


class GitHubExportService:
    def __init__(self, client: Optional[GitHubClient] = None):
        self.client = client or GitHubClient()

    async def create_repository(self, repo_name: str, description: str, private: bool = False) -> dict[str, Any]:
        try:
            return await self.client.post(
                "/user/repos",
                {"name": repo_name, "description": description, "private": private, "auto_init": False},
            )
        except GitHubError as e:
            if e.status_code == 422:
                raise GitHubError(f"Repository '{repo_name}' already exists", 422) from e
            raise

    async def _create_blob(self, owner: str, repo: str, file: ExportFile) -> dict[str, str]:
        blob = await self.client.post(
            f"/repos/{owner}/{repo}/git/blobs",
            {
                "content": base64.b64encode(file.content.encode("utf-8")).decode("ascii"),
                "encoding": "base64",
            },
        )
        return {"path": file.path, "mode": "100644", "type": "blob", "sha": blob["sha"]}

    async def push_files(
        self, owner: str, repo: str, files: list[ExportFile], commit_message: str
    ) -> dict[str, Any]:
        await self.client.put(
            f"/repos/{owner}/{repo}/contents/README.md",
            {
                "message": "Initial commit",
                "content": base64.b64encode(INIT_README.encode("utf-8")).decode("ascii"),
            },
        )

        ref = await self.client.get(f"/repos/{owner}/{repo}/git/ref/heads/main")
        base_sha = ref["object"]["sha"]

        entries = await asyncio.gather(*[self._create_blob(owner, repo, f) for f in files])

        tree = await self.client.post(
            f"/repos/{owner}/{repo}/git/trees",
            {"tree": list(entries), "base_tree": base_sha},
        )
        commit = await self.client.post(
            f"/repos/{owner}/{repo}/git/commits",
            {"message": commit_message, "tree": tree["sha"], "parents": [base_sha]},
        )
        await self.client.patch(
            f"/repos/{owner}/{repo}/git/refs/heads/main",
            {"sha": commit["sha"]},
        )
        return commit

    async def export_directory(
        self, root: str | os.PathLike[str], repo_name: str, description: str, private: bool = False
    ) -> ExportResult:
        try:
            logger.info("[github-export] Creating repository %s", repo_name)
            repo = await self.create_repository(repo_name, description, private)

            files = collect_files(root)
            logger.info("[github-export] Pushing %d files from %s", len(files), root)
            await self.push_files(
                repo["owner"]["login"],
                repo["name"],
                files,
                f"Initial commit: {repo_name}",
            )
        except GitHubError as e:
            logger.error("[github-export] Export failed: %s", e)
            return ExportResult(success=False, error=str(e))

        return ExportResult(
            success=True,
            repositoryUrl=repo.get("html_url"),
            message=f"Successfully exported {len(files)} files to GitHub",
        )
