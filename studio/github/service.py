# FILE: studio/github/service.py
"""
Repository browsing and heuristic analysis on top of GitHubClient.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional

from pydantic import BaseModel

from studio.github.client import GitHubClient, GitHubError

logger = logging.getLogger(__name__)

SKIP_DIRECTORIES = {"node_modules", ".git", ".next", "dist", "build", "__pycache__", ".vscode", ".idea"}
MAIN_FILES = {"index.js", "index.ts", "main.py", "app.py", "main.cpp", "README.md"}
CONFIG_FILES = {"package.json", "tsconfig.json", "webpack.config.js", "vite.config.ts", ".gitignore", "Dockerfile"}


class GitHubRepository(BaseModel):
    id: int
    name: str
    fullName: str
    description: Optional[str] = None
    url: str
    language: Optional[str] = None
    stars: int = 0
    forks: int = 0
    private: bool = False
    updatedAt: Optional[str] = None


class GitHubFile(BaseModel):
    name: str
    path: str
    type: str
    size: Optional[int] = None
    downloadUrl: Optional[str] = None


class RepositoryStructure(BaseModel):
    directories: list[str] = []
    mainFiles: list[str] = []
    configFiles: list[str] = []
    testFiles: list[str] = []


class CodeAnalysis(BaseModel):
    files: list[GitHubFile]
    languages: dict[str, int]
    structure: RepositoryStructure
    complexity: str
    suggestions: list[str]


def to_repository(data: dict[str, Any]) -> GitHubRepository:
    return GitHubRepository(
        id=data["id"],
        name=data["name"],
        fullName=data.get("full_name") or data["name"],
        description=data.get("description"),
        url=data.get("html_url") or "",
        language=data.get("language"),
        stars=data.get("stargazers_count") or 0,
        forks=data.get("forks_count") or 0,
        private=bool(data.get("private")),
        updatedAt=data.get("updated_at"),
    )


def to_file(data: dict[str, Any]) -> GitHubFile:
    return GitHubFile(
        name=data["name"],
        path=data["path"],
        type=data.get("type") or "file",
        size=data.get("size") or None,
        downloadUrl=data.get("download_url") or None,
    )


def should_skip_directory(name: str) -> bool:
    return name in SKIP_DIRECTORIES or name.startswith(".")


def analyze_structure(files: list[GitHubFile]) -> RepositoryStructure:
    directories: list[str] = []
    for f in files:
        if "/" in f.path:
            top = f.path.split("/")[0]
            if top not in directories:
                directories.append(top)

    return RepositoryStructure(
        directories=directories,
        mainFiles=[f.path for f in files if f.name in MAIN_FILES],
        configFiles=[f.path for f in files if f.name in CONFIG_FILES],
        testFiles=[f.path for f in files if "test" in f.name or "spec" in f.name or "test" in f.path],
    )


def assess_complexity(files: list[GitHubFile], languages: dict[str, int]) -> str:
    """Score = kilobytes of code + files/10 + 2 per language."""
    score = sum(languages.values()) / 1000 + len(files) / 10 + len(languages) * 2
    if score > 50:
        return "high"
    if score > 20:
        return "medium"
    return "low"


def generate_suggestions(structure: RepositoryStructure, complexity: str) -> list[str]:
    suggestions = []
    if not structure.testFiles:
        suggestions.append("Consider adding unit tests to improve code reliability")
    if not any("README" in f for f in structure.mainFiles):
        suggestions.append("Add a comprehensive README.md file for better documentation")
    if complexity == "high":
        suggestions.append("Consider breaking down the project into smaller, more manageable modules")
    if len(structure.directories) > 20:
        suggestions.append("Consider reorganizing the directory structure for better maintainability")
    if not suggestions:
        suggestions.append("Code structure looks good! Consider adding CI/CD workflows for automation")
    return suggestions


class GitHubService:
    def __init__(self, client: Optional[GitHubClient] = None):
        self.client = client or GitHubClient()

    async def list_repositories(self) -> list[GitHubRepository]:
        data = await self.client.get("/user/repos", sort="updated", per_page=100)
        return [to_repository(r) for r in data or []]

    async def get_repository_contents(self, owner: str, repo: str, path: str = "") -> list[GitHubFile]:
        data = await self.client.get(f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}")
        if isinstance(data, list):
            return [to_file(item) for item in data]
        return [to_file(data)]

    async def get_file_content(self, owner: str, repo: str, path: str) -> str:
        data = await self.client.get(f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}")
        if isinstance(data, list):
            raise GitHubError("Path points to a directory, not a file")
        if data.get("type") != "file":
            raise GitHubError("Path does not point to a file")
        return base64.b64decode(data.get("content") or "").decode("utf-8", errors="replace")

    async def _list_files_recursive(self, owner: str, repo: str, path: str = "") -> list[GitHubFile]:
        files: list[GitHubFile] = []
        for item in await self.get_repository_contents(owner, repo, path):
            if item.type == "file":
                files.append(item)
            elif item.type == "dir" and not should_skip_directory(item.name):
                files.extend(await self._list_files_recursive(owner, repo, item.path))
        return files

    async def get_repository_languages(self, owner: str, repo: str) -> dict[str, int]:
        try:
            return await self.client.get(f"/repos/{owner}/{repo}/languages") or {}
        except GitHubError as e:
            logger.warning("[github] Languages for %s/%s unavailable: %s", owner, repo, e)
            return {}

    async def analyze_repository(self, owner: str, repo: str) -> CodeAnalysis:
        files = await self._list_files_recursive(owner, repo)
        languages = await self.get_repository_languages(owner, repo)
        structure = analyze_structure(files)
        complexity = assess_complexity(files, languages)
        return CodeAnalysis(
            files=files,
            languages=languages,
            structure=structure,
            complexity=complexity,
            suggestions=generate_suggestions(structure, complexity),
        )

    async def create_repository(
        self, name: str, description: Optional[str] = None, private: bool = False
    ) -> GitHubRepository:
        payload: dict[str, Any] = {"name": name, "private": private}
        if description:
            payload["description"] = description
        data = await self.client.post("/user/repos", payload)
        logger.info("[github] Created repository %s", data.get("full_name"))
        return to_repository(data)
