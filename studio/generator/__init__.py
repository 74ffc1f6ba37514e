"""Template-driven project generation and zip packaging."""

from studio.generator.service import (
    InvalidProjectIdError,
    ProjectGeneratorService,
    TemplateNotFoundError,
    UnsafePathError,
    sanitize_file_path,
)

__all__ = [
    "InvalidProjectIdError",
    "ProjectGeneratorService",
    "TemplateNotFoundError",
    "UnsafePathError",
    "sanitize_file_path",
]
