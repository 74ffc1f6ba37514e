# FILE: studio/templates/service.py
import logging

from sqlalchemy.orm import Session

from studio.storage import schemas, service
from studio.templates.defaults import DEFAULT_TEMPLATES

logger = logging.getLogger(__name__)


def initialize_default_templates(db: Session) -> int:
    """Insert the built-in templates when the table is empty. Returns how many were added."""
    if service.count_project_templates(db) > 0:
        return 0

    added = 0
    for template in DEFAULT_TEMPLATES:
        service.create_project_template(db, schemas.ProjectTemplateCreate(**template))
        logger.info("[templates] Initialized template: %s", template["name"])
        added += 1
    return added
