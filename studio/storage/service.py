# FILE: studio/storage/service.py
"""
Storage service layer.

Plain functions over a SQLAlchemy Session, one block per entity. Routers and
higher-level services never query the ORM directly.

Global rows (user_id NULL) for LLM configurations and search engines are
visible to every user alongside the user's own rows.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import bcrypt
from sqlalchemy import or_
from sqlalchemy.orm import Session

from studio.storage import models, schemas

logger = logging.getLogger(__name__)


def _apply_updates(row, updates: Dict[str, Any]) -> None:
    for key, value in updates.items():
        if key == "metadata":
            key = "meta"
        if key in ("id", "created_at"):
            continue
        if hasattr(row, key):
            setattr(row, key, value)


def _save(db: Session, row):
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


# ============== USER ==============

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, stored_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), stored_hash.encode())
    except ValueError:
        return False


def create_user(db: Session, data: schemas.UserCreate) -> models.User:
    user = models.User(username=data.username, password=hash_password(data.password))
    return _save(db, user)


def get_user(db: Session, user_id: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.username == username).first()


# ============== CONVERSATION ==============

def create_conversation(db: Session, data: schemas.ConversationCreate) -> models.Conversation:
    conversation = models.Conversation(user_id=data.user_id, title=data.title)
    return _save(db, conversation)


def get_conversation(db: Session, conversation_id: str) -> Optional[models.Conversation]:
    return db.query(models.Conversation).filter(models.Conversation.id == conversation_id).first()


def list_conversations(db: Session, user_id: str) -> List[models.Conversation]:
    return (
        db.query(models.Conversation)
        .filter(models.Conversation.user_id == user_id)
        .order_by(models.Conversation.updated_at.desc())
        .all()
    )


def update_conversation(
    db: Session, conversation_id: str, updates: Dict[str, Any]
) -> Optional[models.Conversation]:
    conversation = get_conversation(db, conversation_id)
    if not conversation:
        return None
    _apply_updates(conversation, updates)
    conversation.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(conversation)
    return conversation


def touch_conversation(db: Session, conversation_id: str) -> Optional[models.Conversation]:
    return update_conversation(db, conversation_id, {})


def delete_conversation(db: Session, conversation_id: str) -> bool:
    """Delete a conversation and, through the relationship cascade, its messages."""
    conversation = get_conversation(db, conversation_id)
    if not conversation:
        return False
    db.delete(conversation)
    db.commit()
    return True


# ============== MESSAGE ==============

def create_message(db: Session, data: schemas.MessageCreate) -> models.Message:
    message = models.Message(
        conversation_id=data.conversation_id,
        role=data.role,
        content=data.content,
        meta=data.metadata,
    )
    return _save(db, message)


def get_message(db: Session, message_id: str) -> Optional[models.Message]:
    return db.query(models.Message).filter(models.Message.id == message_id).first()


def list_messages(db: Session, conversation_id: str) -> List[models.Message]:
    return (
        db.query(models.Message)
        .filter(models.Message.conversation_id == conversation_id)
        .order_by(models.Message.created_at.asc())
        .all()
    )


def delete_message(db: Session, message_id: str) -> bool:
    message = get_message(db, message_id)
    if not message:
        return False
    db.delete(message)
    db.commit()
    return True


# ============== PROJECT ==============

def create_project(db: Session, data: schemas.ProjectCreate) -> models.Project:
    project = models.Project(
        user_id=data.user_id,
        name=data.name,
        description=data.description,
        github_url=data.github_url,
        status=data.status,
        meta=data.metadata,
    )
    return _save(db, project)


def get_project(db: Session, project_id: str) -> Optional[models.Project]:
    return db.query(models.Project).filter(models.Project.id == project_id).first()


def list_projects(db: Session, user_id: str) -> List[models.Project]:
    return (
        db.query(models.Project)
        .filter(models.Project.user_id == user_id)
        .order_by(models.Project.updated_at.desc())
        .all()
    )


def update_project(db: Session, project_id: str, updates: Dict[str, Any]) -> Optional[models.Project]:
    project = get_project(db, project_id)
    if not project:
        return None
    _apply_updates(project, updates)
    project.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, project_id: str) -> bool:
    project = get_project(db, project_id)
    if not project:
        return False
    db.delete(project)
    db.commit()
    return True


# ============== FILE ==============

def create_file(db: Session, data: schemas.FileCreate) -> models.File:
    file_record = models.File(
        user_id=data.user_id,
        filename=data.filename,
        original_name=data.original_name,
        mime_type=data.mime_type,
        size=data.size,
        path=data.path,
        analysis=data.analysis,
    )
    return _save(db, file_record)


def get_file(db: Session, file_id: str) -> Optional[models.File]:
    return db.query(models.File).filter(models.File.id == file_id).first()


def list_files(db: Session, user_id: str) -> List[models.File]:
    return (
        db.query(models.File)
        .filter(models.File.user_id == user_id)
        .order_by(models.File.created_at.desc())
        .all()
    )


def update_file(db: Session, file_id: str, updates: Dict[str, Any]) -> Optional[models.File]:
    file_record = get_file(db, file_id)
    if not file_record:
        return None
    _apply_updates(file_record, updates)
    db.commit()
    db.refresh(file_record)
    return file_record


def delete_file(db: Session, file_id: str) -> bool:
    file_record = get_file(db, file_id)
    if not file_record:
        return False
    db.delete(file_record)
    db.commit()
    return True


# ============== LLM CONFIGURATION ==============

def create_llm_configuration(
    db: Session, data: schemas.LLMConfigurationCreate
) -> models.LLMConfiguration:
    config = models.LLMConfiguration(**data.model_dump())
    return _save(db, config)


def get_llm_configuration(db: Session, config_id: str) -> Optional[models.LLMConfiguration]:
    return db.query(models.LLMConfiguration).filter(models.LLMConfiguration.id == config_id).first()


def list_llm_configurations(db: Session, user_id: str) -> List[models.LLMConfiguration]:
    return (
        db.query(models.LLMConfiguration)
        .filter(
            or_(
                models.LLMConfiguration.user_id == user_id,
                models.LLMConfiguration.user_id.is_(None),
            )
        )
        .order_by(models.LLMConfiguration.created_at.desc())
        .all()
    )


def get_default_llm_configuration(db: Session, user_id: str) -> Optional[models.LLMConfiguration]:
    return (
        db.query(models.LLMConfiguration)
        .filter(
            or_(
                models.LLMConfiguration.user_id == user_id,
                models.LLMConfiguration.user_id.is_(None),
            )
        )
        .filter(models.LLMConfiguration.is_default.is_(True))
        .first()
    )


def update_llm_configuration(
    db: Session, config_id: str, updates: Dict[str, Any]
) -> Optional[models.LLMConfiguration]:
    config = get_llm_configuration(db, config_id)
    if not config:
        return None
    _apply_updates(config, updates)
    db.commit()
    db.refresh(config)
    return config


def delete_llm_configuration(db: Session, config_id: str) -> bool:
    config = get_llm_configuration(db, config_id)
    if not config:
        return False
    db.delete(config)
    db.commit()
    return True


# ============== SEARCH ENGINE ==============

def create_search_engine(db: Session, data: schemas.SearchEngineCreate) -> models.SearchEngine:
    engine = models.SearchEngine(**data.model_dump())
    return _save(db, engine)


def get_search_engine(db: Session, engine_id: str) -> Optional[models.SearchEngine]:
    return db.query(models.SearchEngine).filter(models.SearchEngine.id == engine_id).first()


def list_search_engines(db: Session, user_id: Optional[str]) -> List[models.SearchEngine]:
    query = db.query(models.SearchEngine)
    if user_id:
        query = query.filter(
            or_(models.SearchEngine.user_id == user_id, models.SearchEngine.user_id.is_(None))
        )
    else:
        query = query.filter(models.SearchEngine.user_id.is_(None))
    return query.order_by(models.SearchEngine.name.asc()).all()


def list_enabled_search_engines(db: Session, user_id: Optional[str]) -> List[models.SearchEngine]:
    query = db.query(models.SearchEngine).filter(models.SearchEngine.enabled.is_(True))
    if user_id:
        query = query.filter(
            or_(models.SearchEngine.user_id == user_id, models.SearchEngine.user_id.is_(None))
        )
    else:
        query = query.filter(models.SearchEngine.user_id.is_(None))
    return query.order_by(models.SearchEngine.created_at.asc()).all()


def update_search_engine(
    db: Session, engine_id: str, updates: Dict[str, Any]
) -> Optional[models.SearchEngine]:
    engine = get_search_engine(db, engine_id)
    if not engine:
        return None
    _apply_updates(engine, updates)
    db.commit()
    db.refresh(engine)
    return engine


def delete_search_engine(db: Session, engine_id: str) -> bool:
    engine = get_search_engine(db, engine_id)
    if not engine:
        return False
    db.delete(engine)
    db.commit()
    return True


# ============== USER PREFERENCES ==============

def get_user_preferences(db: Session, user_id: str) -> models.UserPreferences:
    """Return the user's preferences, creating the defaults on first access."""
    prefs = (
        db.query(models.UserPreferences)
        .filter(models.UserPreferences.user_id == user_id)
        .first()
    )
    if prefs:
        return prefs
    prefs = models.UserPreferences(user_id=user_id, **schemas.DEFAULT_PREFERENCES)
    return _save(db, prefs)


def update_user_preferences(
    db: Session, user_id: str, updates: Dict[str, Any]
) -> models.UserPreferences:
    prefs = get_user_preferences(db, user_id)
    updates = {k: v for k, v in updates.items() if k != "user_id"}
    _apply_updates(prefs, updates)
    prefs.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(prefs)
    return prefs


def reset_user_preferences(db: Session, user_id: str) -> models.UserPreferences:
    return update_user_preferences(db, user_id, dict(schemas.DEFAULT_PREFERENCES))


# ============== PROJECT TEMPLATE ==============

def create_project_template(
    db: Session, data: schemas.ProjectTemplateCreate
) -> models.ProjectTemplate:
    template = models.ProjectTemplate(**data.model_dump())
    return _save(db, template)


def get_project_template(db: Session, template_id: str) -> Optional[models.ProjectTemplate]:
    return db.query(models.ProjectTemplate).filter(models.ProjectTemplate.id == template_id).first()


def list_project_templates(db: Session, category: Optional[str] = None) -> List[models.ProjectTemplate]:
    query = db.query(models.ProjectTemplate).filter(models.ProjectTemplate.is_public.is_(True))
    if category:
        query = query.filter(models.ProjectTemplate.category == category)
    return query.order_by(models.ProjectTemplate.created_at.asc()).all()


def count_project_templates(db: Session) -> int:
    return db.query(models.ProjectTemplate).count()


def update_project_template(
    db: Session, template_id: str, data: schemas.ProjectTemplateUpdate
) -> Optional[models.ProjectTemplate]:
    template = get_project_template(db, template_id)
    if not template:
        return None
    _apply_updates(template, data.model_dump(exclude_unset=True))
    template.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(template)
    return template


def delete_project_template(db: Session, template_id: str) -> bool:
    template = get_project_template(db, template_id)
    if not template:
        return False
    db.delete(template)
    db.commit()
    return True


# ============== PROJECT PLAN VERSION ==============

def list_plan_versions(db: Session, project_id: str) -> List[models.ProjectPlanVersion]:
    """All versions of a project's plan, newest version first."""
    return (
        db.query(models.ProjectPlanVersion)
        .filter(models.ProjectPlanVersion.project_id == project_id)
        .order_by(models.ProjectPlanVersion.version.desc())
        .all()
    )


def get_latest_plan_version(db: Session, project_id: str) -> Optional[models.ProjectPlanVersion]:
    versions = list_plan_versions(db, project_id)
    return versions[0] if versions else None


def get_plan_version(db: Session, version_id: str) -> Optional[models.ProjectPlanVersion]:
    return (
        db.query(models.ProjectPlanVersion)
        .filter(models.ProjectPlanVersion.id == version_id)
        .first()
    )


def create_plan_version(
    db: Session, project_id: str, data: schemas.ProjectPlanVersionCreate
) -> models.ProjectPlanVersion:
    fields = data.model_dump()
    if not fields.get("version"):
        latest = get_latest_plan_version(db, project_id)
        fields["version"] = latest.version + 1 if latest else 1
    plan = models.ProjectPlanVersion(project_id=project_id, **fields)
    return _save(db, plan)


def update_plan_version(
    db: Session, version_id: str, data: schemas.ProjectPlanVersionUpdate
) -> Optional[models.ProjectPlanVersion]:
    plan = get_plan_version(db, version_id)
    if not plan:
        return None
    _apply_updates(plan, data.model_dump(exclude_unset=True))
    plan.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(plan)
    return plan


def delete_plan_version(db: Session, version_id: str) -> bool:
    plan = get_plan_version(db, version_id)
    if not plan:
        return False
    db.delete(plan)
    db.commit()
    return True


# ============== SEED DATA ==============

DEFAULT_SEARCH_ENGINES = [
    {"name": "Google", "enabled": True},
    {"name": "Bing", "enabled": True},
    {"name": "DuckDuckGo", "enabled": False},
]

DEFAULT_LLM_CONFIGURATION = {
    "name": "Ollama Local",
    "endpoint": "http://localhost:11434",
    "model": "llama2-7b-chat",
    "temperature": 70,
    "max_tokens": 2048,
    "is_default": True,
}


def seed_defaults(db: Session) -> None:
    """Insert the global search engines and LLM configuration when the tables are empty."""
    if db.query(models.SearchEngine).count() == 0:
        for engine in DEFAULT_SEARCH_ENGINES:
            db.add(models.SearchEngine(user_id=None, api_key=None, **engine))
        db.commit()
        logger.info("[storage] Seeded %d default search engines", len(DEFAULT_SEARCH_ENGINES))

    if db.query(models.LLMConfiguration).count() == 0:
        db.add(models.LLMConfiguration(user_id=None, **DEFAULT_LLM_CONFIGURATION))
        db.commit()
        logger.info("[storage] Seeded default LLM configuration")
