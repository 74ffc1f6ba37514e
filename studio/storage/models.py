# studio/storage/models.py
"""
SQLAlchemy ORM models for the studio data store.

All primary keys are UUID strings generated on insert. JSON-valued columns
hold free-form metadata (message attachments, project tech stack, file
analysis, template file lists).

`metadata` is reserved on declarative classes, so the columns named
"metadata" are mapped to the `meta` attribute.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from studio.db import Base


def _uuid() -> str:
    return str(uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(100), nullable=True, index=True)
    title = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=_uuid)
    conversation_id = Column(String(36), ForeignKey("conversations.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False)  # user | assistant | system
    content = Column(Text, nullable=False)
    # attachments, search results, model info
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(100), nullable=True, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    github_url = Column(Text, nullable=True)
    status = Column(String(20), default="active", nullable=True)  # active | archived | completed
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    plan_versions = relationship(
        "ProjectPlanVersion",
        back_populates="project",
        cascade="all, delete-orphan",
    )


class File(Base):
    __tablename__ = "files"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(100), nullable=True, index=True)
    filename = Column(Text, nullable=False)  # name on disk
    original_name = Column(Text, nullable=False)  # name as uploaded
    mime_type = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)
    path = Column(Text, nullable=False)
    analysis = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class LLMConfiguration(Base):
    """
    Saved endpoint/model/temperature preset for chat completion requests.

    `user_id` NULL marks a global configuration visible to every user.
    Temperature is stored as an integer percentage (0-100) and divided by
    100 when sent to the endpoint.
    """
    __tablename__ = "llm_configurations"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(100), nullable=True, index=True)
    name = Column(Text, nullable=False)
    endpoint = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    temperature = Column(Integer, default=70, nullable=True)
    max_tokens = Column(Integer, default=2048, nullable=True)
    is_default = Column(Boolean, default=False, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class SearchEngine(Base):
    __tablename__ = "search_engines"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(100), nullable=True, index=True)
    name = Column(String(50), nullable=False)
    enabled = Column(Boolean, default=True, nullable=True)
    api_key = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(100), nullable=True, unique=True, index=True)
    theme = Column(String(20), default="dark")  # light | dark | system
    compact_mode = Column(Boolean, default=False)
    animations = Column(Boolean, default=True)
    font_size = Column(String(20), default="medium")  # small | medium | large
    code_font = Column(String(20), default="jetbrains")  # jetbrains | fira | source | consolas
    max_concurrent_requests = Column(Integer, default=5)
    cache_duration = Column(Integer, default=30)  # minutes
    auto_save_conversations = Column(Boolean, default=True)
    analytics_collection = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ProjectTemplate(Base):
    """
    Canned set of starter files with placeholder substitution.

    `files` is a list of {"path", "content", "type"} objects; `tech_stack`
    is {"frontend": [], "backend": [], "database": [], "tools": []}.
    """
    __tablename__ = "project_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)  # web | api | mobile | desktop | ml | blockchain
    tech_stack = Column(JSON, nullable=False)
    files = Column(JSON, nullable=False)
    dependencies = Column(JSON, nullable=True)
    instructions = Column(Text, nullable=True)
    difficulty = Column(String(20), default="beginner")  # beginner | intermediate | advanced
    estimated_time = Column(String(50), nullable=True)
    tags = Column(JSON, nullable=True)
    is_public = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ProjectPlanVersion(Base):
    __tablename__ = "project_plan_versions"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(String(100), nullable=True)
    version = Column(Integer, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    goals = Column(JSON, nullable=True)
    requirements = Column(JSON, nullable=True)
    architecture = Column(JSON, nullable=True)
    tech_stack = Column(JSON, nullable=True)
    timeline = Column(JSON, nullable=True)
    resources = Column(JSON, nullable=True)
    risks = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)
    change_log = Column(Text, nullable=True)
    status = Column(String(20), default="draft")  # draft | active | archived
    parent_version_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="plan_versions")
