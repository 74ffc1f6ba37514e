# FILE: studio/storage/schemas.py
"""
Pydantic schemas shared by the storage service and the API routers.

Field names are snake_case in Python and camelCase on the wire
(`maxTokens`, `conversationId`). Both spellings are accepted on input.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrmModel(CamelModel):
    model_config = ConfigDict(from_attributes=True)


def _meta_field():
    # ORM rows expose the JSON "metadata" column as `meta`
    return Field(
        default=None,
        validation_alias=AliasChoices("meta", "metadata"),
        serialization_alias="metadata",
    )


# ============== USER ==============

class UserCreate(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(OrmModel):
    id: str
    username: str
    created_at: Optional[datetime] = None


# ============== CONVERSATION ==============

class ConversationCreate(CamelModel):
    title: str = Field(..., min_length=1)
    user_id: Optional[str] = None


class ConversationUpdate(CamelModel):
    title: Optional[str] = None


class ConversationOut(OrmModel):
    id: str
    user_id: Optional[str]
    title: str
    created_at: datetime
    updated_at: datetime


# ============== MESSAGE ==============

MessageRole = Literal["user", "assistant", "system"]


class MessageCreate(CamelModel):
    conversation_id: str
    role: MessageRole
    content: str
    metadata: Optional[Dict[str, Any]] = None


class MessageOut(OrmModel):
    id: str
    conversation_id: str
    role: str
    content: str
    metadata: Optional[Any] = _meta_field()
    created_at: datetime


# ============== PROJECT ==============

class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    description: Optional[str] = None
    github_url: Optional[str] = None
    status: Optional[str] = "active"
    metadata: Optional[Dict[str, Any]] = None


class ProjectUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    github_url: Optional[str] = None
    status: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class ProjectOut(OrmModel):
    id: str
    user_id: Optional[str]
    name: str
    description: Optional[str]
    github_url: Optional[str]
    status: Optional[str]
    metadata: Optional[Any] = _meta_field()
    created_at: datetime
    updated_at: datetime


# ============== FILE ==============

class FileCreate(CamelModel):
    user_id: Optional[str] = None
    filename: str
    original_name: str
    mime_type: str
    size: int
    path: str
    analysis: Optional[Dict[str, Any]] = None


class FileOut(OrmModel):
    id: str
    user_id: Optional[str]
    filename: str
    original_name: str
    mime_type: str
    size: int
    path: str
    analysis: Optional[Dict[str, Any]]
    created_at: datetime


# ============== LLM CONFIGURATION ==============

class LLMConfigurationCreate(CamelModel):
    user_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    endpoint: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    temperature: Optional[int] = Field(70, ge=0, le=100)
    max_tokens: Optional[int] = Field(2048, ge=1)
    is_default: Optional[bool] = False


class LLMConfigurationUpdate(CamelModel):
    name: Optional[str] = None
    endpoint: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[int] = Field(None, ge=0, le=100)
    max_tokens: Optional[int] = Field(None, ge=1)
    is_default: Optional[bool] = None


class LLMConfigurationOut(OrmModel):
    id: str
    user_id: Optional[str]
    name: str
    endpoint: str
    model: str
    temperature: Optional[int]
    max_tokens: Optional[int]
    is_default: Optional[bool]
    created_at: datetime


# ============== SEARCH ENGINE ==============

class SearchEngineCreate(CamelModel):
    user_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    enabled: Optional[bool] = True
    api_key: Optional[str] = None


class SearchEngineUpdate(CamelModel):
    name: Optional[str] = None
    enabled: Optional[bool] = None
    api_key: Optional[str] = None


class SearchEngineOut(OrmModel):
    id: str
    user_id: Optional[str]
    name: str
    enabled: Optional[bool]
    api_key: Optional[str] = None
    created_at: datetime


class SafeSearchEngineOut(OrmModel):
    """Search engine as listed to clients: the key itself is never returned."""
    id: str
    user_id: Optional[str]
    name: str
    enabled: Optional[bool]
    has_api_key: bool = False
    created_at: datetime


# ============== USER PREFERENCES ==============

DEFAULT_PREFERENCES: Dict[str, Any] = {
    "theme": "dark",
    "compact_mode": False,
    "animations": True,
    "font_size": "medium",
    "code_font": "jetbrains",
    "max_concurrent_requests": 5,
    "cache_duration": 30,
    "auto_save_conversations": True,
    "analytics_collection": False,
}


class UserPreferencesUpdate(CamelModel):
    theme: Optional[Literal["light", "dark", "system"]] = None
    compact_mode: Optional[bool] = None
    animations: Optional[bool] = None
    font_size: Optional[Literal["small", "medium", "large"]] = None
    code_font: Optional[Literal["jetbrains", "fira", "source", "consolas"]] = None
    max_concurrent_requests: Optional[int] = Field(None, ge=1)
    cache_duration: Optional[int] = Field(None, ge=0)
    auto_save_conversations: Optional[bool] = None
    analytics_collection: Optional[bool] = None


class UserPreferencesOut(OrmModel):
    id: str
    user_id: Optional[str]
    theme: str
    compact_mode: bool
    animations: bool
    font_size: str
    code_font: str
    max_concurrent_requests: int
    cache_duration: int
    auto_save_conversations: bool
    analytics_collection: bool
    created_at: datetime
    updated_at: datetime


# ============== PROJECT TEMPLATE ==============

class TemplateFile(CamelModel):
    path: str = Field(..., min_length=1)
    content: str
    type: str = "file"


class ProjectTemplateCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    tech_stack: Dict[str, List[str]]
    files: List[TemplateFile]
    dependencies: Optional[Dict[str, Any]] = None
    instructions: Optional[str] = None
    difficulty: Optional[Literal["beginner", "intermediate", "advanced"]] = "beginner"
    estimated_time: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = True


class ProjectTemplateUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    tech_stack: Optional[Dict[str, List[str]]] = None
    files: Optional[List[TemplateFile]] = None
    dependencies: Optional[Dict[str, Any]] = None
    instructions: Optional[str] = None
    difficulty: Optional[Literal["beginner", "intermediate", "advanced"]] = None
    estimated_time: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None


class ProjectTemplateOut(OrmModel):
    id: str
    name: str
    description: str
    category: str
    tech_stack: Dict[str, Any]
    files: List[Dict[str, Any]]
    dependencies: Optional[Dict[str, Any]]
    instructions: Optional[str]
    difficulty: Optional[str]
    estimated_time: Optional[str]
    tags: Optional[List[str]]
    is_public: Optional[bool]
    created_at: datetime
    updated_at: datetime


# ============== PROJECT PLAN VERSION ==============

class ProjectPlanVersionCreate(CamelModel):
    title: str = Field(..., min_length=1)
    version: Optional[int] = Field(None, ge=1)
    user_id: Optional[str] = None
    description: Optional[str] = None
    goals: Optional[Any] = None
    requirements: Optional[Any] = None
    architecture: Optional[Any] = None
    tech_stack: Optional[Any] = None
    timeline: Optional[Any] = None
    resources: Optional[Any] = None
    risks: Optional[Any] = None
    notes: Optional[str] = None
    change_log: Optional[str] = None
    status: Optional[Literal["draft", "active", "archived"]] = "draft"
    parent_version_id: Optional[str] = None


class ProjectPlanVersionUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    goals: Optional[Any] = None
    requirements: Optional[Any] = None
    architecture: Optional[Any] = None
    tech_stack: Optional[Any] = None
    timeline: Optional[Any] = None
    resources: Optional[Any] = None
    risks: Optional[Any] = None
    notes: Optional[str] = None
    change_log: Optional[str] = None
    status: Optional[Literal["draft", "active", "archived"]] = None


class ProjectPlanVersionOut(OrmModel):
    id: str
    project_id: str
    user_id: Optional[str]
    version: int
    title: str
    description: Optional[str]
    goals: Optional[Any]
    requirements: Optional[Any]
    architecture: Optional[Any]
    tech_stack: Optional[Any]
    timeline: Optional[Any]
    resources: Optional[Any]
    risks: Optional[Any]
    notes: Optional[str]
    change_log: Optional[str]
    status: Optional[str]
    parent_version_id: Optional[str]
    created_at: datetime
    updated_at: datetime
