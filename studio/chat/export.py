# FILE: studio/chat/export.py
"""
Conversation export renderers (JSON document and Markdown transcript).
"""
from datetime import datetime
from typing import Any, Dict, List

from studio.storage import models, schemas

SUPPORTED_FORMATS = ("json", "markdown")


def _iso(value) -> str:
    return value.isoformat() if isinstance(value, datetime) else str(value)


def build_export_document(
    conversation: models.Conversation, messages: List[models.Message]
) -> Dict[str, Any]:
    return {
        "conversation": schemas.ConversationOut.model_validate(conversation).model_dump(
            mode="json", by_alias=True
        ),
        "messages": [
            schemas.MessageOut.model_validate(m).model_dump(mode="json", by_alias=True)
            for m in messages
        ],
        "exportedAt": datetime.utcnow().isoformat(),
    }


def render_markdown(conversation: models.Conversation, messages: List[models.Message]) -> str:
    parts = [
        f"# {conversation.title}\n\n",
        f"**Created:** {_iso(conversation.created_at)}\n",
        f"**Updated:** {_iso(conversation.updated_at)}\n\n",
    ]
    for message in messages:
        role = message.role[:1].upper() + message.role[1:]
        parts.append(f"## {role}\n\n")
        parts.append(f"{message.content}\n\n")
        parts.append(f"*{_iso(message.created_at)}*\n\n---\n\n")
    return "".join(parts)
