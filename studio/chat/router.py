# FILE: studio/chat/router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from studio.auth import AuthResult, optional_auth
from studio.chat import export
from studio.db import get_db
from studio.storage import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


class ConversationCreateRequest(schemas.CamelModel):
    title: str


class ConversationExportRequest(schemas.CamelModel):
    conversation_id: str
    format: str = "json"


# ============== CONVERSATIONS ==============

@router.get("/conversations", response_model=List[schemas.ConversationOut])
def list_conversations(auth: AuthResult = Depends(optional_auth), db: Session = Depends(get_db)):
    return service.list_conversations(db, auth.user_id)


@router.post("/conversations", response_model=schemas.ConversationOut)
def create_conversation(
    data: ConversationCreateRequest,
    auth: AuthResult = Depends(optional_auth),
    db: Session = Depends(get_db),
):
    if not data.title.strip():
        raise HTTPException(status_code=400, detail="title is required")
    return service.create_conversation(
        db, schemas.ConversationCreate(title=data.title, user_id=auth.user_id)
    )


@router.delete("/conversations/{conversation_id}")
def delete_conversation(conversation_id: str, db: Session = Depends(get_db)):
    success = service.delete_conversation(db, conversation_id)
    if not success:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"success": True}


# ============== MESSAGES ==============

@router.get("/conversations/{conversation_id}/messages", response_model=List[schemas.MessageOut])
def list_messages(conversation_id: str, db: Session = Depends(get_db)):
    return service.list_messages(db, conversation_id)


@router.post("/messages", response_model=schemas.MessageOut)
def create_message(data: schemas.MessageCreate, db: Session = Depends(get_db)):
    conversation = service.get_conversation(db, data.conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")
    message = service.create_message(db, data)
    service.touch_conversation(db, data.conversation_id)
    return message


# ============== EXPORT ==============

@router.post("/export/conversation")
def export_conversation(data: ConversationExportRequest, db: Session = Depends(get_db)):
    if data.format not in export.SUPPORTED_FORMATS:
        raise HTTPException(
            status_code=400,
            detail="Unsupported export format. Use 'json' or 'markdown'",
        )

    conversation = service.get_conversation(db, data.conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")

    messages = service.list_messages(db, data.conversation_id)

    if data.format == "json":
        return JSONResponse(
            content=export.build_export_document(conversation, messages),
            headers={
                "Content-Disposition": f'attachment; filename="conversation-{conversation.id}.json"'
            },
        )

    return Response(
        content=export.render_markdown(conversation, messages),
        media_type="text/markdown",
        headers={
            "Content-Disposition": f'attachment; filename="conversation-{conversation.id}.md"'
        },
    )
