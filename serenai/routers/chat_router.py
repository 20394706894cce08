# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from serenai.models.activity_session import SessionType
from serenai.models.database import get_db
from serenai.models.message_model import Conversation, Message
from serenai.models.user import User
from serenai.schemas.chat_schemas import ChatRequest, SaveConversationRequest
from serenai.services.openai_service import generate_chat_response, moderate_content
from serenai.utils.auth_utils import build_chat_history, get_current_user
from serenai.utils.rate_limit_utils import CHAT_RATE_LIMIT, limiter
from serenai.utils.red_flag_utils import CRISIS_RESPONSE, severe_categories
from serenai.utils.usage_tracker import track_session

router = APIRouter(prefix="/chat", tags=["Chat"])
logger = logging.getLogger(__name__)

RECENT_TURNS = 10
TITLE_LENGTH = 50


def _title_from(text: str) -> str:
    text = text.strip()
    return text[:TITLE_LENGTH] + ("..." if len(text) > TITLE_LENGTH else "")


def _owned_conversation(db: Session, user: User, conversation_id: int):
    return (
        db.query(Conversation)
        .filter(Conversation.id == conversation_id, Conversation.user_id == user.id)
        .first()
    )


def serialize_message(m: Message) -> dict:
    return {
        "id": m.id,
        "role": m.role,
        "content": m.content,
        "created_at": m.created_at.isoformat(),
    }


@router.post("")
@limiter.limit(CHAT_RATE_LIMIT)
def chat(
    request: Request,
    payload: ChatRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    message = payload.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")

    # 🚩 Moderation gate: severe categories never reach the model or the database
    moderation = moderate_content(message)
    if moderation.flagged:
        severe = severe_categories(moderation.categories)
        if severe:
            logger.warning("🚩 Severe content from user %s: %s", user.id, severe)
            return {"response": CRISIS_RESPONSE, "conversation_id": payload.conversation_id}
        logger.warning("⚠️ Flagged content from user %s: %s", user.id, moderation.categories)

    conversation = None
    if payload.conversation_id is not None:
        # Foreign or stale ids silently start a new conversation
        conversation = _owned_conversation(db, user, payload.conversation_id)

    if not conversation:
        conversation = Conversation(user_id=user.id, title=_title_from(message))
        db.add(conversation)
        db.flush()

    db.add(Message(conversation_id=conversation.id, role="user", content=message))
    db.commit()

    history = build_chat_history(db, conversation.id, recent_count=RECENT_TURNS)
    reply = generate_chat_response(history)

    db.add(Message(conversation_id=conversation.id, role="assistant", content=reply))
    track_session(db, user, SessionType.chat, commit=False)
    db.commit()

    return {"response": reply, "conversation_id": conversation.id}


@router.get("/history")
def chat_history(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    conversations = (
        db.query(Conversation)
        .filter(Conversation.user_id == user.id)
        .order_by(Conversation.created_at.desc(), Conversation.id.desc())
        .all()
    )
    if not conversations:
        return {"conversations": []}

    counts = dict(
        db.query(Message.conversation_id, func.count(Message.id))
        .filter(Message.conversation_id.in_([c.id for c in conversations]))
        .group_by(Message.conversation_id)
        .all()
    )

    result = []
    for c in conversations:
        title = c.title
        if not title and c.messages:
            title = c.messages[0].content[:30]
        result.append({
            "id": c.id,
            "title": title or "Conversation",
            "created_at": c.created_at.isoformat(),
            "message_count": counts.get(c.id, 0),
        })
    return {"conversations": result}


@router.get("/conversation/{conversation_id}")
def get_conversation(
    conversation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    conversation = _owned_conversation(db, user, conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")

    return {
        "id": conversation.id,
        "title": conversation.title,
        "created_at": conversation.created_at.isoformat(),
        "messages": [serialize_message(m) for m in conversation.messages],
    }


@router.delete("/conversation/{conversation_id}")
def delete_conversation(
    conversation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    conversation = _owned_conversation(db, user, conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")

    db.delete(conversation)
    db.commit()
    return {"success": True}


@router.post("/save")
def save_conversation(
    payload: SaveConversationRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not payload.messages:
        raise HTTPException(status_code=400, detail="Invalid messages data")

    conversation = Conversation(user_id=user.id, title=payload.title or "New Conversation")
    db.add(conversation)
    db.flush()

    for m in payload.messages:
        db.add(Message(conversation_id=conversation.id, role=m.role, content=m.content))
    db.commit()

    return {"success": True, "conversation_id": conversation.id}
