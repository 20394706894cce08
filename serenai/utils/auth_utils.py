# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from typing import Optional
from fastapi import Depends, HTTPException, Header
from sqlalchemy.orm import Session
from serenai.models.database import get_db
from serenai.models.user import User
from serenai.models.message_model import Message
from serenai.utils.jwt_utils import verify_access_token


# ✅ Dependency to extract token payload
def require_token(authorization: Optional[str] = Header(None)) -> dict:
    if not authorization:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")
    token = authorization[len("Bearer "):].strip()
    return verify_access_token(token)


# ✅ Dependency resolving the local user for the token subject
def get_current_user(
    user_data: dict = Depends(require_token),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.external_id == str(user_data["sub"])).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def build_chat_history(db: Session, conversation_id: int, recent_count: int = 10) -> list:
    """
    Returns the last `recent_count` turns of a conversation, oldest first,
    as `{role, content}` dicts ready for the chat completion call.
    """
    recent = (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(recent_count)
        .all()
    )
    return [{"role": m.role, "content": m.content} for m in reversed(recent)]
