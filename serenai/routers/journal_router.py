# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from serenai.models.activity_session import SessionType
from serenai.models.database import get_db
from serenai.models.journal import JournalEntry
from serenai.models.mood import MoodRecord
from serenai.models.user import User
from serenai.schemas.journal_schemas import JournalCreateRequest, JournalUpdateRequest
from serenai.services.openai_service import analyze_sentiment, generate_journal_prompt
from serenai.utils.auth_utils import get_current_user
from serenai.utils.json_utils import normalize_tags
from serenai.utils.rate_limit_utils import GENERATE_RATE_LIMIT, limiter
from serenai.utils.usage_tracker import track_session

router = APIRouter(prefix="/journal", tags=["Journal"])
logger = logging.getLogger(__name__)


def serialize_entry(e: JournalEntry) -> dict:
    return {
        "id": e.id,
        "title": e.title,
        "content": e.content,
        "mood": e.mood,
        "tags": e.tags or [],
        "created_at": e.created_at.isoformat(),
        "updated_at": e.updated_at.isoformat() if e.updated_at else None,
    }


def _owned_entry(db: Session, user: User, entry_id: int) -> JournalEntry:
    entry = (
        db.query(JournalEntry)
        .filter(JournalEntry.id == entry_id, JournalEntry.user_id == user.id)
        .first()
    )
    if not entry:
        raise HTTPException(status_code=404, detail="Journal entry not found")
    return entry


@router.get("")
def list_entries(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    entries = (
        db.query(JournalEntry)
        .filter(JournalEntry.user_id == user.id)
        .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        .all()
    )
    return {"entries": [serialize_entry(e) for e in entries]}


@router.post("")
def create_entry(
    payload: JournalCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not payload.content.strip():
        raise HTTPException(status_code=400, detail="Content is required")

    entry = JournalEntry(
        user_id=user.id,
        title=(payload.title or "").strip(),
        content=payload.content,
        mood=payload.mood,
        tags=normalize_tags(payload.tags),
    )
    db.add(entry)
    track_session(db, user, SessionType.journal, commit=False)
    db.commit()
    db.refresh(entry)

    return {"entry": serialize_entry(entry)}


@router.put("/{entry_id}")
def update_entry(
    entry_id: int,
    payload: JournalUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    entry = _owned_entry(db, user, entry_id)

    if payload.content is not None:
        if not payload.content.strip():
            raise HTTPException(status_code=400, detail="Content is required")
        entry.content = payload.content
    if payload.title is not None:
        entry.title = payload.title.strip()
    if payload.mood is not None:
        entry.mood = payload.mood
    if payload.tags is not None:
        entry.tags = normalize_tags(payload.tags)

    db.commit()
    db.refresh(entry)
    return {"entry": serialize_entry(entry)}


@router.delete("/{entry_id}")
def delete_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    entry = _owned_entry(db, user, entry_id)
    db.delete(entry)
    db.commit()
    return {"success": True}


# ✍️ Writing prompt seeded by the latest mood check-in
@router.get("/prompt")
@limiter.limit(GENERATE_RATE_LIMIT)
def journal_prompt(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    latest = (
        db.query(MoodRecord.mood)
        .filter(MoodRecord.user_id == user.id)
        .order_by(MoodRecord.created_at.desc())
        .first()
    )
    prompt = generate_journal_prompt(latest[0] if latest else None)
    return {"prompt": prompt}


@router.post("/{entry_id}/analyze")
@limiter.limit(GENERATE_RATE_LIMIT)
def analyze_entry(
    request: Request,
    entry_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    entry = _owned_entry(db, user, entry_id)
    return {"entry_id": entry.id, "analysis": analyze_sentiment(entry.content)}
