# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from serenai.models.activity_session import SessionType
from serenai.models.database import get_db
from serenai.models.mood import MoodRecord
from serenai.models.user import User
from serenai.schemas.mood_schemas import MoodCreateRequest
from serenai.utils.auth_utils import get_current_user
from serenai.utils.usage_tracker import track_session

router = APIRouter(prefix="/mood", tags=["Mood"])


def serialize_mood(r: MoodRecord) -> dict:
    return {
        "id": r.id,
        "mood": r.mood,
        "note": r.note,
        "created_at": r.created_at.isoformat(),
    }


@router.get("")
def list_moods(
    limit: int = 100,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    records = (
        db.query(MoodRecord)
        .filter(MoodRecord.user_id == user.id)
        .order_by(MoodRecord.created_at.desc(), MoodRecord.id.desc())
        .limit(max(1, min(limit, 500)))
        .all()
    )
    return {"mood_records": [serialize_mood(r) for r in records]}


@router.post("")
def create_mood(
    payload: MoodCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    note = (payload.note or "").strip() or None
    record = MoodRecord(user_id=user.id, mood=payload.mood, note=note)
    db.add(record)
    track_session(db, user, SessionType.mood, commit=False)
    db.commit()
    db.refresh(record)
    return {"mood_record": serialize_mood(record)}


@router.delete("/{record_id}")
def delete_mood(
    record_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    record = (
        db.query(MoodRecord)
        .filter(MoodRecord.id == record_id, MoodRecord.user_id == user.id)
        .first()
    )
    if not record:
        raise HTTPException(status_code=404, detail="Mood record not found")

    db.delete(record)
    db.commit()
    return {"success": True}
