# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pytz import utc
from sqlalchemy.orm import Session

from serenai.models.database import get_db
from serenai.models.therapy_plan import TherapyPlan, TherapySession
from serenai.models.user import User
from serenai.schemas.therapy_schemas import TherapySessionCreateRequest, TherapySessionUpdateRequest
from serenai.services.activity_aggregator import average_mood, insight_window, window_prompt_data
from serenai.services.openai_service import generate_chat_response
from serenai.utils.auth_utils import get_current_user
from serenai.utils.json_utils import parse_llm_json
from serenai.utils.prompt_templates import THERAPY_PLAN_SYSTEM, therapy_plan_prompt
from serenai.utils.rate_limit_utils import GENERATE_RATE_LIMIT, limiter

router = APIRouter(prefix="/therapy-plans", tags=["Therapy Plans"])
logger = logging.getLogger(__name__)

MIN_DURATION = 14
MAX_DURATION = 90
PLAN_LIST_FIELDS = ("goals", "activities", "resources")


def serialize_session(s: TherapySession) -> dict:
    return {
        "id": s.id,
        "plan_id": s.plan_id,
        "title": s.title,
        "notes": s.notes,
        "mood": s.mood,
        "scheduled_for": s.scheduled_for.isoformat() if s.scheduled_for else None,
        "completed": bool(s.completed),
        "created_at": s.created_at.isoformat(),
    }


def serialize_plan(p: TherapyPlan) -> dict:
    return {
        "id": p.id,
        "title": p.title,
        "description": p.description,
        "goals": p.goals or [],
        "activities": p.activities or [],
        "resources": p.resources or [],
        "duration": p.duration,
        "created_at": p.created_at.isoformat(),
        "sessions": [serialize_session(s) for s in p.sessions],
    }


def clamp_duration(value) -> int:
    return max(MIN_DURATION, min(MAX_DURATION, int(round(float(value)))))


def validate_plan(data) -> Optional[dict]:
    """Returns the cleaned plan fields, or None when the generated plan is unusable."""
    if not isinstance(data, dict):
        return None

    title = data.get("title")
    description = data.get("description")
    if not isinstance(title, str) or not title.strip():
        return None
    if not isinstance(description, str) or not description.strip():
        return None

    cleaned = {"title": title.strip(), "description": description.strip()}
    for name in PLAN_LIST_FIELDS:
        items = data.get(name)
        if not isinstance(items, list) or not items:
            return None
        cleaned[name] = [str(item) for item in items]

    try:
        cleaned["duration"] = clamp_duration(data.get("duration"))
    except (TypeError, ValueError, OverflowError):
        return None
    return cleaned


def _owned_plan(db: Session, user: User, plan_id: int) -> TherapyPlan:
    plan = (
        db.query(TherapyPlan)
        .filter(TherapyPlan.id == plan_id, TherapyPlan.user_id == user.id)
        .first()
    )
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


def _plan_session(db: Session, plan: TherapyPlan, session_id: int) -> TherapySession:
    session = (
        db.query(TherapySession)
        .filter(TherapySession.id == session_id, TherapySession.plan_id == plan.id)
        .first()
    )
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.get("")
def list_plans(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    plans = (
        db.query(TherapyPlan)
        .filter(TherapyPlan.user_id == user.id)
        .order_by(TherapyPlan.created_at.desc(), TherapyPlan.id.desc())
        .all()
    )
    return {"plans": [serialize_plan(p) for p in plans]}


@router.post("/generate")
@limiter.limit(GENERATE_RATE_LIMIT)
def generate_plan(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    window = insight_window(db, user, days=30)
    mood_data, journal_data, chat_data = window_prompt_data(window)
    avg_mood = average_mood(r.mood for r in window["mood_records"])

    reply = generate_chat_response(
        [{"role": "user", "content": therapy_plan_prompt(avg_mood, mood_data, journal_data, chat_data)}],
        system_prompt=THERAPY_PLAN_SYSTEM,
    )

    try:
        parsed = parse_llm_json(reply)
    except ValueError:
        logger.error("🛑 Therapy plan reply is not JSON for user %s: %r", user.id, reply)
        raise HTTPException(status_code=500, detail="Failed to generate therapy plan")

    plan_data = validate_plan(parsed)
    if not plan_data:
        logger.error("🛑 Therapy plan missing required fields for user %s: %r", user.id, parsed)
        raise HTTPException(status_code=500, detail="Invalid therapy plan generated")

    plan = TherapyPlan(user_id=user.id, **plan_data)
    db.add(plan)
    db.commit()
    db.refresh(plan)

    return {"plan": serialize_plan(plan)}


@router.delete("/{plan_id}")
def delete_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    plan = _owned_plan(db, user, plan_id)
    db.delete(plan)
    db.commit()
    return {"success": True}


@router.post("/{plan_id}/sessions")
def create_session(
    plan_id: int,
    payload: TherapySessionCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    plan = _owned_plan(db, user, plan_id)

    scheduled_for = payload.scheduled_for or datetime.utcnow()
    if scheduled_for.tzinfo is not None:
        scheduled_for = scheduled_for.astimezone(utc).replace(tzinfo=None)

    session = TherapySession(
        plan_id=plan.id,
        title=payload.title or "Therapy Session",
        notes=payload.notes,
        mood=payload.mood,
        scheduled_for=scheduled_for,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return {"session": serialize_session(session)}


@router.patch("/{plan_id}/sessions/{session_id}")
def update_session(
    plan_id: int,
    session_id: int,
    payload: TherapySessionUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    plan = _owned_plan(db, user, plan_id)
    session = _plan_session(db, plan, session_id)

    for field_name, value in payload.model_dump(exclude_none=True).items():
        setattr(session, field_name, value)
    db.commit()
    db.refresh(session)
    return {"session": serialize_session(session)}


@router.delete("/{plan_id}/sessions/{session_id}")
def delete_session(
    plan_id: int,
    session_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    plan = _owned_plan(db, user, plan_id)
    session = _plan_session(db, plan, session_id)
    db.delete(session)
    db.commit()
    return {"success": True}
