# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import json
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from serenai.models.database import get_db
from serenai.models.insight import INSIGHT_TYPES, Insight
from serenai.models.journal import JournalEntry
from serenai.models.message_model import Conversation
from serenai.models.mood import MoodRecord
from serenai.models.user import User
from serenai.routers.chat_router import serialize_message
from serenai.routers.journal_router import serialize_entry
from serenai.routers.mood_router import serialize_mood
from serenai.services.activity_aggregator import insight_window, weekly_insight_stats, window_prompt_data
from serenai.services.openai_service import generate_chat_response
from serenai.utils.auth_utils import get_current_user
from serenai.utils.json_utils import parse_llm_json
from serenai.utils.prompt_templates import INSIGHTS_SYSTEM, insights_prompt
from serenai.utils.rate_limit_utils import GENERATE_RATE_LIMIT, limiter

router = APIRouter(prefix="/insights", tags=["Insights"])
logger = logging.getLogger(__name__)

RECENT_INSIGHTS = 10


def serialize_insight(i: Insight) -> dict:
    return {
        "id": i.id,
        "title": i.title,
        "description": i.description,
        "type": i.insight_type,
        "created_at": i.created_at.isoformat(),
    }


def _valid_insights(parsed) -> list:
    """Keep well-formed items; unknown types fall back to 'pattern'."""
    if not isinstance(parsed, list):
        return []

    valid = []
    for item in parsed:
        if not isinstance(item, dict):
            continue
        title = item.get("title")
        description = item.get("description")
        if not isinstance(title, str) or not title.strip():
            continue
        if not isinstance(description, str) or not description.strip():
            continue
        insight_type = item.get("type")
        valid.append({
            "title": title.strip(),
            "description": description.strip(),
            "insight_type": insight_type if insight_type in INSIGHT_TYPES else "pattern",
        })
    return valid


@router.get("")
def list_insights(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    insights = (
        db.query(Insight)
        .filter(Insight.user_id == user.id)
        .order_by(Insight.created_at.desc(), Insight.id.desc())
        .limit(RECENT_INSIGHTS)
        .all()
    )
    return {"insights": [serialize_insight(i) for i in insights]}


@router.get("/stats")
def insight_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return weekly_insight_stats(db, user)


@router.post("/generate")
@limiter.limit(GENERATE_RATE_LIMIT)
def generate_insights(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    mood_data, journal_data, chat_data = window_prompt_data(insight_window(db, user, days=30))

    reply = generate_chat_response(
        [{"role": "user", "content": insights_prompt(mood_data, journal_data, chat_data)}],
        system_prompt=INSIGHTS_SYSTEM,
    )

    try:
        items = _valid_insights(parse_llm_json(reply))
    except ValueError:
        logger.warning("⚠️ Could not parse generated insights for user %s", user.id)
        items = []

    insights = [Insight(user_id=user.id, **item) for item in items]
    if insights:
        db.add_all(insights)
        db.commit()
        for i in insights:
            db.refresh(i)

    logger.info("💡 Generated %d insights for user %s", len(insights), user.id)
    return {"insights": [serialize_insight(i) for i in insights]}


# 📦 Full personal data export as a downloadable JSON file
@router.get("/export")
def export_data(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    now = datetime.utcnow()

    moods = db.query(MoodRecord).filter(MoodRecord.user_id == user.id).order_by(MoodRecord.created_at.desc()).all()
    entries = db.query(JournalEntry).filter(JournalEntry.user_id == user.id).order_by(JournalEntry.created_at.desc()).all()
    conversations = (
        db.query(Conversation)
        .filter(Conversation.user_id == user.id)
        .order_by(Conversation.created_at.desc())
        .all()
    )
    insights = db.query(Insight).filter(Insight.user_id == user.id).order_by(Insight.created_at.desc()).all()

    export = {
        "user": {"id": user.id, "name": user.name, "email": user.email},
        "export_date": now.isoformat(),
        "mood_records": [serialize_mood(r) for r in moods],
        "journal_entries": [serialize_entry(e) for e in entries],
        "conversations": [
            {
                "id": c.id,
                "title": c.title,
                "created_at": c.created_at.isoformat(),
                "messages": [serialize_message(m) for m in c.messages],
            }
            for c in conversations
        ],
        "insights": [serialize_insight(i) for i in insights],
    }

    filename = f"serenai-data-{now.date().isoformat()}.json"
    return Response(
        content=json.dumps(export, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
