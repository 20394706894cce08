# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from serenai.models.activity_session import ActivitySession, SessionType
from serenai.models.journal import JournalEntry
from serenai.models.message_model import Conversation, Message
from serenai.models.mood import MoodRecord
from serenai.models.user import User

logger = logging.getLogger(__name__)

SAMPLE_EXTERNAL_ID = "sample_user_id"


def seed_sample_data(db: Session, now: datetime = None) -> User:
    """
    Insert a sample user with a little history. Re-running reuses the user
    and leaves existing records alone.
    """
    now = now or datetime.utcnow()

    user = db.query(User).filter(User.external_id == SAMPLE_EXTERNAL_ID).first()
    if user:
        logger.info("🌱 Sample user already present, skipping seed.")
        return user

    user = User(external_id=SAMPLE_EXTERNAL_ID, email="sample@example.com", name="Sample User")
    db.add(user)
    db.flush()

    conversation = Conversation(user_id=user.id, title="First Conversation", created_at=now - timedelta(days=1))
    db.add(conversation)
    db.flush()
    db.add_all([
        Message(conversation_id=conversation.id, role="user",
                content="Hello, I need someone to talk to.", created_at=now - timedelta(days=1)),
        Message(conversation_id=conversation.id, role="assistant",
                content="I'm here for you. What's on your mind today?", created_at=now - timedelta(days=1)),
    ])

    db.add_all([
        JournalEntry(user_id=user.id, title="Gratitude Journal",
                     content="Today I am grateful for my family and health.",
                     mood=8.5, tags=["gratitude", "family"], created_at=now - timedelta(days=2)),
        JournalEntry(user_id=user.id, title="Challenging Day",
                     content="Work was stressful today, but I managed to stay calm.",
                     mood=6.0, tags=["stress", "work"], created_at=now - timedelta(days=1)),
    ])

    db.add_all([
        MoodRecord(user_id=user.id, mood=7.5, note="Feeling good today", created_at=now - timedelta(days=2)),
        MoodRecord(user_id=user.id, mood=8.0, note="Great day with friends", created_at=now - timedelta(days=1)),
        MoodRecord(user_id=user.id, mood=5.5, note="A bit tired", created_at=now),
    ])

    db.add_all([
        ActivitySession(user_id=user.id, session_type=SessionType.chat, duration=300, created_at=now - timedelta(days=1)),
        ActivitySession(user_id=user.id, session_type=SessionType.journal, duration=600, created_at=now - timedelta(days=1)),
        ActivitySession(user_id=user.id, session_type=SessionType.mood, duration=120, created_at=now),
    ])

    db.commit()
    db.refresh(user)
    logger.info("🌱 Database seeded with sample user %s", user.id)
    return user
