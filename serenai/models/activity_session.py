# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from serenai.models.database import Base
import enum


class SessionType(enum.Enum):
    chat = "chat"
    journal = "journal"
    mood = "mood"


# Default durations (seconds) logged per interaction
SESSION_DURATIONS = {
    SessionType.chat: 60,
    SessionType.journal: 300,
    SessionType.mood: 60,
}


class ActivitySession(Base):
    """Append-only activity log; one row per chat turn, journal entry or mood check-in."""

    __tablename__ = "activity_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    session_type = Column(Enum(SessionType), nullable=False)
    duration = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="activity_sessions")

    __table_args__ = (
        Index("ix_session_user_created", "user_id", "created_at"),
    )
