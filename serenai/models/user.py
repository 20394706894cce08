# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from serenai.models.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # ✅ Subject of the identity provider token
    external_id = Column(String, nullable=False, unique=True, index=True)
    email = Column(String, default="")
    name = Column(String, default="")
    avatar = Column(String, default="")

    # ✅ Community moderation (pinning posts)
    is_moderator = Column(Boolean, default=False)

    # ✅ Notification preferences
    notifications_enabled = Column(Boolean, default=True)
    daily_reminder_enabled = Column(Boolean, default=True)
    reminder_hour = Column(Integer, default=9)  # local hour, 0-23
    weekly_digest_enabled = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # ✅ Relationships
    mood_records = relationship("MoodRecord", back_populates="user")
    journal_entries = relationship("JournalEntry", back_populates="user")
    activity_sessions = relationship("ActivitySession", back_populates="user")
    conversations = relationship("Conversation", back_populates="user")
    insights = relationship("Insight", back_populates="user")
    therapy_plans = relationship("TherapyPlan", back_populates="user")
    posts = relationship("Post", back_populates="user")
    notifications = relationship("Notification", back_populates="user")

    def __repr__(self):
        return f"<User id={self.id} external_id={self.external_id}>"
