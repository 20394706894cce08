# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from serenai.models.database import Base


class TherapyPlan(Base):
    __tablename__ = "therapy_plans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    goals = Column(JSON, default=list)
    activities = Column(JSON, default=list)
    resources = Column(JSON, default=list)
    duration = Column(Integer, default=30)  # days
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="therapy_plans")
    sessions = relationship(
        "TherapySession",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="TherapySession.scheduled_for.desc()",
    )


class TherapySession(Base):
    __tablename__ = "therapy_sessions"

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("therapy_plans.id"), nullable=False, index=True)
    title = Column(String, default="Therapy Session")
    notes = Column(Text, nullable=True)
    mood = Column(Float, nullable=True)
    scheduled_for = Column(DateTime, default=datetime.utcnow)
    completed = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    plan = relationship("TherapyPlan", back_populates="sessions")
