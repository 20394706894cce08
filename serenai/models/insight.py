# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from serenai.models.database import Base

INSIGHT_TYPES = ("pattern", "suggestion", "warning")


class Insight(Base):
    __tablename__ = "insights"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    insight_type = Column(String, default="pattern")
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="insights")
