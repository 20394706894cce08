# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from serenai.models.database import Base
from serenai.utils.encryption import EncryptedText  # 🔐 Encryption utils


class MoodRecord(Base):
    __tablename__ = "mood_records"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    mood = Column(Float, nullable=False)  # 1-10

    note = Column(EncryptedText, nullable=True)  # 🔐 Encrypted

    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="mood_records")

    __table_args__ = (
        Index("ix_mood_user_created", "user_id", "created_at"),
    )
