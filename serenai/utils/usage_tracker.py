# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from sqlalchemy.orm import Session
from serenai.models.user import User
from serenai.models.activity_session import ActivitySession, SessionType, SESSION_DURATIONS


def track_session(db: Session, user: User, session_type: SessionType, commit: bool = True) -> ActivitySession:
    """
    Append one activity session row for streak/engagement stats.
    Duration is the fixed default for the interaction type.
    """
    session = ActivitySession(
        user_id=user.id,
        session_type=session_type,
        duration=SESSION_DURATIONS[session_type],
    )
    db.add(session)

    if commit:
        db.commit()
    return session
