# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from serenai.models.activity_session import ActivitySession
from serenai.models.insight import Insight
from serenai.models.journal import JournalEntry
from serenai.models.message_model import Conversation, Message
from serenai.models.mood import MoodRecord
from serenai.models.notification import Notification
from serenai.models.post import Post, PostLike, PostReply, SavedPost
from serenai.models.therapy_plan import TherapyPlan, TherapySession
from serenai.models.user import User

logger = logging.getLogger(__name__)


def _user_posts(user_id: int):
    return select(Post.id).where(Post.user_id == user_id)


def _delete_messages(db: Session, user_id: int) -> int:
    conversations = select(Conversation.id).where(Conversation.user_id == user_id)
    return db.query(Message).filter(Message.conversation_id.in_(conversations)).delete(synchronize_session=False)


def _delete_conversations(db: Session, user_id: int) -> int:
    return db.query(Conversation).filter(Conversation.user_id == user_id).delete(synchronize_session=False)


def _delete_journal_entries(db: Session, user_id: int) -> int:
    return db.query(JournalEntry).filter(JournalEntry.user_id == user_id).delete(synchronize_session=False)


def _delete_mood_records(db: Session, user_id: int) -> int:
    return db.query(MoodRecord).filter(MoodRecord.user_id == user_id).delete(synchronize_session=False)


def _delete_activity_sessions(db: Session, user_id: int) -> int:
    return db.query(ActivitySession).filter(ActivitySession.user_id == user_id).delete(synchronize_session=False)


def _delete_insights(db: Session, user_id: int) -> int:
    return db.query(Insight).filter(Insight.user_id == user_id).delete(synchronize_session=False)


def _delete_therapy_plans(db: Session, user_id: int) -> int:
    plans = select(TherapyPlan.id).where(TherapyPlan.user_id == user_id)
    db.query(TherapySession).filter(TherapySession.plan_id.in_(plans)).delete(synchronize_session=False)
    return db.query(TherapyPlan).filter(TherapyPlan.user_id == user_id).delete(synchronize_session=False)


def _delete_notifications(db: Session, user_id: int) -> int:
    return db.query(Notification).filter(Notification.user_id == user_id).delete(synchronize_session=False)


def _delete_community_activity(db: Session, user_id: int) -> int:
    posts = _user_posts(user_id)
    count = 0
    for model in (PostLike, SavedPost, PostReply):
        count += (
            db.query(model)
            .filter(or_(model.user_id == user_id, model.post_id.in_(posts)))
            .delete(synchronize_session=False)
        )
    count += db.query(Post).filter(Post.user_id == user_id).delete(synchronize_session=False)
    return count


def _delete_user(db: Session, user_id: int) -> int:
    return db.query(User).filter(User.id == user_id).delete(synchronize_session=False)


# Children before parents so foreign keys hold at every step
ACCOUNT_PURGE_STEPS = [
    ("Messages", _delete_messages),
    ("Conversations", _delete_conversations),
    ("JournalEntries", _delete_journal_entries),
    ("MoodRecords", _delete_mood_records),
    ("ActivitySessions", _delete_activity_sessions),
    ("Insights", _delete_insights),
    ("TherapyPlans", _delete_therapy_plans),
    ("Notifications", _delete_notifications),
    ("Community", _delete_community_activity),
    ("User", _delete_user),
]


def delete_user_account(db: Session, user: User) -> dict:
    """
    Remove the user and everything they own in one transaction.
    Any failing step rolls back all previous steps and re-raises.
    """
    user_id = user.id
    deleted = {}

    try:
        for name, step in ACCOUNT_PURGE_STEPS:
            deleted[name] = step(db, user_id)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("🛑 Account deletion for user %s rolled back.", user_id)
        raise

    logger.info("✅ Deleted account %s: %s", user_id, deleted)
    return deleted
