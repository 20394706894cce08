# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from serenai.models.notification import Notification

logger = logging.getLogger(__name__)

# Identical notifications inside this window are dropped
DUPLICATE_WINDOW = timedelta(seconds=30)


def add_notification(
    db: Session,
    user_id: int,
    title: str,
    message: str,
    notification_type: str = "system",
    action_label: Optional[str] = None,
    action_href: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[Notification]:
    """
    Store a notification for the user. Returns None when the same title/message
    was already sent within DUPLICATE_WINDOW.
    """
    now = now or datetime.utcnow()

    duplicate = (
        db.query(Notification)
        .filter(
            Notification.user_id == user_id,
            Notification.title == title,
            Notification.message == message,
            Notification.created_at >= now - DUPLICATE_WINDOW,
        )
        .first()
    )
    if duplicate:
        logger.info("🔁 Skipping duplicate notification '%s' for user %s", title, user_id)
        return None

    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        notification_type=notification_type,
        action_label=action_label,
        action_href=action_href,
        created_at=now,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def send_welcome_notification(db: Session, user_id: int, user_name: str = "") -> Optional[Notification]:
    message = (
        f"Hi {user_name}! We're glad you're here. Start by logging your mood or writing a journal entry."
        if user_name
        else "We're glad you're here. Start by logging your mood or writing a journal entry."
    )
    return add_notification(
        db,
        user_id,
        title="Welcome to SerenAI!",
        message=message,
        notification_type="system",
        action_label="Go to Dashboard",
        action_href="/dashboard",
    )


def serialize_notification(n: Notification) -> dict:
    return {
        "id": n.id,
        "title": n.title,
        "message": n.message,
        "type": n.notification_type,
        "action": {"label": n.action_label, "href": n.action_href} if n.action_href else None,
        "read": n.read,
        "created_at": n.created_at.isoformat(),
    }
