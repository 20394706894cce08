# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from serenai.models.database import get_db
from serenai.models.notification import Notification
from serenai.models.user import User
from serenai.schemas.notification_schemas import ReminderCreateRequest
from serenai.services.notification_service import add_notification, serialize_notification
from serenai.services.reminder_scheduler import ReminderScheduler, get_scheduler
from serenai.utils.auth_utils import get_current_user

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _owned_notification(db: Session, user: User, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user.id)
        .first()
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("")
def list_notifications(
    limit: int = 50,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    notifications = (
        db.query(Notification)
        .filter(Notification.user_id == user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(max(1, min(limit, 200)))
        .all()
    )
    unread = (
        db.query(Notification)
        .filter(Notification.user_id == user.id, Notification.read.is_(False))
        .count()
    )
    return {
        "notifications": [serialize_notification(n) for n in notifications],
        "unread_count": unread,
    }


@router.patch("/{notification_id}/read")
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    notification = _owned_notification(db, user, notification_id)
    notification.read = True
    db.commit()
    return {"status": "updated"}


@router.post("/read-all")
def mark_all_as_read(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user.id, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.commit()
    return {"status": "updated", "count": updated}


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    notification = _owned_notification(db, user, notification_id)
    db.delete(notification)
    db.commit()
    return {"success": True}


@router.delete("")
def clear_notifications(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    deleted = (
        db.query(Notification)
        .filter(Notification.user_id == user.id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return {"success": True, "count": deleted}


@router.post("/test")
def send_test_notification(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    notification = add_notification(
        db,
        user.id,
        title="Test Notification",
        message="This is a test notification from SerenAI.",
        notification_type="system",
    )
    if notification is None:
        return {"sent": False, "notification": None}
    return {"sent": True, "notification": serialize_notification(notification)}


# ⏰ One-shot reminders delivered by the background scheduler
@router.post("/reminders")
def create_reminder(
    payload: ReminderCreateRequest,
    user: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_scheduler),
):
    try:
        job_id = scheduler.schedule_custom_reminder(
            user.id,
            payload.title,
            payload.message,
            payload.run_at,
            action_label=payload.action_label,
            action_href=payload.action_href,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"job_id": job_id}


@router.get("/reminders")
def list_reminders(
    user: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_scheduler),
):
    return {"reminders": scheduler.list_reminders(user.id)}


@router.delete("/reminders/{job_id}")
def cancel_reminder(
    job_id: str,
    user: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_scheduler),
):
    if not scheduler.cancel_reminder(user.id, job_id):
        raise HTTPException(status_code=404, detail="Reminder not found")
    return {"success": True}
