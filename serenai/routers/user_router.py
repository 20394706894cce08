# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from serenai.models.database import get_db
from serenai.models.user import User
from serenai.schemas.user_schemas import NotificationSettingsRequest, UserSyncRequest
from serenai.services.account_service import delete_user_account
from serenai.services.activity_aggregator import user_dashboard_stats
from serenai.services.notification_service import send_welcome_notification
from serenai.services.reminder_scheduler import ReminderScheduler, get_scheduler
from serenai.utils.auth_utils import get_current_user, require_token

router = APIRouter(prefix="/user", tags=["User"])
logger = logging.getLogger(__name__)


def _claim_name(claims: dict) -> str:
    parts = [claims.get("given_name") or "", claims.get("family_name") or ""]
    return " ".join(p for p in parts if p).strip() or (claims.get("name") or "")


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "external_id": user.external_id,
        "email": user.email,
        "name": user.name,
        "avatar": user.avatar,
        "is_moderator": bool(user.is_moderator),
        "created_at": user.created_at.isoformat(),
    }


def serialize_settings(user: User) -> dict:
    return {
        "notifications_enabled": user.notifications_enabled,
        "daily_reminder_enabled": user.daily_reminder_enabled,
        "reminder_hour": user.reminder_hour,
        "weekly_digest_enabled": user.weekly_digest_enabled,
    }


# ✅ Create or refresh the local user from the identity token
@router.post("/sync")
def sync_user(
    payload: Optional[UserSyncRequest] = None,
    user_data: dict = Depends(require_token),
    db: Session = Depends(get_db),
):
    external_id = str(user_data["sub"])
    payload = payload or UserSyncRequest()

    incoming = {
        "email": payload.email or user_data.get("email") or "",
        "name": payload.name or _claim_name(user_data),
        "avatar": payload.avatar or user_data.get("picture") or "",
    }

    user = db.query(User).filter(User.external_id == external_id).first()
    created = False

    if not user:
        user = User(external_id=external_id, **incoming)
        db.add(user)
        try:
            db.commit()
            created = True
        except IntegrityError:
            # Parallel first sync already created the row
            db.rollback()
            user = db.query(User).filter(User.external_id == external_id).first()

    if not created:
        # Empty incoming values keep the stored ones
        for field_name, value in incoming.items():
            if value:
                setattr(user, field_name, value)
        db.commit()

    db.refresh(user)

    if created:
        send_welcome_notification(db, user.id, user.name)
        logger.info("👋 New user synced: %s", user.id)

    return {"success": True, "user": serialize_user(user)}


@router.get("/stats")
def get_user_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return user_dashboard_stats(db, user)


@router.get("/settings")
def get_settings(user: User = Depends(get_current_user)):
    return serialize_settings(user)


@router.put("/settings")
def update_settings(
    payload: NotificationSettingsRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    for field_name, value in payload.model_dump(exclude_none=True).items():
        setattr(user, field_name, value)
    db.commit()
    db.refresh(user)
    return serialize_settings(user)


# 🗑️ Remove the account and every record it owns
@router.delete("/delete")
def delete_user(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_scheduler),
):
    user_id = user.id
    try:
        deleted = delete_user_account(db, user)
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to delete user account")

    # Pending reminders outlive the rows; ids may be reused by the next signup
    deleted["Reminder"] = scheduler.cancel_all(user_id)
    return {"success": True, "deleted": deleted}
