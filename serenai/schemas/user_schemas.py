# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from pydantic import BaseModel, Field
from typing import Optional


class UserSyncRequest(BaseModel):
    # Overrides for the token claims; empty values keep what is stored
    email: Optional[str] = None
    name: Optional[str] = None
    avatar: Optional[str] = None


class NotificationSettingsRequest(BaseModel):
    notifications_enabled: Optional[bool] = None
    daily_reminder_enabled: Optional[bool] = None
    reminder_hour: Optional[int] = Field(None, ge=0, le=23)
    weekly_digest_enabled: Optional[bool] = None
