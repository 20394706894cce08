# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class TherapySessionCreateRequest(BaseModel):
    title: Optional[str] = None
    notes: Optional[str] = None
    mood: Optional[float] = Field(None, ge=1, le=10)
    scheduled_for: Optional[datetime] = None


class TherapySessionUpdateRequest(BaseModel):
    completed: Optional[bool] = None
    notes: Optional[str] = None
    mood: Optional[float] = Field(None, ge=1, le=10)
