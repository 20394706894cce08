# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from pydantic import BaseModel, Field
from typing import Optional


class MoodCreateRequest(BaseModel):
    mood: float = Field(..., ge=1, le=10)
    note: Optional[str] = None
