# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from pydantic import BaseModel, Field
from typing import List, Optional


class JournalCreateRequest(BaseModel):
    title: Optional[str] = ""
    content: str
    mood: Optional[float] = Field(None, ge=1, le=10)
    tags: List[str] = []


class JournalUpdateRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    mood: Optional[float] = Field(None, ge=1, le=10)
    tags: Optional[List[str]] = None
