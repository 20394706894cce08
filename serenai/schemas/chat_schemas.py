# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from pydantic import BaseModel
from typing import List, Literal, Optional


class ChatRequest(BaseModel):
    message: str
    conversation_id: Optional[int] = None


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class SaveConversationRequest(BaseModel):
    messages: List[ChatMessage]
    title: Optional[str] = None
