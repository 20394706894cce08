# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


from .user import User
from .mood import MoodRecord
from .journal import JournalEntry
from .activity_session import ActivitySession, SessionType
from .message_model import Conversation, Message
from .insight import Insight
from .therapy_plan import TherapyPlan, TherapySession
from .post import Post, PostReply, PostLike, SavedPost
from .notification import Notification
