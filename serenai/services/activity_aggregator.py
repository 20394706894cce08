# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

"""
Read-only statistics over a user's mood records, journal entries, conversations
and activity sessions. The pure helpers take plain timestamps/values so they can
be reused by the scheduler and tested without a database; the composites run the
queries and assemble the payloads returned by /user/stats and /insights/stats.
"""

from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from pytz import utc
from sqlalchemy.orm import Session

from serenai.models.activity_session import ActivitySession
from serenai.models.journal import JournalEntry
from serenai.models.message_model import Conversation
from serenai.models.mood import MoodRecord
from serenai.models.user import User
from serenai.utils.time_utils import local_date, local_midnight_utc

TREND_THRESHOLD = 0.5
RECENT_MOOD_COUNT = 7
WEEKLY_ACTIVITY_GOAL = 4

# Sunday-first, matching the chart labels
SHORT_DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def _sunday_index(day) -> int:
    return (day.weekday() + 1) % 7


def _utc_naive(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.utcnow()
    if now.tzinfo is not None:
        return now.astimezone(utc).replace(tzinfo=None)
    return now


# ---------------------------
# ✅ Pure helpers
# ---------------------------

def average_mood(values: Iterable[float]) -> float:
    """Arithmetic mean; 0.0 when there are no values (callers read 0 as "no data")."""
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def mood_trend(values: Iterable[float]) -> str:
    """
    Compare the mean of the first floor(n/2) values against the rest.
    Values must be in ascending time order.
    """
    values = list(values)
    if len(values) < 2:
        return "stable"

    middle = len(values) // 2
    first_half = average_mood(values[:middle])
    second_half = average_mood(values[middle:])

    if second_half > first_half + TREND_THRESHOLD:
        return "up"
    if second_half < first_half - TREND_THRESHOLD:
        return "down"
    return "stable"


def activity_streak(timestamps: Iterable[datetime], now: Optional[datetime] = None, tz=None) -> int:
    """
    Consecutive local calendar days with activity, anchored at today (or
    yesterday when today has nothing yet). 0 when neither day is active.
    """
    active_days = {local_date(ts, tz) for ts in timestamps}
    today = local_date(_utc_naive(now), tz)
    yesterday = today - timedelta(days=1)

    if today in active_days:
        day = today
    elif yesterday in active_days:
        day = yesterday
    else:
        return 0

    streak = 0
    while day in active_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def daily_mood_series(records: Iterable, now: Optional[datetime] = None, tz=None, days: int = 7) -> List[dict]:
    """
    `records` are (created_at, mood) pairs. Returns one point per calendar day,
    oldest first, with the day's mean mood or 0 when nothing was logged.
    """
    by_day = defaultdict(list)
    for created_at, mood in records:
        by_day[local_date(created_at, tz)].append(mood)

    today = local_date(_utc_naive(now), tz)
    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        series.append({
            "day": SHORT_DAY_NAMES[_sunday_index(day)],
            "date": day.isoformat(),
            "mood": average_mood(by_day.get(day, [])),
        })
    return series


def most_active_weekday(timestamps: Iterable[datetime], tz=None) -> Optional[str]:
    """Weekday with the most events; ties go to the earliest weekday (Sunday first)."""
    counts = [0] * 7
    for ts in timestamps:
        counts[_sunday_index(local_date(ts, tz))] += 1

    best = max(counts)
    if best == 0:
        return None
    return WEEKDAY_NAMES[counts.index(best)]


# ---------------------------
# ✅ Query-backed composites
# ---------------------------

def user_dashboard_stats(db: Session, user: User, now: Optional[datetime] = None, tz=None) -> dict:
    now = _utc_naive(now)

    recent_moods = (
        db.query(MoodRecord.mood)
        .filter(MoodRecord.user_id == user.id)
        .order_by(MoodRecord.created_at.desc())
        .limit(RECENT_MOOD_COUNT)
        .all()
    )
    mood_values = [mood for (mood,) in recent_moods]

    session_times = [
        created_at for (created_at,) in
        db.query(ActivitySession.created_at).filter(ActivitySession.user_id == user.id).all()
    ]

    journal_count = (
        db.query(JournalEntry)
        .filter(JournalEntry.user_id == user.id, JournalEntry.created_at >= now - timedelta(days=7))
        .count()
    )

    series_start = local_midnight_utc(local_date(now, tz) - timedelta(days=6), tz)
    series_records = (
        db.query(MoodRecord.created_at, MoodRecord.mood)
        .filter(MoodRecord.user_id == user.id, MoodRecord.created_at >= series_start)
        .all()
    )

    return {
        "avg_mood": average_mood(mood_values),
        "has_mood_data": bool(mood_values),
        "streak": activity_streak(session_times, now, tz),
        "completed_activities": min(journal_count, WEEKLY_ACTIVITY_GOAL),
        "mood_data": daily_mood_series(series_records, now, tz),
    }


def weekly_insight_stats(db: Session, user: User, now: Optional[datetime] = None, tz=None) -> dict:
    now = _utc_naive(now)
    cutoff = local_midnight_utc(local_date(now, tz) - timedelta(days=7), tz)

    moods = (
        db.query(MoodRecord.created_at, MoodRecord.mood)
        .filter(MoodRecord.user_id == user.id, MoodRecord.created_at >= cutoff)
        .order_by(MoodRecord.created_at.asc(), MoodRecord.id.asc())
        .all()
    )
    journals = (
        db.query(JournalEntry.created_at, JournalEntry.tags)
        .filter(JournalEntry.user_id == user.id, JournalEntry.created_at >= cutoff)
        .order_by(JournalEntry.created_at.asc())
        .all()
    )
    conversation_times = [
        created_at for (created_at,) in
        db.query(Conversation.created_at)
        .filter(Conversation.user_id == user.id, Conversation.created_at >= cutoff)
        .all()
    ]

    mood_values = [mood for _, mood in moods]

    tag_counter = Counter()
    for _, tags in journals:
        tag_counter.update(tags or [])
    most_common = tag_counter.most_common(1)

    activity_times = [ts for ts, _ in moods] + [ts for ts, _ in journals] + conversation_times

    return {
        "avg_mood": average_mood(mood_values),
        "has_mood_data": bool(mood_values),
        "journal_entries": len(journals),
        "chat_sessions": len(conversation_times),
        "mood_records": len(moods),
        "mood_trend": mood_trend(mood_values),
        "most_common_emotion": most_common[0][0] if most_common else None,
        "most_active_day": most_active_weekday(activity_times, tz),
    }


def insight_window(db: Session, user: User, days: int = 30, now: Optional[datetime] = None) -> dict:
    """Mood records, journal entries and conversations of the trailing window, newest first."""
    cutoff = _utc_naive(now) - timedelta(days=days)

    return {
        "mood_records": (
            db.query(MoodRecord)
            .filter(MoodRecord.user_id == user.id, MoodRecord.created_at >= cutoff)
            .order_by(MoodRecord.created_at.desc())
            .all()
        ),
        "journal_entries": (
            db.query(JournalEntry)
            .filter(JournalEntry.user_id == user.id, JournalEntry.created_at >= cutoff)
            .order_by(JournalEntry.created_at.desc())
            .all()
        ),
        "conversations": (
            db.query(Conversation)
            .filter(Conversation.user_id == user.id, Conversation.created_at >= cutoff)
            .order_by(Conversation.created_at.desc())
            .all()
        ),
    }


def window_prompt_data(window: dict) -> tuple:
    """(mood_data, journal_data, chat_data) lists used to build the insight/plan prompts."""
    mood_data = [
        {"date": r.created_at.date().isoformat(), "mood": r.mood, "note": r.note}
        for r in window["mood_records"]
    ]
    journal_data = [
        {"date": e.created_at.date().isoformat(), "content": e.content, "mood": e.mood, "tags": e.tags or []}
        for e in window["journal_entries"]
    ]
    chat_data = [
        {
            "date": c.created_at.date().isoformat(),
            "messages": [{"role": m.role, "content": m.content} for m in c.messages],
        }
        for c in window["conversations"]
    ]
    return mood_data, journal_data, chat_data
