from datetime import datetime, timedelta

from pytz import timezone, utc

from serenai.models.activity_session import ActivitySession, SessionType
from serenai.models.journal import JournalEntry
from serenai.models.message_model import Conversation
from serenai.models.mood import MoodRecord
from serenai.services.activity_aggregator import (
    WEEKLY_ACTIVITY_GOAL,
    activity_streak,
    average_mood,
    daily_mood_series,
    most_active_weekday,
    mood_trend,
    user_dashboard_stats,
    weekly_insight_stats,
)

# Wednesday
NOW = datetime(2024, 5, 15, 12, 0)


def days_ago(n, hour=10):
    return (NOW - timedelta(days=n)).replace(hour=hour)


def test_average_of_nothing_is_zero():
    assert average_mood([]) == 0.0
    assert average_mood([4, 6]) == 5.0


def test_mood_trend_directions():
    assert mood_trend([5, 5, 8, 8]) == "up"
    assert mood_trend([8, 8, 5, 5]) == "down"
    assert mood_trend([5, 5.4]) == "stable"
    assert mood_trend([7]) == "stable"
    assert mood_trend([]) == "stable"


def test_mood_trend_odd_length_puts_middle_in_second_half():
    # first half [1], second half [2, 9]
    assert mood_trend([1, 2, 9]) == "up"


def test_mood_trend_threshold_is_strict():
    assert mood_trend([5, 5.5]) == "stable"


def test_streak_counts_today_yesterday_and_before():
    stamps = [days_ago(0), days_ago(1), days_ago(2)]
    assert activity_streak(stamps, now=NOW, tz=utc) == 3


def test_streak_stops_at_first_gap():
    assert activity_streak([days_ago(0), days_ago(2), days_ago(3)], now=NOW, tz=utc) == 1


def test_streak_anchors_on_yesterday_when_today_is_empty():
    assert activity_streak([days_ago(1), days_ago(2)], now=NOW, tz=utc) == 2


def test_streak_is_zero_without_recent_activity():
    assert activity_streak([], now=NOW, tz=utc) == 0
    assert activity_streak([days_ago(2), days_ago(3)], now=NOW, tz=utc) == 0


def test_streak_duplicates_count_once():
    stamps = [days_ago(0, hour=1), days_ago(0, hour=5), days_ago(0, hour=9)]
    assert activity_streak(stamps, now=NOW, tz=utc) == 1


def test_streak_uses_local_calendar_days():
    kolkata = timezone("Asia/Kolkata")
    # 20:00 UTC on the 14th is already the 15th in Kolkata
    stamps = [datetime(2024, 5, 14, 20, 0)]
    assert activity_streak(stamps, now=NOW, tz=kolkata) == 1
    assert activity_streak(stamps, now=NOW, tz=utc) == 1
    assert activity_streak([datetime(2024, 5, 13, 20, 0)], now=NOW, tz=kolkata) == 1
    assert activity_streak([datetime(2024, 5, 13, 20, 0)], now=NOW, tz=utc) == 0


def test_daily_series_has_seven_days_oldest_first():
    records = [(days_ago(0, hour=8), 6), (days_ago(0, hour=9), 8), (days_ago(3), 4)]
    series = daily_mood_series(records, now=NOW, tz=utc)

    assert len(series) == 7
    assert series[0]["date"] == "2024-05-09"
    assert series[-1] == {"day": "Wed", "date": "2024-05-15", "mood": 7.0}
    assert series[3]["mood"] == 4
    assert series[1]["mood"] == 0


def test_most_active_weekday_tie_goes_to_earliest():
    sunday = datetime(2024, 5, 12, 10)
    monday = datetime(2024, 5, 13, 10)
    assert most_active_weekday([monday, sunday], tz=utc) == "Sunday"
    assert most_active_weekday([monday, monday, sunday], tz=utc) == "Monday"


def test_most_active_weekday_without_events():
    assert most_active_weekday([], tz=utc) is None


def test_dashboard_stats(db, user):
    for i, mood in enumerate([2, 9, 9, 9, 9, 9, 9, 9]):
        # the oldest record (2) falls outside the 7 most recent
        db.add(MoodRecord(user_id=user.id, mood=mood, created_at=NOW - timedelta(hours=8 - i)))
    for i in range(WEEKLY_ACTIVITY_GOAL + 1):
        db.add(JournalEntry(user_id=user.id, content=f"entry {i}", created_at=days_ago(i)))
    db.add(JournalEntry(user_id=user.id, content="old", created_at=days_ago(20)))
    for n in (0, 1, 2, 4):
        db.add(ActivitySession(user_id=user.id, session_type=SessionType.mood, duration=60, created_at=days_ago(n)))
    db.commit()

    stats = user_dashboard_stats(db, user, now=NOW, tz=utc)

    assert stats["avg_mood"] == 9
    assert stats["has_mood_data"] is True
    assert stats["streak"] == 3
    assert stats["completed_activities"] == WEEKLY_ACTIVITY_GOAL
    assert len(stats["mood_data"]) == 7


def test_dashboard_stats_for_new_user(db, user):
    stats = user_dashboard_stats(db, user, now=NOW, tz=utc)

    assert stats["avg_mood"] == 0.0
    assert stats["has_mood_data"] is False
    assert stats["streak"] == 0
    assert stats["completed_activities"] == 0
    assert all(point["mood"] == 0 for point in stats["mood_data"])


def test_dashboard_stats_ignore_other_users(db, user, other_user):
    db.add(MoodRecord(user_id=other_user.id, mood=3, created_at=NOW))
    db.commit()

    assert user_dashboard_stats(db, user, now=NOW, tz=utc)["has_mood_data"] is False


def test_weekly_insight_stats(db, user):
    for n, mood in ((6, 3), (5, 3), (1, 8), (0, 8)):
        db.add(MoodRecord(user_id=user.id, mood=mood, created_at=days_ago(n)))
    db.add(MoodRecord(user_id=user.id, mood=1, created_at=days_ago(30)))
    db.add(JournalEntry(user_id=user.id, content="a", tags=["calm", "work"], created_at=days_ago(1)))
    db.add(JournalEntry(user_id=user.id, content="b", tags=["work"], created_at=days_ago(0)))
    db.add(Conversation(user_id=user.id, title="talk", created_at=days_ago(0)))
    db.commit()

    stats = weekly_insight_stats(db, user, now=NOW, tz=utc)

    assert stats["mood_records"] == 4
    assert stats["journal_entries"] == 2
    assert stats["chat_sessions"] == 1
    assert stats["avg_mood"] == 5.5
    assert stats["mood_trend"] == "up"
    assert stats["most_common_emotion"] == "work"
    assert stats["most_active_day"] == "Wednesday"


def test_weekly_insight_stats_empty(db, user):
    stats = weekly_insight_stats(db, user, now=NOW, tz=utc)

    assert stats["avg_mood"] == 0.0
    assert stats["has_mood_data"] is False
    assert stats["mood_trend"] == "stable"
    assert stats["most_common_emotion"] is None
    assert stats["most_active_day"] is None
