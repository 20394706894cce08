from datetime import datetime, timedelta

from pytz import utc

from conftest import make_headers

from serenai.models.activity_session import ActivitySession, SessionType
from serenai.models.database import SessionLocal
from serenai.models.insight import Insight
from serenai.models.journal import JournalEntry
from serenai.models.message_model import Conversation, Message
from serenai.models.mood import MoodRecord
from serenai.models.notification import Notification
from serenai.models.post import Post, PostLike, PostReply, SavedPost
from serenai.models.therapy_plan import TherapyPlan, TherapySession
from serenai.models.user import User
from serenai.services import account_service
from serenai.services.reminder_scheduler import ReminderScheduler

OWNED_MODELS = [
    MoodRecord, JournalEntry, ActivitySession, Conversation, Insight, TherapyPlan, Notification, Post,
]


def populate(db, user, other_user):
    conversation = Conversation(user_id=user.id, title="talk")
    plan = TherapyPlan(user_id=user.id, title="Plan", goals=["g"], activities=["a"], resources=["r"])
    post = Post(user_id=user.id, title="Mine", content="c", category="support")
    their_post = Post(user_id=other_user.id, title="Theirs", content="c", category="support")
    db.add_all([conversation, plan, post, their_post])
    db.flush()

    db.add_all([
        Message(conversation_id=conversation.id, role="user", content="hi"),
        MoodRecord(user_id=user.id, mood=6),
        JournalEntry(user_id=user.id, content="dear diary"),
        ActivitySession(user_id=user.id, session_type=SessionType.chat, duration=60),
        Insight(user_id=user.id, title="t", description="d"),
        TherapySession(plan_id=plan.id, title="s", scheduled_for=datetime.utcnow()),
        Notification(user_id=user.id, title="n", message="m"),
        # the user's activity on someone else's post
        PostLike(user_id=user.id, post_id=their_post.id),
        SavedPost(user_id=user.id, post_id=their_post.id),
        PostReply(user_id=user.id, post_id=their_post.id, content="me too"),
        # someone else's activity on the user's post
        PostLike(user_id=other_user.id, post_id=post.id),
        PostReply(user_id=other_user.id, post_id=post.id, content="nice"),
        MoodRecord(user_id=other_user.id, mood=4),
    ])
    db.commit()
    return their_post


def owned_counts(user_id):
    session = SessionLocal()
    try:
        counts = {model.__name__: session.query(model).filter(model.user_id == user_id).count() for model in OWNED_MODELS}
        counts["User"] = session.query(User).filter(User.id == user_id).count()
        counts["Message"] = session.query(Message).count()
        counts["TherapySession"] = session.query(TherapySession).count()
        return counts
    finally:
        session.close()


def test_delete_account_removes_everything(client, db, user, other_user, auth_headers):
    their_post = populate(db, user, other_user)
    user_id = user.id

    res = client.delete("/user/delete", headers=auth_headers)

    assert res.status_code == 200
    assert all(count == 0 for count in owned_counts(user_id).values())

    # other users keep their own data
    db.expire_all()
    assert db.query(Post).filter(Post.id == their_post.id).count() == 1
    assert db.query(MoodRecord).filter(MoodRecord.user_id == other_user.id).count() == 1
    assert db.query(PostLike).count() == 0
    assert db.query(SavedPost).count() == 0
    assert db.query(PostReply).count() == 0


def test_failed_step_rolls_back_everything(client, db, user, other_user, auth_headers, monkeypatch):
    populate(db, user, other_user)
    user_id = user.id
    before = owned_counts(user_id)

    def explode(session, uid):
        raise RuntimeError("disk on fire")

    steps = account_service.ACCOUNT_PURGE_STEPS
    monkeypatch.setattr(account_service, "ACCOUNT_PURGE_STEPS", steps[:4] + [("Boom", explode)] + steps[4:])

    res = client.delete("/user/delete", headers=auth_headers)

    assert res.status_code == 500
    assert owned_counts(user_id) == before
    assert before["MoodRecord"] == 1 and before["User"] == 1


def test_deleted_user_token_is_no_longer_resolved(client, user, auth_headers):
    assert client.delete("/user/delete", headers=auth_headers).status_code == 200
    assert client.get("/user/stats", headers=auth_headers).status_code == 404


def test_delete_account_cancels_pending_reminders(client, user, auth_headers):
    run_at = (datetime.utcnow() + timedelta(hours=1)).isoformat() + "Z"
    res = client.post(
        "/notifications/reminders",
        json={"title": "Therapist", "message": "Call Dr. Rivera about the results", "run_at": run_at},
        headers=auth_headers,
    )
    assert res.status_code == 200

    res = client.delete("/user/delete", headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["deleted"]["Reminder"] == 1

    scheduler = client.app.state.reminder_scheduler
    assert not [job for job in scheduler.scheduler.get_jobs() if job.id.startswith("custom-")]

    # the next signup may be handed the freed id
    newcomer = make_headers("newcomer", email="new@example.com")
    assert client.post("/user/sync", headers=newcomer).status_code == 200
    assert client.get("/notifications/reminders", headers=newcomer).json() == {"reminders": []}


def test_reminder_for_missing_user_is_not_delivered(db, user):
    scheduler = ReminderScheduler(session_factory=SessionLocal, tz=utc)
    missing_id = user.id + 100

    assert scheduler.deliver_custom_reminder(missing_id, "Therapist", "Call Dr. Rivera") == 0
    assert db.query(Notification).count() == 0
