from datetime import timedelta

from conftest import make_headers

from serenai.models.activity_session import ActivitySession, SessionType
from serenai.models.journal import JournalEntry
from serenai.models.mood import MoodRecord
from serenai.models.notification import Notification
from serenai.models.user import User
from serenai.utils.jwt_utils import create_access_token


def test_public_endpoints(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").status_code == 200


def test_healthz_hides_database_errors(client, monkeypatch):
    class BrokenSession:
        def execute(self, *args, **kwargs):
            raise RuntimeError("could not connect to postgresql://serenai:hunter2@db/serenai")

        def close(self):
            pass

    monkeypatch.setattr("serenai.routers.healthz_router.SessionLocal", BrokenSession)

    res = client.get("/healthz")

    assert res.status_code == 200
    assert res.json()["status"] == "error"
    assert res.json()["details"]["db_connection"] is False
    assert "error" not in res.json()
    assert "hunter2" not in res.text


def test_missing_or_bad_token_is_401(client, user):
    assert client.get("/journal").status_code == 401
    assert client.get("/journal", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/journal", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401

    expired = create_access_token({"sub": user.external_id}, expires_delta=timedelta(minutes=-5))
    assert client.get("/journal", headers={"Authorization": f"Bearer {expired}"}).status_code == 401


def test_unsynced_user_is_404(client):
    res = client.get("/user/stats", headers=make_headers("never_synced"))
    assert res.status_code == 404
    assert res.json()["detail"] == "User not found"


def test_sync_creates_user_with_welcome_notification(client, db):
    headers = make_headers("idp_123", email="ada@example.com", given_name="Ada", family_name="Lovelace")

    res = client.post("/user/sync", headers=headers)

    assert res.status_code == 200
    synced = res.json()["user"]
    assert synced["email"] == "ada@example.com"
    assert synced["name"] == "Ada Lovelace"
    assert db.query(Notification).filter(Notification.user_id == synced["id"]).count() == 1


def test_resync_keeps_stored_values_when_claims_are_empty(client, db):
    client.post("/user/sync", headers=make_headers("idp_123", email="ada@example.com", name="Ada"))

    res = client.post("/user/sync", json={"avatar": "https://img/ada.png"}, headers=make_headers("idp_123"))

    synced = res.json()["user"]
    assert synced["email"] == "ada@example.com"
    assert synced["name"] == "Ada"
    assert synced["avatar"] == "https://img/ada.png"
    assert db.query(User).count() == 1
    # welcome only once
    assert db.query(Notification).count() == 1


def test_settings_roundtrip_and_validation(client, user, auth_headers):
    assert client.get("/user/settings", headers=auth_headers).json()["reminder_hour"] == 9

    res = client.put("/user/settings", json={"reminder_hour": 20, "weekly_digest_enabled": False}, headers=auth_headers)
    assert res.json()["reminder_hour"] == 20
    assert res.json()["weekly_digest_enabled"] is False
    assert res.json()["daily_reminder_enabled"] is True

    assert client.put("/user/settings", json={"reminder_hour": 25}, headers=auth_headers).status_code == 400


def test_stats_endpoint_for_new_user(client, user, auth_headers):
    stats = client.get("/user/stats", headers=auth_headers).json()

    assert stats["avg_mood"] == 0
    assert stats["has_mood_data"] is False
    assert stats["streak"] == 0
    assert len(stats["mood_data"]) == 7


def test_mood_create_validates_range(client, db, user, auth_headers):
    assert client.post("/mood", json={"mood": 11}, headers=auth_headers).status_code == 400
    assert client.post("/mood", json={"mood": 0}, headers=auth_headers).status_code == 400
    assert client.post("/mood", json={}, headers=auth_headers).status_code == 400
    assert db.query(MoodRecord).count() == 0


def test_mood_create_logs_session_and_feeds_stats(client, db, user, auth_headers):
    res = client.post("/mood", json={"mood": 7.5, "note": "  calm morning  "}, headers=auth_headers)

    assert res.status_code == 200
    assert res.json()["mood_record"]["note"] == "calm morning"
    session = db.query(ActivitySession).one()
    assert session.session_type == SessionType.mood
    assert session.duration == 60

    stats = client.get("/user/stats", headers=auth_headers).json()
    assert stats["avg_mood"] == 7.5
    assert stats["streak"] == 1


def test_mood_delete_checks_ownership(client, db, user, other_user, auth_headers, other_headers):
    record_id = client.post("/mood", json={"mood": 5}, headers=auth_headers).json()["mood_record"]["id"]

    assert client.delete(f"/mood/{record_id}", headers=other_headers).status_code == 404
    assert db.query(MoodRecord).count() == 1

    assert client.delete(f"/mood/{record_id}", headers=auth_headers).status_code == 200
    assert client.get("/mood", headers=auth_headers).json()["mood_records"] == []


def test_journal_crud(client, db, user, other_user, auth_headers, other_headers):
    created = client.post(
        "/journal",
        json={"title": "Tuesday", "content": "Felt anxious before the meeting", "mood": 4, "tags": ["work", "anxiety", "work"]},
        headers=auth_headers,
    ).json()["entry"]
    assert created["tags"] == ["work", "anxiety"]
    assert db.query(ActivitySession).filter(ActivitySession.session_type == SessionType.journal).one().duration == 300

    entry_id = created["id"]
    assert client.put(f"/journal/{entry_id}", json={"title": "x"}, headers=other_headers).status_code == 404
    assert client.delete(f"/journal/{entry_id}", headers=other_headers).status_code == 404

    updated = client.put(f"/journal/{entry_id}", json={"content": "It went fine"}, headers=auth_headers).json()["entry"]
    assert updated["content"] == "It went fine"
    assert updated["title"] == "Tuesday"

    assert client.put(f"/journal/{entry_id}", json={"content": "  "}, headers=auth_headers).status_code == 400

    entries = client.get("/journal", headers=auth_headers).json()["entries"]
    assert [e["id"] for e in entries] == [entry_id]
    assert client.get("/journal", headers=other_headers).json()["entries"] == []

    assert client.delete(f"/journal/{entry_id}", headers=auth_headers).status_code == 200
    assert db.query(JournalEntry).count() == 0


def test_journal_requires_content(client, user, auth_headers):
    assert client.post("/journal", json={"title": "empty", "content": ""}, headers=auth_headers).status_code == 400
    assert client.post("/journal", json={"title": "missing"}, headers=auth_headers).status_code == 400


def test_journal_prompt_uses_latest_mood(client, user, auth_headers, monkeypatch):
    seen = []
    monkeypatch.setattr(
        "serenai.routers.journal_router.generate_journal_prompt",
        lambda mood=None: seen.append(mood) or "What made you smile?",
    )
    client.post("/mood", json={"mood": 3}, headers=auth_headers)

    res = client.get("/journal/prompt", headers=auth_headers)

    assert res.json() == {"prompt": "What made you smile?"}
    assert seen == [3]


def test_journal_prompt_falls_back_when_provider_is_down(client, user, auth_headers):
    assert client.get("/journal/prompt", headers=auth_headers).json() == {"prompt": "What's on your mind today?"}


def test_journal_analyze(client, user, other_headers, auth_headers, monkeypatch):
    monkeypatch.setattr(
        "serenai.routers.journal_router.analyze_sentiment",
        lambda text: {"mood": 8, "emotions": ["relief"], "summary": text[:10]},
    )
    entry_id = client.post("/journal", json={"content": "Finally finished the project"}, headers=auth_headers).json()["entry"]["id"]

    res = client.post(f"/journal/{entry_id}/analyze", headers=auth_headers).json()

    assert res["analysis"]["emotions"] == ["relief"]
    assert client.post(f"/journal/{entry_id}/analyze", headers=other_headers).status_code == 404


def test_unexpected_errors_become_generic_500(client, user, auth_headers, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr("serenai.routers.user_router.user_dashboard_stats", broken)

    res = client.get("/user/stats", headers=auth_headers)

    assert res.status_code == 500
    assert res.json() == {"detail": "Internal server error"}
