from serenai.models.database import SessionLocal
from serenai.models.post import Post, PostLike, PostReply, SavedPost
from serenai.services.community_service import toggle_like


def make_post(client, headers, **overrides):
    body = {"title": "Small wins", "content": "I went for a walk today.", "category": "support", "tags": ["walk", "walk"]}
    body.update(overrides)
    res = client.post("/posts", json=body, headers=headers)
    assert res.status_code == 200
    return res.json()["post"]


def test_like_toggle_twice_restores_count(client, db, user, other_user, auth_headers, other_headers):
    post = make_post(client, other_headers)

    first = client.post(f"/posts/{post['id']}/like", headers=auth_headers).json()
    assert first == {"liked": True, "likes": 1}

    second = client.post(f"/posts/{post['id']}/like", headers=auth_headers).json()
    assert second == {"liked": False, "likes": 0}
    assert db.query(PostLike).count() == 0


class StaleLikeLookup:
    """Wraps a session so its like lookup misses a row another request already committed."""

    def __init__(self, session):
        self._session = session

    def query(self, *entities):
        if entities == (PostLike,):
            return self
        return self._session.query(*entities)

    def filter(self, *criteria):
        return self

    def delete(self, synchronize_session=None):
        return 0

    def __getattr__(self, name):
        return getattr(self._session, name)


def test_like_lost_to_concurrent_insert_reports_liked(db, user, other_user):
    post = Post(user_id=other_user.id, title="Small wins", content="c", category="support")
    db.add(post)
    db.commit()

    # the parallel request commits first
    racer = SessionLocal()
    racer.add(PostLike(user_id=user.id, post_id=post.id))
    racer.commit()
    racer.close()

    session = SessionLocal()
    try:
        result = toggle_like(StaleLikeLookup(session), user, post)

        assert result == {"liked": True, "likes": 1}
        # rolled back cleanly and still usable
        assert session.query(Post).count() == 1
        assert session.query(PostLike).filter(PostLike.user_id == user.id).count() == 1
    finally:
        session.close()

    db.expire_all()
    assert db.query(PostLike).count() == 1


def test_likes_from_several_users_are_counted(client, user, other_user, auth_headers, other_headers):
    post = make_post(client, auth_headers)

    client.post(f"/posts/{post['id']}/like", headers=auth_headers)
    res = client.post(f"/posts/{post['id']}/like", headers=other_headers).json()

    assert res == {"liked": True, "likes": 2}


def test_save_toggle(client, db, user, auth_headers):
    post = make_post(client, auth_headers)

    assert client.post(f"/posts/{post['id']}/save", headers=auth_headers).json() == {"saved": True}
    saved = client.get("/posts/saved", headers=auth_headers).json()["posts"]
    assert [p["id"] for p in saved] == [post["id"]]
    assert saved[0]["is_saved"] is True

    assert client.post(f"/posts/{post['id']}/save", headers=auth_headers).json() == {"saved": False}
    assert client.get("/posts/saved", headers=auth_headers).json()["posts"] == []
    assert db.query(SavedPost).count() == 0


def test_toggle_on_missing_post(client, user, auth_headers):
    assert client.post("/posts/999/like", headers=auth_headers).status_code == 404
    assert client.post("/posts/999/save", headers=auth_headers).status_code == 404


def test_feed_shows_counts_and_caller_state(client, user, other_user, auth_headers, other_headers):
    post = make_post(client, other_headers)
    client.post(f"/posts/{post['id']}/like", headers=auth_headers)
    client.post(f"/posts/{post['id']}/replies", json={"content": "Proud of you"}, headers=auth_headers)

    mine = client.get("/posts", headers=auth_headers).json()["posts"][0]
    theirs = client.get("/posts", headers=other_headers).json()["posts"][0]

    assert mine["likes"] == 1 and mine["replies"] == 1
    assert mine["is_liked"] is True
    assert theirs["is_liked"] is False
    assert mine["tags"] == ["walk"]
    assert mine["user"]["id"] == other_user.id


def test_create_post_requires_fields(client, user, auth_headers):
    res = client.post("/posts", json={"title": "", "content": "x", "category": "support"}, headers=auth_headers)
    assert res.status_code == 400

    res = client.post("/posts", json={"title": "t", "content": "x"}, headers=auth_headers)
    assert res.status_code == 400


def test_only_owner_edits_or_deletes(client, db, user, other_user, auth_headers, other_headers):
    post = make_post(client, auth_headers)

    assert client.put(f"/posts/{post['id']}", json={"title": "hacked"}, headers=other_headers).status_code == 404
    assert client.delete(f"/posts/{post['id']}", headers=other_headers).status_code == 404

    updated = client.put(f"/posts/{post['id']}", json={"title": "Bigger wins"}, headers=auth_headers).json()["post"]
    assert updated["title"] == "Bigger wins"

    client.post(f"/posts/{post['id']}/like", headers=other_headers)
    client.post(f"/posts/{post['id']}/save", headers=other_headers)
    client.post(f"/posts/{post['id']}/replies", json={"content": "nice"}, headers=other_headers)

    assert client.delete(f"/posts/{post['id']}", headers=auth_headers).status_code == 200
    assert db.query(Post).count() == 0
    assert db.query(PostLike).count() == 0
    assert db.query(SavedPost).count() == 0
    assert db.query(PostReply).count() == 0


def test_pin_requires_moderator(client, db, user, other_user, auth_headers, other_headers):
    post = make_post(client, auth_headers)
    later = make_post(client, auth_headers, title="Later post")

    assert client.post(f"/posts/{post['id']}/pin", headers=auth_headers).status_code == 403

    other_user.is_moderator = True
    db.commit()

    assert client.post(f"/posts/{post['id']}/pin", headers=other_headers).json() == {"pinned": True}

    feed = client.get("/posts", headers=auth_headers).json()["posts"]
    assert [p["id"] for p in feed] == [post["id"], later["id"]]
    assert feed[0]["is_pinned"] is True


def test_replies_are_listed_oldest_first(client, user, auth_headers):
    post = make_post(client, auth_headers)
    for text in ("first", "second"):
        client.post(f"/posts/{post['id']}/replies", json={"content": text}, headers=auth_headers)

    replies = client.get(f"/posts/{post['id']}/replies", headers=auth_headers).json()["replies"]

    assert [r["content"] for r in replies] == ["first", "second"]
    assert client.get("/posts/999/replies", headers=auth_headers).status_code == 404
