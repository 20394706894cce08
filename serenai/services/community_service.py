# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from serenai.models.post import Post, PostLike, PostReply, SavedPost
from serenai.models.user import User

logger = logging.getLogger(__name__)


def _toggle(db: Session, model, user_id: int, post_id: int) -> bool:
    """
    Flip the (user_id, post_id) row of `model`. Returns True when the row exists afterwards.
    The unique constraint decides concurrent inserts; a lost race means the row is already there.
    """
    removed = (
        db.query(model)
        .filter(model.user_id == user_id, model.post_id == post_id)
        .delete(synchronize_session=False)
    )
    if removed:
        db.commit()
        return False

    db.add(model(user_id=user_id, post_id=post_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("🔁 Concurrent %s insert for user %s on post %s", model.__tablename__, user_id, post_id)
    return True


def like_count(db: Session, post_id: int) -> int:
    return db.query(func.count(PostLike.id)).filter(PostLike.post_id == post_id).scalar() or 0


def toggle_like(db: Session, user: User, post: Post) -> dict:
    liked = _toggle(db, PostLike, user.id, post.id)
    return {"liked": liked, "likes": like_count(db, post.id)}


def toggle_save(db: Session, user: User, post: Post) -> dict:
    saved = _toggle(db, SavedPost, user.id, post.id)
    return {"saved": saved}


def serialize_author(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "avatar": user.avatar}


def serialize_post(post: Post, likes: int = 0, replies: int = 0, is_liked: bool = False, is_saved: bool = False) -> dict:
    return {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "category": post.category,
        "tags": post.tags or [],
        "is_pinned": bool(post.is_pinned),
        "user": serialize_author(post.user),
        "likes": likes,
        "replies": replies,
        "is_liked": is_liked,
        "is_saved": is_saved,
        "created_at": post.created_at.isoformat(),
        "updated_at": post.updated_at.isoformat() if post.updated_at else None,
    }


def serialize_reply(reply: PostReply) -> dict:
    return {
        "id": reply.id,
        "post_id": reply.post_id,
        "content": reply.content,
        "user": serialize_author(reply.user),
        "created_at": reply.created_at.isoformat(),
    }


def build_feed(db: Session, user: User, posts: List[Post], saved_only: bool = False) -> List[dict]:
    """Attach like/reply counts and the caller's like/save state to each post."""
    post_ids = [p.id for p in posts]
    if not post_ids:
        return []

    like_counts = dict(
        db.query(PostLike.post_id, func.count(PostLike.id))
        .filter(PostLike.post_id.in_(post_ids))
        .group_by(PostLike.post_id)
        .all()
    )
    reply_counts = dict(
        db.query(PostReply.post_id, func.count(PostReply.id))
        .filter(PostReply.post_id.in_(post_ids))
        .group_by(PostReply.post_id)
        .all()
    )
    liked_ids = {
        pid for (pid,) in
        db.query(PostLike.post_id).filter(PostLike.user_id == user.id, PostLike.post_id.in_(post_ids)).all()
    }
    if saved_only:
        saved_ids = set(post_ids)
    else:
        saved_ids = {
            pid for (pid,) in
            db.query(SavedPost.post_id).filter(SavedPost.user_id == user.id, SavedPost.post_id.in_(post_ids)).all()
        }

    return [
        serialize_post(
            p,
            likes=like_counts.get(p.id, 0),
            replies=reply_counts.get(p.id, 0),
            is_liked=p.id in liked_ids,
            is_saved=p.id in saved_ids,
        )
        for p in posts
    ]
