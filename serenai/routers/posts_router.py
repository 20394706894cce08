# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from serenai.models.database import get_db
from serenai.models.post import Post, PostReply, SavedPost
from serenai.models.user import User
from serenai.schemas.post_schemas import PostCreateRequest, PostUpdateRequest, ReplyCreateRequest
from serenai.services.community_service import (
    build_feed,
    serialize_post,
    serialize_reply,
    toggle_like,
    toggle_save,
)
from serenai.utils.auth_utils import get_current_user
from serenai.utils.json_utils import normalize_tags

router = APIRouter(prefix="/posts", tags=["Community"])
logger = logging.getLogger(__name__)


def _get_post(db: Session, post_id: int) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


def _owned_post(db: Session, user: User, post_id: int) -> Post:
    post = db.query(Post).filter(Post.id == post_id, Post.user_id == user.id).first()
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.get("")
def list_posts(
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    query = db.query(Post)
    if category:
        query = query.filter(Post.category == category)
    posts = query.order_by(Post.is_pinned.desc(), Post.created_at.desc(), Post.id.desc()).all()
    return {"posts": build_feed(db, user, posts)}


@router.post("")
def create_post(
    payload: PostCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not (payload.title.strip() and payload.content.strip() and payload.category.strip()):
        raise HTTPException(status_code=400, detail="Missing required fields")

    post = Post(
        user_id=user.id,
        title=payload.title.strip(),
        content=payload.content,
        category=payload.category.strip(),
        tags=normalize_tags(payload.tags),
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return {"post": serialize_post(post)}


@router.get("/saved")
def list_saved_posts(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    posts = (
        db.query(Post)
        .join(SavedPost, SavedPost.post_id == Post.id)
        .filter(SavedPost.user_id == user.id)
        .order_by(SavedPost.created_at.desc(), SavedPost.id.desc())
        .all()
    )
    return {"posts": build_feed(db, user, posts, saved_only=True)}


@router.put("/{post_id}")
def update_post(
    post_id: int,
    payload: PostUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    post = _owned_post(db, user, post_id)

    if payload.title is not None:
        post.title = payload.title.strip()
    if payload.content is not None:
        post.content = payload.content
    if payload.category is not None:
        post.category = payload.category.strip()
    if payload.tags is not None:
        post.tags = normalize_tags(payload.tags)

    db.commit()
    db.refresh(post)
    return {"post": build_feed(db, user, [post])[0]}


@router.delete("/{post_id}")
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    post = _owned_post(db, user, post_id)
    db.delete(post)
    db.commit()
    return {"success": True}


@router.post("/{post_id}/like")
def like_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return toggle_like(db, user, _get_post(db, post_id))


@router.post("/{post_id}/save")
def save_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return toggle_save(db, user, _get_post(db, post_id))


# 📌 Moderators only
@router.post("/{post_id}/pin")
def pin_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not user.is_moderator:
        raise HTTPException(status_code=403, detail="Only moderators can pin posts")

    post = _get_post(db, post_id)
    post.is_pinned = not post.is_pinned
    db.commit()
    logger.info("📌 Post %s pinned=%s by moderator %s", post.id, post.is_pinned, user.id)
    return {"pinned": bool(post.is_pinned)}


@router.get("/{post_id}/replies")
def list_replies(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    post = _get_post(db, post_id)
    replies = (
        db.query(PostReply)
        .filter(PostReply.post_id == post.id)
        .order_by(PostReply.created_at.asc(), PostReply.id.asc())
        .all()
    )
    return {"replies": [serialize_reply(r) for r in replies]}


@router.post("/{post_id}/replies")
def create_reply(
    post_id: int,
    payload: ReplyCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    post = _get_post(db, post_id)
    if not payload.content.strip():
        raise HTTPException(status_code=400, detail="Content is required")

    reply = PostReply(post_id=post.id, user_id=user.id, content=payload.content)
    db.add(reply)
    db.commit()
    db.refresh(reply)
    return {"reply": serialize_reply(reply)}
