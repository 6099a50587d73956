from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftdesk.db.session import get_db
from shiftdesk.models.security import Actor
from shiftdesk.models.workforce import Post
from shiftdesk.schemas.workforce import PostIn, PostOut, PostUpdate
from shiftdesk.security.abilities import can
from shiftdesk.security.context import AuthorizationContext
from shiftdesk.security.dependencies import ensure_allowed, get_authz_context, get_current_actor

router = APIRouter(prefix="/posts", tags=["posts"])


class PollVisibilityOut(BaseModel):
    post_id: int
    is_anonymous: bool
    can_view_votes: bool


def _get_post(db: Session, post_id: int) -> Post:
    post = db.scalars(select(Post).where(Post.id == post_id)).first()
    if post is None:
        # Another actor's draft is filtered out and reads as missing.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


@router.get("", response_model=list[PostOut])
def list_posts(
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> list[Post]:
    ensure_allowed(ctx, "view_any", "post")
    # Drafts of other actors are hidden by shiftdesk/db/filters.py.
    return list(db.scalars(select(Post).order_by(Post.id.desc())).all())


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> Post:
    ensure_allowed(ctx, "create", "post")
    post = Post(user_id=actor.id, title=payload.title, body=payload.body, is_public=payload.is_public)
    db.add(post)
    db.commit()
    return _get_post(db, post.id)


@router.get("/{post_id}", response_model=PostOut)
def show_post(
    post_id: int,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> Post:
    post = _get_post(db, post_id)
    ensure_allowed(ctx, "view", "post", post)
    return post


@router.patch("/{post_id}", response_model=PostOut)
def update_post(
    post_id: int,
    payload: PostUpdate,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> Post:
    post = _get_post(db, post_id)
    ensure_allowed(ctx, "update", "post", post)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(post, field, value)
    db.commit()
    return _get_post(db, post_id)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> Response:
    post = _get_post(db, post_id)
    ensure_allowed(ctx, "delete", "post", post)

    if post.poll is not None:
        db.delete(post.poll)
    db.delete(post)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{post_id}/poll", response_model=PollVisibilityOut)
def poll_visibility(
    post_id: int,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> PollVisibilityOut:
    post = _get_post(db, post_id)
    ensure_allowed(ctx, "view", "post", post)
    if post.poll is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Poll not found")

    return PollVisibilityOut(
        post_id=post.id,
        is_anonymous=post.poll.is_anonymous,
        can_view_votes=can(ctx, "view_anonymous_votes", "poll", post.poll),
    )
