from __future__ import annotations

from sqlalchemy import event, or_
from sqlalchemy.orm import Session, with_loader_criteria


@event.listens_for(Session, "do_orm_execute")
def _apply_visibility_filters(execute_state) -> None:
    """
    Transparent visibility scoping.

    List queries such as
        db.scalars(select(Post)).all()
    only return posts the actor may see: public ones plus their own drafts.
    Super-admins see everything.
    """

    if not execute_state.is_select:
        return

    authz = execute_state.session.info.get("authz")
    if authz is None or authz.is_bypassed:
        return

    # Local import to avoid cycles.
    from shiftdesk.models.workforce import Post  # noqa: WPS433 (local import)

    actor_id = authz.actor_id
    execute_state.statement = execute_state.statement.options(
        with_loader_criteria(
            Post,
            lambda cls: or_(cls.is_public.is_(True), cls.user_id == actor_id),
            include_aliases=True,
        ),
    )
