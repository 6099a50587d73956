from __future__ import annotations

from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shiftdesk.settings import get_settings


def _engine_kwargs(url: str) -> dict[str, Any]:
    if not url.startswith("sqlite"):
        return {}

    kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    # In-memory SQLite lives inside a single connection; share it across threads.
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


_settings = get_settings()

engine = create_engine(_settings.resolved_db_url(), **_engine_kwargs(_settings.resolved_db_url()))

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Main DB dependency.

    - Handlers that list posts/tasks get visibility scoping for free: `shiftdesk.db.filters`
      reads `Session.info["authz"]`, which is copied here from the request once the
      pipeline has built the authorization context.
    """

    db = SessionLocal()
    try:
        authz = getattr(getattr(request, "state", None), "authz", None)
        if authz is not None:
            db.info["authz"] = authz
        yield db
    finally:
        db.close()
