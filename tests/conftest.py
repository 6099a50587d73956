"""
Pytest fixtures for the test suite.

Data-layer tests use their own in-memory SQLite engine and a session that rolls
back after each test, so tests do not affect each other.

HTTP tests run the real app against the module-level engine, which points at a
shared in-memory SQLite database (see the environment set below). Tables are
dropped and recreated around every app test; the app's startup then seeds the
capability catalog exactly as it would in production.
"""
from __future__ import annotations

import os

# Must be set before anything imports shiftdesk.settings / shiftdesk.db.session.
os.environ.setdefault("SHIFTDESK_DB_URL", "sqlite://")
os.environ.setdefault("SHIFTDESK_SEED_DEMO_DATA", "false")
os.environ.setdefault("SHIFTDESK_SESSION_SECRET", "test-secret")

from collections.abc import Iterable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from shiftdesk.db.base import Base
from shiftdesk.models import security as _security_models  # noqa: F401  (register tables)
from shiftdesk.models import workforce as _workforce_models  # noqa: F401  (register tables)
from shiftdesk.models.security import Actor, ActorStatus, Capability, Role
from shiftdesk.security.auth import hash_password

TEST_DB_URL = "sqlite:///:memory:"
TEST_PASSWORD = "secret-pass"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


# ---- App fixtures --------------------------------------------------------------------


@pytest.fixture
def client():
    """TestClient for a fresh app on a clean database; startup seeds the catalog."""
    from shiftdesk.db.session import engine as app_engine
    from shiftdesk.main import create_app

    Base.metadata.drop_all(bind=app_engine)
    with TestClient(create_app()) as test_client:
        yield test_client
    Base.metadata.drop_all(bind=app_engine)


@pytest.fixture
def app_db(client):
    """
    Short-lived sessions on the app database.

    Tests should commit and close what they open here; the app shares the same
    in-memory connection.
    """
    from shiftdesk.db.session import SessionLocal

    return SessionLocal


def _make_role(db: Session, name: str, capabilities: Iterable[str] = ()) -> Role:
    role = Role(name=name, guard_name="web")
    wanted = list(capabilities)
    if wanted:
        role.capabilities = list(db.scalars(select(Capability).where(Capability.name.in_(wanted))).all())
    db.add(role)
    db.flush()
    return role


def _make_actor(
    db: Session,
    email: str,
    roles: Iterable[Role] = (),
    *,
    status: ActorStatus = ActorStatus.ACTIVE,
    must_change_password: bool = False,
) -> Actor:
    actor = Actor(
        name=email.split("@")[0].title(),
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        status=status,
        must_change_password=must_change_password,
    )
    actor.roles = list(roles)
    db.add(actor)
    db.flush()
    return actor


def _login(client: TestClient, email: str, password: str = TEST_PASSWORD):
    return client.post("/login", json={"email": email, "password": password}, follow_redirects=False)


@pytest.fixture
def make_role():
    return _make_role


@pytest.fixture
def make_actor():
    return _make_actor


@pytest.fixture
def login():
    return _login
