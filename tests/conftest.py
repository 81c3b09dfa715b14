"""Shared fixtures for bakery_hub functional tests."""

import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bakery_hub.config import SessionGuardConfig
from bakery_hub.scheduler import VirtualScheduler
from bakery_hub.session.model import Profile, SessionBase
from bakery_hub.session.store import Session, SessionStore, SessionStoreError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Strip BAKERY_* env vars for test isolation."""
    for key in list(os.environ):
        if key.startswith("BAKERY_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def clock():
    return VirtualScheduler()


@pytest.fixture
def guard_config():
    """Default timings: 30 min timeout, 5 s throttle, 60 s poll, 5 min heartbeat."""
    return SessionGuardConfig()


def memory_session_factory():
    """sessionmaker wired to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionBase.metadata.create_all(engine)
    return sessionmaker(bind=engine)


@pytest.fixture
def session_factory():
    factory = memory_session_factory()
    yield factory
    factory.kw["bind"].dispose()


@pytest.fixture
def add_profile(session_factory):
    """Insert a profile row. Returns the user id."""
    def _add(user_id, active=True, role="vendeur", full_name=None, email=None):
        with session_factory() as db:
            db.add(Profile(
                id=user_id, active=active, role=role,
                full_name=full_name or user_id.title(),
                email=email or f"{user_id}@bakery.test",
            ))
            db.commit()
        return user_id
    return _add


class FakeSessionStore(SessionStore):
    """In-memory store that records every call."""

    def __init__(self, user_id="alice", active=True):
        self.session = Session(user_id=user_id, access_token="tok-" + user_id) if user_id else None
        self.active = active
        self.calls = []
        self.liveness = {}
        self.fail_sign_out = False
        self.fail_upsert = False
        self.fail_session = False

    async def get_current_session(self):
        self.calls.append(("get_current_session",))
        if self.fail_session:
            raise SessionStoreError("network down")
        return self.session

    async def sign_out(self):
        self.calls.append(("sign_out",))
        if self.fail_sign_out:
            raise SessionStoreError("sign out rejected")
        self.session = None

    async def get_profile_active_flag(self, user_id):
        self.calls.append(("get_profile_active_flag", user_id))
        return self.active

    async def upsert_liveness(self, user_id, timestamp, client_info):
        self.calls.append(("upsert_liveness", user_id, timestamp, client_info))
        if self.fail_upsert:
            raise SessionStoreError("upsert failed")
        self.liveness[user_id] = (timestamp, client_info)

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def store():
    return FakeSessionStore()


class Navigator:
    """Records navigate_to(path, query) calls."""

    def __init__(self):
        self.calls = []

    def __call__(self, path, query=None):
        self.calls.append((path, query))


@pytest.fixture
def navigator():
    return Navigator()
