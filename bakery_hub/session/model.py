"""ORM models - single source of truth for the session store, presence view and web app."""

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import declarative_base

SessionBase = declarative_base()


class Profile(SessionBase):
    """Back-office account. `active` is changed only by administrators."""
    __tablename__ = 'profiles'

    id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(64), nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class AuthSession(SessionBase):
    """A signed-in browser session. Deleting the row invalidates it."""
    __tablename__ = 'auth_sessions'

    token = Column(String(128), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class UserSession(SessionBase):
    """Liveness record: one row per user, last writer wins."""
    __tablename__ = 'user_sessions'

    user_id = Column(String(64), primary_key=True)
    last_seen_at = Column(DateTime(timezone=True), nullable=False, index=True)
    user_agent = Column(String(512), nullable=True)
