"""Session store clients.

A store is bound to one browser session (its access token) and exposes the
four capabilities the session runtime consumes. SqlSessionStore talks to the
relational schema directly; HostedSessionStore (hosted.py) goes through the
hosted backend's REST API.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .model import AuthSession, Profile, UserSession

log = logging.getLogger('bakery_hub.session')


class SessionStoreError(Exception):
    """A store operation failed (network, backend or database error)."""


@dataclass(frozen=True)
class Session:
    user_id: str
    access_token: str


class SessionStore:
    """Capabilities consumed by the session runtime."""

    async def get_current_session(self):
        """Return the signed-in Session, or None."""
        raise NotImplementedError

    async def sign_out(self):
        """Invalidate the current session. Raises SessionStoreError."""
        raise NotImplementedError

    async def get_profile_active_flag(self, user_id):
        """Return the profile's `active` flag, or None on any fetch error."""
        raise NotImplementedError

    async def upsert_liveness(self, user_id, timestamp, client_info):
        """Write the user's liveness row (conflict key: user_id). Raises SessionStoreError."""
        raise NotImplementedError

    async def close(self):
        pass


class SqlSessionStore(SessionStore):
    """Store backed by the profiles / auth_sessions / user_sessions tables.

    Every operation opens its own ORM session from session_factory so that
    rows changed by other writers (admins, other tabs) are always re-read.
    """

    def __init__(self, session_factory, access_token=None):
        self.session_factory = session_factory
        self.access_token = access_token

    def sign_in(self, user_id):
        """Create a session row for user_id and bind this store to it.

        This is how the direct-SQL backend issues tokens: the login page
        (outside this service) calls it after verifying credentials and sets
        the returned access_token as the session cookie. The hosted backend
        issues its own tokens.
        """
        token = secrets.token_urlsafe(32)
        with self.session_factory() as db:
            db.add(AuthSession(token=token, user_id=user_id, created_at=datetime.now(timezone.utc)))
            db.commit()
        self.access_token = token
        log.info(f"[SessionStore] Signed in {user_id}")
        return Session(user_id=user_id, access_token=token)

    async def get_current_session(self):
        if not self.access_token:
            return None
        try:
            with self.session_factory() as db:
                row = db.query(AuthSession).filter(AuthSession.token == self.access_token).first()
                if row is None:
                    return None
                return Session(user_id=row.user_id, access_token=row.token)
        except Exception as e:
            raise SessionStoreError(f"session lookup failed: {e}") from e

    async def sign_out(self):
        if not self.access_token:
            return
        try:
            with self.session_factory() as db:
                db.query(AuthSession).filter(AuthSession.token == self.access_token).delete()
                db.commit()
        except Exception as e:
            raise SessionStoreError(f"sign out failed: {e}") from e
        self.access_token = None

    async def get_profile_active_flag(self, user_id):
        try:
            with self.session_factory() as db:
                active = db.query(Profile.active).filter(Profile.id == user_id).scalar()
        except Exception as e:
            log.info(f"[SessionStore] Error reading active flag for {user_id}: {e}")
            return None
        return active if isinstance(active, bool) else None

    async def upsert_liveness(self, user_id, timestamp, client_info):
        values = {'user_id': user_id, 'last_seen_at': timestamp, 'user_agent': client_info}
        update_data = {'last_seen_at': timestamp, 'user_agent': client_info}

        try:
            with self.session_factory() as db:
                dialect = db.get_bind().dialect.name
                if dialect in ('sqlite', 'postgresql'):
                    insert = sqlite_insert if dialect == 'sqlite' else pg_insert
                    stmt = insert(UserSession).values(**values).on_conflict_do_update(
                        index_elements=['user_id'],
                        set_=update_data,
                    )
                    db.execute(stmt)
                else:
                    row = db.query(UserSession).filter(UserSession.user_id == user_id).first()
                    if row is None:
                        db.add(UserSession(**values))
                    else:
                        row.last_seen_at = timestamp
                        row.user_agent = client_info
                db.commit()
        except Exception as e:
            raise SessionStoreError(f"liveness upsert failed for {user_id}: {e}") from e
