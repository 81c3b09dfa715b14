"""Presence queries over liveness rows for the back-office 'who is online' view."""

import logging
from datetime import datetime, timedelta, timezone

from .model import AuthSession, Profile, UserSession

log = logging.getLogger('bakery_hub.session')

ADMIN_ROLES = frozenset({'admin', 'super_admin', 'gerant', 'administrateur', 'manager'})


def is_admin(profile):
    """True if the profile's role grants back-office administration."""
    if profile is None:
        return False
    return (profile.role or '').lower() in ADMIN_ROLES


def presence_entry(user_id, last_seen, user_agent, email=None, full_name=None, role=None):
    """One row of the active sessions list."""
    if last_seen.tzinfo is None:
        last_seen = last_seen.replace(tzinfo=timezone.utc)
    return {
        "id": user_id,
        "email": email or '',
        "full_name": full_name or 'Unknown',
        "role": role or 'Unknown',
        "last_seen_at": last_seen.isoformat(),
        "user_agent": user_agent,
    }


class PresenceMonitor:
    """Admin operations on profiles, auth sessions and liveness rows.

    HostedPresenceMonitor (hosted.py) offers the same operations against the
    hosted backend.

    Usage:
        monitor = PresenceMonitor(session_factory)
        users = await monitor.list_active(timedelta(hours=2))
        await monitor.force_logout(user_id)
        await monitor.prune_stale(timedelta(hours=24))
    """

    DEFAULT_WINDOW = timedelta(hours=2)
    DEFAULT_RETENTION = timedelta(hours=24)

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def get_profile(self, user_id):
        with self.session_factory() as db:
            profile = db.query(Profile).filter(Profile.id == user_id).first()
            if profile is not None:
                db.expunge(profile)
            return profile

    async def list_active(self, window=None, now=None):
        """Users seen within `window`, most recent first."""
        window = window or self.DEFAULT_WINDOW
        now = now or datetime.now(timezone.utc)
        cutoff = now - window

        with self.session_factory() as db:
            rows = db.query(UserSession, Profile).outerjoin(
                Profile, Profile.id == UserSession.user_id
            ).filter(
                UserSession.last_seen_at >= cutoff,
            ).order_by(UserSession.last_seen_at.desc()).all()

            return [
                presence_entry(
                    liveness.user_id, liveness.last_seen_at, liveness.user_agent,
                    email=profile.email if profile else None,
                    full_name=profile.full_name if profile else None,
                    role=profile.role if profile else None,
                )
                for liveness, profile in rows
            ]

    async def force_logout(self, user_id):
        """Invalidate every session of a user and drop their liveness row.

        Returns the number of auth sessions removed.
        """
        with self.session_factory() as db:
            try:
                count = db.query(AuthSession).filter(AuthSession.user_id == user_id).delete()
                db.query(UserSession).filter(UserSession.user_id == user_id).delete()
                db.commit()
            except Exception:
                db.rollback()
                raise

        log.info(f"[Presence] Forced logout of {user_id}: {count} session(s) invalidated")
        return count

    async def prune_stale(self, older_than=None, now=None):
        """Remove liveness rows not refreshed within `older_than`. Returns the count."""
        older_than = older_than or self.DEFAULT_RETENTION
        cutoff = (now or datetime.now(timezone.utc)) - older_than

        with self.session_factory() as db:
            try:
                count = db.query(UserSession).filter(UserSession.last_seen_at < cutoff).delete()
                db.commit()
            except Exception:
                db.rollback()
                raise

        if count > 0:
            log.info(f"[Presence] Pruned {count} stale liveness row(s)")
        return count

    async def close(self):
        pass
