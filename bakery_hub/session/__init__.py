"""Session liveness and guard subsystem."""

from .model import SessionBase, Profile, AuthSession, UserSession
from .store import Session, SessionStore, SessionStoreError, SqlSessionStore
from .hosted import HostedPresenceMonitor, HostedSessionStore
from .events import ACTIVITY_EVENTS, ActivityEventSource
from .inactivity import ActivityTracker, InactivityGuard
from .poller import AccountActivePoller
from .heartbeat import HeartbeatPublisher
from .lifecycle import SessionLifecycle
from .presence import ADMIN_ROLES, PresenceMonitor, is_admin

__all__ = [
    "SessionBase",
    "Profile",
    "AuthSession",
    "UserSession",
    "Session",
    "SessionStore",
    "SessionStoreError",
    "SqlSessionStore",
    "HostedSessionStore",
    "HostedPresenceMonitor",
    "ACTIVITY_EVENTS",
    "ActivityEventSource",
    "ActivityTracker",
    "InactivityGuard",
    "AccountActivePoller",
    "HeartbeatPublisher",
    "SessionLifecycle",
    "ADMIN_ROLES",
    "PresenceMonitor",
    "is_admin",
]
