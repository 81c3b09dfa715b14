"""Bakery back-office session liveness and account guard service."""

__version__ = "1.2.0"

from .config import SessionGuardConfig, get_app_config
from .scheduler import IOLoopScheduler, VirtualScheduler
from .session import (
    SessionLifecycle,
    SqlSessionStore,
    HostedSessionStore,
    HostedPresenceMonitor,
    PresenceMonitor,
)
from .app import make_app

__all__ = [
    "SessionGuardConfig",
    "get_app_config",
    "IOLoopScheduler",
    "VirtualScheduler",
    "SessionLifecycle",
    "SqlSessionStore",
    "HostedSessionStore",
    "HostedPresenceMonitor",
    "PresenceMonitor",
    "make_app",
]
