"""Tornado request handlers."""

from .base import BaseHandler, SessionAuthMixin
from .presence import ActiveSessionsHandler, ForceLogoutHandler, PruneSessionsHandler
from .session import SessionInfoHandler, SessionSocketHandler
from .settings import SettingsHandler

__all__ = [
    "BaseHandler",
    "SessionAuthMixin",
    "ActiveSessionsHandler",
    "ForceLogoutHandler",
    "PruneSessionsHandler",
    "SessionInfoHandler",
    "SessionSocketHandler",
    "SettingsHandler",
]
