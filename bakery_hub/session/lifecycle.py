"""Starts and tears down the session runtime of one browser tab."""

import logging

from ..config import SessionGuardConfig
from .heartbeat import HeartbeatPublisher
from .inactivity import InactivityGuard
from .poller import AccountActivePoller

log = logging.getLogger('bakery_hub.session')


class SessionLifecycle:
    """Owns the inactivity guard, account poller and heartbeat of one tab.

    The three components run independently and only share the store.

    Usage:
        lifecycle = SessionLifecycle(store, events, navigate_to, scheduler)
        lifecycle.start()
        ...
        lifecycle.stop()
    """

    def __init__(self, store, events, navigate_to, scheduler, config=None,
                 client_info=None, login_path='/login'):
        self.config = config or SessionGuardConfig()
        self.guard = InactivityGuard(store, navigate_to, scheduler, self.config, events, login_path=login_path)
        self.poller = AccountActivePoller(
            store, navigate_to, scheduler, self.config.active_poll_interval, login_path=login_path)
        self.heartbeat = HeartbeatPublisher(store, scheduler, self.config.heartbeat_interval, client_info=client_info)
        self.running = False

    def start(self):
        if self.running:
            return
        self.running = True
        self.guard.start()
        self.poller.start()
        self.heartbeat.start()
        log.info(f"[SessionLifecycle] Started with {self.config!r}")

    def stop(self):
        if not self.running:
            return
        self.running = False
        self.guard.stop()
        self.poller.stop()
        self.heartbeat.stop()
        log.info("[SessionLifecycle] Stopped")
